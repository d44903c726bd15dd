from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base
from src.platform.types.utc_datetime import UtcDateTime


class SurpriseBoxModel(Base):
    __tablename__ = 'surprise_box'
    __table_args__ = (
        # Lazy reclaim / expiry sweeps: RESERVED rows ordered by expiry
        Index('idx_surprise_box_reserved_expiry', 'status', 'reservation_expires_at'),
        Index('idx_surprise_box_store_status', 'store_id', 'status'),
        CheckConstraint(
            "(status = 'reserved') = (reserved_by IS NOT NULL AND reservation_expires_at IS NOT NULL)",
            name='ck_surprise_box_reservation_fields',
        ),
        CheckConstraint('pickup_start_time < pickup_end_time', name='ck_surprise_box_pickup_window'),
        CheckConstraint('sale_start_time < sale_end_time', name='ck_surprise_box_sale_window'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(Integer, nullable=False)
    category_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    box_template_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    original_price: Mapped[int] = mapped_column(Integer, nullable=False)
    discounted_price: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    pickup_start_time: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    pickup_end_time: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    sale_start_time: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    sale_end_time: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='active')
    reserved_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    reserved_at: Mapped[Optional[datetime]] = mapped_column(UtcDateTime, nullable=True)
    reservation_expires_at: Mapped[Optional[datetime]] = mapped_column(UtcDateTime, nullable=True)

    # Denormalized at creation time for the read path; never re-synced
    business_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    store_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    store_city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    category_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
