from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base
from src.platform.types.utc_datetime import UtcDateTime


class OrderModel(Base):
    __tablename__ = 'orders'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    # One order per box
    surprise_box_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('surprise_box.id'), nullable=False, unique=True
    )
    store_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    pickup_code: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_type: Mapped[str] = mapped_column(String(10), nullable=False)
    fulfillment_type: Mapped[str] = mapped_column(String(10), nullable=False)
    order_date: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    pickuped_at: Mapped[Optional[datetime]] = mapped_column(UtcDateTime, nullable=True)
    cancelled_by: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UtcDateTime, nullable=True)
    refund_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)


class PaymentModel(Base):
    __tablename__ = 'payment'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('orders.id'), nullable=False, index=True
    )
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payment_gateway: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_date: Mapped[Optional[datetime]] = mapped_column(UtcDateTime, nullable=True)
    refund_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class DeliveryModel(Base):
    __tablename__ = 'delivery'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('orders.id'), nullable=False, unique=True
    )
    delivery_address: Mapped[str] = mapped_column(String(500), nullable=False)
    delivery_service: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    estimated_delivery_time: Mapped[Optional[datetime]] = mapped_column(
        UtcDateTime, nullable=True
    )
    tracking_code: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
