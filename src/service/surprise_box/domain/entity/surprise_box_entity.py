from datetime import datetime
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.domain.enum import BoxStatus
from src.service.surprise_box.domain.reservation_policy import is_reservation_expired


@attrs.define
class SurpriseBox:
    """
    A perishable offer listed by a store.

    `business_name`, `store_address`, `store_city` and `category_name` are
    copied from the store and category when the box is created and are never
    re-synced; the box list is served without joins.
    """

    store_id: int
    category_id: int
    title: str
    original_price: int  # minor currency units
    discounted_price: int
    pickup_start_time: datetime
    pickup_end_time: datetime
    sale_start_time: datetime
    sale_end_time: datetime
    description: Optional[str] = None
    image_url: Optional[str] = None
    status: BoxStatus = BoxStatus.ACTIVE
    reserved_by: Optional[int] = None
    reserved_at: Optional[datetime] = None
    reservation_expires_at: Optional[datetime] = None
    business_name: Optional[str] = None
    store_address: Optional[str] = None
    store_city: Optional[str] = None
    category_name: Optional[str] = None
    box_template_id: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __attrs_post_init__(self) -> None:
        holds_reservation = self.reserved_by is not None and self.reservation_expires_at is not None
        if holds_reservation != (self.status == BoxStatus.RESERVED):
            raise DomainError(
                f'Surprise box {self.id}: reservation fields must be set exactly when status is reserved'
            )

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        store_id: int,
        category_id: int,
        title: str,
        original_price: int,
        discounted_price: int,
        pickup_start_time: datetime,
        pickup_end_time: datetime,
        sale_start_time: datetime,
        sale_end_time: datetime,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
        business_name: Optional[str] = None,
        store_address: Optional[str] = None,
        store_city: Optional[str] = None,
        category_name: Optional[str] = None,
        box_template_id: Optional[int] = None,
        status: BoxStatus = BoxStatus.ACTIVE,
    ) -> 'SurpriseBox':
        if not title.strip():
            raise DomainError('Title is required')
        if original_price <= 0 or discounted_price <= 0:
            raise DomainError('Prices must be positive')
        if discounted_price > original_price:
            raise DomainError('Discounted price cannot exceed original price')
        if not pickup_start_time < pickup_end_time:
            raise DomainError('Pickup start must be before pickup end')
        if not sale_start_time < sale_end_time:
            raise DomainError('Sale start must be before sale end')
        if not (sale_start_time <= pickup_start_time and pickup_end_time <= sale_end_time):
            raise DomainError('Pickup window must lie within the sale window')
        if status not in (BoxStatus.DRAFT, BoxStatus.ACTIVE):
            raise DomainError('A new surprise box starts as draft or active')

        return cls(
            store_id=store_id,
            category_id=category_id,
            title=title,
            description=description,
            original_price=original_price,
            discounted_price=discounted_price,
            image_url=image_url,
            pickup_start_time=pickup_start_time,
            pickup_end_time=pickup_end_time,
            sale_start_time=sale_start_time,
            sale_end_time=sale_end_time,
            status=status,
            business_name=business_name,
            store_address=store_address,
            store_city=store_city,
            category_name=category_name,
            box_template_id=box_template_id,
        )

    def is_reservation_expired(self, now: datetime) -> bool:
        return is_reservation_expired(
            status=self.status, reservation_expires_at=self.reservation_expires_at, now=now
        )

    def is_on_sale(self, now: datetime) -> bool:
        return self.sale_start_time <= now <= self.sale_end_time

    def is_reserved_by(self, customer_id: int) -> bool:
        return self.status == BoxStatus.RESERVED and self.reserved_by == customer_id
