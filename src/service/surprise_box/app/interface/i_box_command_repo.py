"""
Box Ledger Interface

The only writer of a surprise box's status and reservation fields. Every
mutation is a single conditional UPDATE guarded by the box transition table,
so two callers racing for the same box can never both win.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from src.service.surprise_box.domain.entity.surprise_box_entity import SurpriseBox


class IBoxCommandRepo(ABC):
    @abstractmethod
    async def add(self, *, box: SurpriseBox, now: datetime) -> SurpriseBox:
        """Insert a new box (template instantiation job, fixtures)."""
        pass

    @abstractmethod
    async def get_by_id(self, *, box_id: int) -> SurpriseBox | None:
        pass

    @abstractmethod
    async def try_reserve(
        self, *, box_id: int, customer_id: int, now: datetime, expires_at: datetime
    ) -> SurpriseBox:
        """
        ACTIVE -> RESERVED for `customer_id` when the sale window covers `now`.

        Raises:
            BoxNotFoundError: no such box
            BoxAlreadyReservedError: another (or the same) customer holds it
            BoxNotAvailableError: wrong status or outside the sale window
        """
        pass

    @abstractmethod
    async def release(
        self, *, box_id: int, now: datetime, customer_id: Optional[int] = None
    ) -> bool:
        """
        RESERVED -> ACTIVE, clearing the reservation fields.

        Idempotent: returns False (no-op) when the box is not reserved, or not
        reserved by `customer_id` when one is given.
        """
        pass

    @abstractmethod
    async def release_if_expired(self, *, box_id: int, now: datetime) -> bool:
        """Lazy reclaim: release only when `reservation_expires_at < now`."""
        pass

    @abstractmethod
    async def mark_sold(self, *, box_id: int, customer_id: int, now: datetime) -> SurpriseBox:
        """
        RESERVED -> SOLD when reserved by `customer_id` and not expired at `now`.

        Raises:
            BoxNotFoundError, NotReservedByCustomerError, ReservationExpiredError
        """
        pass

    @abstractmethod
    async def confirm_sold(self, *, box_id: int, now: datetime) -> SurpriseBox:
        """Ensure the box is SOLD; a no-op when it already is."""
        pass

    @abstractmethod
    async def activate(self, *, box_id: int, now: datetime) -> SurpriseBox:
        pass

    @abstractmethod
    async def withdraw(self, *, box_id: int, now: datetime) -> SurpriseBox:
        pass

    @abstractmethod
    async def expire_sale(self, *, box_id: int, now: datetime) -> SurpriseBox:
        pass
