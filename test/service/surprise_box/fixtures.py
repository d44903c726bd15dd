from datetime import datetime, timedelta, timezone
from typing import Any

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.surprise_box.domain.entity.surprise_box_entity import SurpriseBox
from src.service.surprise_box.domain.enum import BoxStatus


NOW = datetime(2025, 6, 1, 18, 0, tzinfo=timezone.utc)

STORE_ID = 3
OTHER_STORE_ID = 4
CUSTOMER_ID = 7
OTHER_CUSTOMER_ID = 8


class ManualClock:
    """A clock that only moves when the test says so."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


def make_box(**overrides: Any) -> SurpriseBox:
    fields: dict[str, Any] = {
        'store_id': STORE_ID,
        'category_id': 2,
        'title': 'Bakery surprise',
        'original_price': 30000,
        'discounted_price': 9900,
        'sale_start_time': NOW - timedelta(hours=1),
        'sale_end_time': NOW + timedelta(hours=5),
        'pickup_start_time': NOW + timedelta(hours=1),
        'pickup_end_time': NOW + timedelta(hours=3),
        'business_name': 'Good Bakery',
        'store_address': 'Khreshchatyk St, 1',
        'store_city': 'Kyiv',
        'category_name': 'Bakery',
    }
    fields |= overrides
    return SurpriseBox(**fields)


def make_reserved_box(
    *,
    box_id: int = 42,
    customer_id: int = CUSTOMER_ID,
    expires_at: datetime = NOW + timedelta(minutes=5),
    **overrides: Any,
) -> SurpriseBox:
    return make_box(
        id=box_id,
        status=BoxStatus.RESERVED,
        reserved_by=customer_id,
        reserved_at=expires_at - timedelta(minutes=5),
        reservation_expires_at=expires_at,
        **overrides,
    )


class FakeUnitOfWork(AbstractUnitOfWork):
    """Unit of work whose ledgers are AsyncMocks; records commits and rollbacks."""

    def __init__(self, *, boxes: Any, orders: Any) -> None:
        self.boxes = boxes
        self.orders = orders
        self.entered = 0
        self.commits = 0
        self.rollbacks = 0

    async def __aenter__(self) -> 'FakeUnitOfWork':
        self.entered += 1
        return self

    async def _commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1
