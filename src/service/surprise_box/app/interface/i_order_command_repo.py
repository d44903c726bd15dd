"""
Order Ledger Interface

The only writer of order status fields. Payment and delivery rows are written
through the same ledger so they commit together with the order.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from src.service.surprise_box.domain.entity.order_entity import Delivery, Order, Payment
from src.service.surprise_box.domain.enum import CancellerType, OrderEvent


class IOrderCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, order: Order) -> Order:
        """
        Insert the order inside a savepoint.

        Raises:
            PickupCodeCollisionError: `order.pickup_code` is already taken; the
                surrounding transaction is still usable
        """
        pass

    @abstractmethod
    async def add_payment(self, *, payment: Payment) -> Payment:
        pass

    @abstractmethod
    async def add_delivery(self, *, delivery: Delivery) -> Delivery:
        pass

    @abstractmethod
    async def get_by_id(self, *, order_id: int) -> Order | None:
        pass

    @abstractmethod
    async def complete(
        self, *, order_id: int, pickup_code: str, store_id: int, now: datetime
    ) -> Order:
        """
        Any non-terminal status -> COMPLETED, stamping `pickuped_at` once.

        Rejections are checked in this order so a wrong store always wins:
        OrderNotFoundError, StoreMismatchError, InvalidPickupCodeError,
        OrderAlreadyFinalizedError.
        """
        pass

    @abstractmethod
    async def advance(self, *, order_id: int, event: OrderEvent, now: datetime) -> Order:
        """PENDING -> PAID -> READY_FOR_PICKUP -> IN_DELIVERY."""
        pass

    @abstractmethod
    async def cancel(self, *, order_id: int, cancelled_by: CancellerType, now: datetime) -> Order:
        pass

    @abstractmethod
    async def refund(self, *, order_id: int, amount: int, now: datetime) -> Order:
        pass
