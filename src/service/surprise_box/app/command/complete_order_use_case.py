from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.domain.entity.order_entity import Order
from src.service.surprise_box.domain.reservation_policy import Clock


class CompleteOrderUseCase:
    """
    Hand an order over at the counter.

    The order ledger decides the outcome (not found, wrong store, wrong code,
    already finalized) and stamps `pickuped_at` once. The box is then confirmed
    SOLD in the same transaction; it normally already is, so that step is a
    no-op. Not retried on transient errors: a re-scan is the retry, and the
    second scan reports the order as already finalized.
    """

    def __init__(self, *, uow: AbstractUnitOfWork, clock: Clock) -> None:
        self.uow = uow
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow=uow, clock=clock)

    @Logger.io
    async def execute(self, *, order_id: int, pickup_code: str, store_id: int) -> Order:
        async with self.uow:
            now = self.clock()
            order = await self.uow.orders.complete(
                order_id=order_id, pickup_code=pickup_code, store_id=store_id, now=now
            )
            await self.uow.boxes.confirm_sold(box_id=order.surprise_box_id, now=now)
            await self.uow.commit()
        return order
