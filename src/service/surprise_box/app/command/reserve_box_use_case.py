from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.transient_retry import run_with_transient_retry
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.app.dto.order_command_dto import ReservationResult
from src.service.surprise_box.domain.reservation_policy import Clock, ReservationPolicy


class ReserveBoxUseCase:
    """
    Place a time-boxed hold on a box for one customer.

    Flow (one transaction, replayed once on a transient database error):
    1. Reclaim the box if its current reservation has lapsed
    2. ACTIVE -> RESERVED with a conditional UPDATE; exactly one racer wins
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        reservation_policy: ReservationPolicy,
        clock: Clock,
    ) -> None:
        self.uow = uow
        self.reservation_policy = reservation_policy
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        reservation_policy: ReservationPolicy = Depends(Provide[Container.reservation_policy]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow=uow, reservation_policy=reservation_policy, clock=clock)

    @Logger.io
    async def execute(
        self, *, box_id: int, customer_id: int, ttl_minutes: object = None
    ) -> ReservationResult:
        ttl = self.reservation_policy.resolve_ttl(ttl_minutes)

        async def _reserve() -> ReservationResult:
            async with self.uow:
                now = self.clock()
                await self.uow.boxes.release_if_expired(box_id=box_id, now=now)
                expires_at = self.reservation_policy.expires_at(now=now, ttl_minutes=ttl)
                await self.uow.boxes.try_reserve(
                    box_id=box_id, customer_id=customer_id, now=now, expires_at=expires_at
                )
                await self.uow.commit()

            return ReservationResult(box_id=box_id, customer_id=customer_id, expires_at=expires_at)

        return await run_with_transient_retry(_reserve, label='RESERVE')
