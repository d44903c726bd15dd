from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.domain.entity.surprise_box_entity import SurpriseBox
from src.service.surprise_box.domain.errors import BoxNotFoundError
from src.service.surprise_box.domain.reservation_policy import Clock


class GetBoxUseCase:
    """Read a box, reclaiming a lapsed reservation first so the answer is never stale."""

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
    async def execute(self, *, box_id: int) -> SurpriseBox:
        async with self.uow:
            reclaimed = await self.uow.boxes.release_if_expired(box_id=box_id, now=self.clock())
            box = await self.uow.boxes.get_by_id(box_id=box_id)
            if box is None:
                raise BoxNotFoundError(box_id)
            if reclaimed:
                await self.uow.commit()
        return box
