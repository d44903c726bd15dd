"""
Unit of Work Pattern - one transaction spanning the box and order ledgers

Architecture:
- UoW opens a fresh session on every `async with`
- UoW owns commit / rollback; ledgers never commit
- Use cases coordinate both ledgers through the same UoW so an order and the
  sale of its box commit together or not at all
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession


if TYPE_CHECKING:
    from src.service.surprise_box.app.interface.i_box_command_repo import IBoxCommandRepo
    from src.service.surprise_box.app.interface.i_order_command_repo import IOrderCommandRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the Surprise Box Service

    Usage:
        async with uow:
            await uow.boxes.mark_sold(...)
            order = await uow.orders.create(...)
            await uow.commit()

    Leaving the block without `commit()` rolls back. The same instance may be
    entered again after it exits (transient retry).
    """

    boxes: IBoxCommandRepo
    orders: IOrderCommandRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self.session_factory = session_factory
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        from src.service.surprise_box.driven_adapter.repo.box_command_repo_impl import (
            BoxCommandRepoImpl,
        )
        from src.service.surprise_box.driven_adapter.repo.order_command_repo_impl import (
            OrderCommandRepoImpl,
        )

        if self.session is not None:
            raise RuntimeError('Unit of work is already active')

        self.session = self.session_factory()
        self.boxes = BoxCommandRepoImpl(session=self.session)
        self.orders = OrderCommandRepoImpl(session=self.session)
        await super().__aenter__()
        return self

    async def __aexit__(self, *args) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self.session is not None:
                await self.session.close()
            self.session = None

    async def _commit(self) -> None:
        if self.session is None:
            raise RuntimeError('commit() outside of `async with uow`')
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
