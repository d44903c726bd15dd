"""
Integration fixtures: real ledgers on a throwaway SQLite file per test.

A file (not :memory:) so that concurrent sessions in a race test see the same
database through separate connections.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest

from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.surprise_box.domain.entity.surprise_box_entity import SurpriseBox
from src.service.surprise_box.domain.reservation_policy import ReservationPolicy
from test.service.surprise_box.fixtures import ManualClock, make_box


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def reservation_policy() -> ReservationPolicy:
    return ReservationPolicy(default_minutes=5, max_minutes=15)


@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    db = Database(url=f'sqlite+aiosqlite:///{tmp_path / "surprise_box.db"}')
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def uow_factory(database: Database) -> Callable[[], SqlAlchemyUnitOfWork]:
    return lambda: SqlAlchemyUnitOfWork(session_factory=database.session_factory)


@pytest.fixture
def seed_box(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork], clock: ManualClock
) -> Callable[..., Awaitable[SurpriseBox]]:
    async def _seed(**overrides: Any) -> SurpriseBox:
        async with uow_factory() as uow:
            box = await uow.boxes.add(box=make_box(**overrides), now=clock())
            await uow.commit()
        return box

    return _seed
