"""
Box Ledger Implementation (SQLAlchemy)

Every status change is one `UPDATE ... WHERE id = :id AND status IN (:sources)`
with the sources taken from BOX_STATE_MACHINE. Zero affected rows means the
caller lost: the row is then re-read to report a typed reason.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import ColumnElement, select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.app.interface.i_box_command_repo import IBoxCommandRepo
from src.service.surprise_box.domain.entity.surprise_box_entity import SurpriseBox
from src.service.surprise_box.domain.enum import BoxEvent, BoxStatus
from src.service.surprise_box.domain.errors import (
    BoxAlreadyReservedError,
    BoxNotAvailableError,
    BoxNotFoundError,
    InvalidStateTransitionError,
    NotReservedByCustomerError,
    ReservationExpiredError,
)
from src.service.surprise_box.domain.state_machine import BOX_STATE_MACHINE
from src.service.surprise_box.driven_adapter.model.surprise_box_model import SurpriseBoxModel


_CLEARED_RESERVATION: dict[str, Any] = {
    'reserved_by': None,
    'reserved_at': None,
    'reservation_expires_at': None,
}


class BoxCommandRepoImpl(IBoxCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(db_box: SurpriseBoxModel) -> SurpriseBox:
        return SurpriseBox(
            id=db_box.id,
            store_id=db_box.store_id,
            category_id=db_box.category_id,
            box_template_id=db_box.box_template_id,
            title=db_box.title,
            description=db_box.description,
            original_price=db_box.original_price,
            discounted_price=db_box.discounted_price,
            image_url=db_box.image_url,
            pickup_start_time=db_box.pickup_start_time,
            pickup_end_time=db_box.pickup_end_time,
            sale_start_time=db_box.sale_start_time,
            sale_end_time=db_box.sale_end_time,
            status=BoxStatus(db_box.status),
            reserved_by=db_box.reserved_by,
            reserved_at=db_box.reserved_at,
            reservation_expires_at=db_box.reservation_expires_at,
            business_name=db_box.business_name,
            store_address=db_box.store_address,
            store_city=db_box.store_city,
            category_name=db_box.category_name,
            created_at=db_box.created_at,
            updated_at=db_box.updated_at,
        )

    async def _load(self, box_id: int) -> Optional[SurpriseBoxModel]:
        # populate_existing: the identity map must not hide a just-issued bulk UPDATE
        stmt = (
            select(SurpriseBoxModel)
            .where(SurpriseBoxModel.id == box_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _conditional_update(
        self,
        *,
        box_id: int,
        sources: frozenset[BoxStatus],
        conditions: tuple[ColumnElement[bool], ...] = (),
        values: dict[str, Any],
        now: datetime,
    ) -> bool:
        stmt = (
            sql_update(SurpriseBoxModel)
            .where(SurpriseBoxModel.id == box_id)
            .where(SurpriseBoxModel.status.in_([status.value for status in sources]), *conditions)
            .values(**values, updated_at=now)
            .returning(SurpriseBoxModel.id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def _apply(self, *, box_id: int, event: BoxEvent, now: datetime) -> SurpriseBox:
        target = BOX_STATE_MACHINE.target_of(event)
        values: dict[str, Any] = {'status': target.value}
        if target != BoxStatus.RESERVED:
            values |= _CLEARED_RESERVATION

        updated = await self._conditional_update(
            box_id=box_id,
            sources=BOX_STATE_MACHINE.changing_sources_for(event),
            values=values,
            now=now,
        )
        db_box = await self._load(box_id)
        if db_box is None:
            raise BoxNotFoundError(box_id)

        if not updated:
            current = BoxStatus(db_box.status)
            if BOX_STATE_MACHINE.next_status(current, event) != current:
                # Legal now but not when the UPDATE ran: a concurrent writer got there first
                raise InvalidStateTransitionError(BOX_STATE_MACHINE.entity, current, event)
            Logger.base.debug(f'📦 [BOX] {event} on box {box_id} is a no-op in status {current}')

        return self._to_entity(db_box)

    @Logger.io
    async def add(self, *, box: SurpriseBox, now: datetime) -> SurpriseBox:
        db_box = SurpriseBoxModel(
            store_id=box.store_id,
            category_id=box.category_id,
            box_template_id=box.box_template_id,
            title=box.title,
            description=box.description,
            original_price=box.original_price,
            discounted_price=box.discounted_price,
            image_url=box.image_url,
            pickup_start_time=box.pickup_start_time,
            pickup_end_time=box.pickup_end_time,
            sale_start_time=box.sale_start_time,
            sale_end_time=box.sale_end_time,
            status=box.status.value,
            reserved_by=box.reserved_by,
            reserved_at=box.reserved_at,
            reservation_expires_at=box.reservation_expires_at,
            business_name=box.business_name,
            store_address=box.store_address,
            store_city=box.store_city,
            category_name=box.category_name,
            created_at=box.created_at or now,
            updated_at=box.updated_at or now,
        )
        self.session.add(db_box)
        await self.session.flush()
        return self._to_entity(db_box)

    @Logger.io
    async def get_by_id(self, *, box_id: int) -> SurpriseBox | None:
        db_box = await self._load(box_id)
        return self._to_entity(db_box) if db_box else None

    @Logger.io
    async def try_reserve(
        self, *, box_id: int, customer_id: int, now: datetime, expires_at: datetime
    ) -> SurpriseBox:
        granted = await self._conditional_update(
            box_id=box_id,
            sources=BOX_STATE_MACHINE.sources_for(BoxEvent.RESERVE),
            conditions=(
                SurpriseBoxModel.sale_start_time <= now,
                SurpriseBoxModel.sale_end_time >= now,
            ),
            values={
                'status': BOX_STATE_MACHINE.target_of(BoxEvent.RESERVE).value,
                'reserved_by': customer_id,
                'reserved_at': now,
                'reservation_expires_at': expires_at,
            },
            now=now,
        )
        db_box = await self._load(box_id)
        if granted and db_box is not None:
            Logger.base.info(
                f'🔒 [RESERVE] Box {box_id} reserved by customer {customer_id} until {expires_at.isoformat()}'
            )
            return self._to_entity(db_box)

        if db_box is None:
            raise BoxNotFoundError(box_id)
        status = BoxStatus(db_box.status)
        Logger.base.info(f'⛔ [RESERVE] Box {box_id} denied for customer {customer_id} ({status})')
        if status == BoxStatus.RESERVED:
            raise BoxAlreadyReservedError(box_id)
        if BOX_STATE_MACHINE.can(status, BoxEvent.RESERVE):
            raise BoxNotAvailableError(box_id, 'outside its sale window')
        raise BoxNotAvailableError(box_id, status.value)

    @Logger.io
    async def release(
        self, *, box_id: int, now: datetime, customer_id: Optional[int] = None
    ) -> bool:
        conditions: tuple[ColumnElement[bool], ...] = ()
        if customer_id is not None:
            conditions = (SurpriseBoxModel.reserved_by == customer_id,)
        released = await self._conditional_update(
            box_id=box_id,
            sources=BOX_STATE_MACHINE.sources_for(BoxEvent.RELEASE),
            conditions=conditions,
            values={'status': BOX_STATE_MACHINE.target_of(BoxEvent.RELEASE).value}
            | _CLEARED_RESERVATION,
            now=now,
        )
        if released:
            Logger.base.info(f'🔓 [RELEASE] Box {box_id} returned to active')
        return released

    @Logger.io
    async def release_if_expired(self, *, box_id: int, now: datetime) -> bool:
        reclaimed = await self._conditional_update(
            box_id=box_id,
            sources=BOX_STATE_MACHINE.sources_for(BoxEvent.RELEASE),
            conditions=(SurpriseBoxModel.reservation_expires_at < now,),
            values={'status': BOX_STATE_MACHINE.target_of(BoxEvent.RELEASE).value}
            | _CLEARED_RESERVATION,
            now=now,
        )
        if reclaimed:
            Logger.base.info(f'♻️ [RECLAIM] Expired reservation on box {box_id} released')
        return reclaimed

    @Logger.io
    async def mark_sold(self, *, box_id: int, customer_id: int, now: datetime) -> SurpriseBox:
        sold = await self._conditional_update(
            box_id=box_id,
            sources=BOX_STATE_MACHINE.sources_for(BoxEvent.SELL),
            conditions=(
                SurpriseBoxModel.reserved_by == customer_id,
                SurpriseBoxModel.reservation_expires_at >= now,
            ),
            values={'status': BOX_STATE_MACHINE.target_of(BoxEvent.SELL).value}
            | _CLEARED_RESERVATION,
            now=now,
        )
        db_box = await self._load(box_id)
        if db_box is None:
            raise BoxNotFoundError(box_id)
        if sold:
            return self._to_entity(db_box)

        box = self._to_entity(db_box)
        if not box.is_reserved_by(customer_id):
            raise NotReservedByCustomerError(box_id)
        if box.is_reservation_expired(now):
            raise ReservationExpiredError(box_id)
        raise InvalidStateTransitionError(BOX_STATE_MACHINE.entity, box.status, BoxEvent.SELL)

    @Logger.io
    async def confirm_sold(self, *, box_id: int, now: datetime) -> SurpriseBox:
        return await self._apply(box_id=box_id, event=BoxEvent.CONFIRM_SOLD, now=now)

    @Logger.io
    async def activate(self, *, box_id: int, now: datetime) -> SurpriseBox:
        return await self._apply(box_id=box_id, event=BoxEvent.ACTIVATE, now=now)

    @Logger.io
    async def withdraw(self, *, box_id: int, now: datetime) -> SurpriseBox:
        return await self._apply(box_id=box_id, event=BoxEvent.WITHDRAW, now=now)

    @Logger.io
    async def expire_sale(self, *, box_id: int, now: datetime) -> SurpriseBox:
        return await self._apply(box_id=box_id, event=BoxEvent.EXPIRE_SALE, now=now)
