"""
Order Ledger Implementation (SQLAlchemy)

Same shape as the box ledger: a conditional UPDATE built from
ORDER_STATE_MACHINE, then a re-read only when it matched nothing.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import ColumnElement, select, update as sql_update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.surprise_box.domain.entity.order_entity import Delivery, Order, Payment
from src.service.surprise_box.domain.enum import (
    CancellerType,
    FulfillmentType,
    OrderEvent,
    OrderStatus,
    PaymentStatus,
    PaymentType,
)
from src.service.surprise_box.domain.errors import (
    InvalidPickupCodeError,
    InvalidStateTransitionError,
    OrderAlreadyFinalizedError,
    OrderNotFoundError,
    PickupCodeCollisionError,
    StoreMismatchError,
)
from src.service.surprise_box.domain.pickup_code import normalize_pickup_code
from src.service.surprise_box.domain.state_machine import ORDER_STATE_MACHINE
from src.service.surprise_box.driven_adapter.model.order_model import (
    DeliveryModel,
    OrderModel,
    PaymentModel,
)


# Events `advance` may drive; completion, cancellation and refund have their own calls
_ADVANCE_EVENTS = frozenset({OrderEvent.MARK_PAID, OrderEvent.MARK_READY, OrderEvent.DISPATCH})


class OrderCommandRepoImpl(IOrderCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(db_order: OrderModel) -> Order:
        return Order(
            id=db_order.id,
            customer_id=db_order.customer_id,
            surprise_box_id=db_order.surprise_box_id,
            store_id=db_order.store_id,
            pickup_code=db_order.pickup_code,
            status=OrderStatus(db_order.status),
            payment_type=PaymentType(db_order.payment_type),
            fulfillment_type=FulfillmentType(db_order.fulfillment_type),
            order_date=db_order.order_date,
            pickuped_at=db_order.pickuped_at,
            cancelled_by=CancellerType(db_order.cancelled_by) if db_order.cancelled_by else None,
            cancelled_at=db_order.cancelled_at,
            refund_amount=db_order.refund_amount,
            updated_at=db_order.updated_at,
        )

    async def _load(self, order_id: int) -> Optional[OrderModel]:
        stmt = (
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _conditional_update(
        self,
        *,
        order_id: int,
        event: OrderEvent,
        now: datetime,
        conditions: tuple[ColumnElement[bool], ...] = (),
        values: dict[str, Any] | None = None,
    ) -> bool:
        sources = ORDER_STATE_MACHINE.sources_for(event)
        stmt = (
            sql_update(OrderModel)
            .where(OrderModel.id == order_id)
            .where(OrderModel.status.in_([status.value for status in sources]), *conditions)
            .values(
                status=ORDER_STATE_MACHINE.target_of(event).value,
                updated_at=now,
                **(values or {}),
            )
            .returning(OrderModel.id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def _apply(
        self,
        *,
        order_id: int,
        event: OrderEvent,
        now: datetime,
        values: dict[str, Any] | None = None,
    ) -> Order:
        updated = await self._conditional_update(
            order_id=order_id, event=event, now=now, values=values
        )
        db_order = await self._load(order_id)
        if db_order is None:
            raise OrderNotFoundError()
        if updated:
            return self._to_entity(db_order)

        current = OrderStatus(db_order.status)
        if ORDER_STATE_MACHINE.is_terminal(current):
            raise OrderAlreadyFinalizedError(order_id, current.value)
        raise InvalidStateTransitionError(ORDER_STATE_MACHINE.entity, current, event)

    @Logger.io
    async def create(self, *, order: Order) -> Order:
        db_order = OrderModel(
            customer_id=order.customer_id,
            surprise_box_id=order.surprise_box_id,
            store_id=order.store_id,
            pickup_code=order.pickup_code,
            status=order.status.value,
            payment_type=order.payment_type.value,
            fulfillment_type=order.fulfillment_type.value,
            order_date=order.order_date,
            updated_at=order.updated_at or order.order_date,
        )
        try:
            # Savepoint: a duplicate pickup code must not abort the box sale already in this transaction
            async with self.session.begin_nested():
                self.session.add(db_order)
                await self.session.flush()
        except IntegrityError as e:
            if 'pickup_code' in str(e.orig).lower():
                raise PickupCodeCollisionError(order.pickup_code) from e
            raise

        Logger.base.info(
            f'🧾 [ORDER] Order {db_order.id} created for box {order.surprise_box_id} ({order.status})'
        )
        return self._to_entity(db_order)

    @Logger.io
    async def add_payment(self, *, payment: Payment) -> Payment:
        db_payment = PaymentModel(
            order_id=payment.order_id,
            payment_method=payment.payment_method.value,
            amount=payment.amount,
            currency=payment.currency,
            status=payment.status.value,
            transaction_id=payment.transaction_id,
            payment_gateway=payment.payment_gateway,
            payment_date=payment.payment_date,
        )
        self.session.add(db_payment)
        await self.session.flush()
        payment.id = db_payment.id
        return payment

    @Logger.io
    async def add_delivery(self, *, delivery: Delivery) -> Delivery:
        db_delivery = DeliveryModel(
            order_id=delivery.order_id,
            delivery_address=delivery.delivery_address,
            delivery_service=delivery.delivery_service,
            status=delivery.status.value,
            estimated_delivery_time=delivery.estimated_delivery_time,
            tracking_code=delivery.tracking_code,
        )
        self.session.add(db_delivery)
        await self.session.flush()
        delivery.id = db_delivery.id
        return delivery

    @Logger.io
    async def get_by_id(self, *, order_id: int) -> Order | None:
        db_order = await self._load(order_id)
        return self._to_entity(db_order) if db_order else None

    @Logger.io
    async def complete(
        self, *, order_id: int, pickup_code: str, store_id: int, now: datetime
    ) -> Order:
        code = normalize_pickup_code(pickup_code)
        completed = await self._conditional_update(
            order_id=order_id,
            event=OrderEvent.COMPLETE,
            now=now,
            conditions=(
                OrderModel.store_id == store_id,
                OrderModel.pickup_code == code,
                OrderModel.pickuped_at.is_(None),
            ),
            values={'pickuped_at': now},
        )
        db_order = await self._load(order_id)
        if db_order is None:
            raise OrderNotFoundError()
        order = self._to_entity(db_order)
        if completed:
            Logger.base.info(f'✅ [COMPLETE] Order {order_id} picked up at store {store_id}')
            return order

        if order.store_id != store_id:
            raise StoreMismatchError(f'Order {order_id} does not belong to store {store_id}')
        if not order.matches_pickup_code(code):
            raise InvalidPickupCodeError()
        if order.is_finalized:
            raise OrderAlreadyFinalizedError(order_id, order.status.value)
        raise InvalidStateTransitionError(
            ORDER_STATE_MACHINE.entity, order.status, OrderEvent.COMPLETE
        )

    @Logger.io
    async def advance(self, *, order_id: int, event: OrderEvent, now: datetime) -> Order:
        if event not in _ADVANCE_EVENTS:
            raise ValueError(f'advance() does not handle {event}')
        return await self._apply(order_id=order_id, event=event, now=now)

    @Logger.io
    async def cancel(self, *, order_id: int, cancelled_by: CancellerType, now: datetime) -> Order:
        return await self._apply(
            order_id=order_id,
            event=OrderEvent.CANCEL,
            now=now,
            values={'cancelled_by': cancelled_by.value, 'cancelled_at': now},
        )

    @Logger.io
    async def refund(self, *, order_id: int, amount: int, now: datetime) -> Order:
        if amount < 0:
            raise ValueError('Refund amount cannot be negative')
        order = await self._apply(
            order_id=order_id,
            event=OrderEvent.REFUND,
            now=now,
            values={'refund_amount': amount},
        )
        await self.session.execute(
            sql_update(PaymentModel)
            .where(PaymentModel.order_id == order_id)
            .values(refund_amount=amount, status=PaymentStatus.REFUNDED.value)
            .execution_options(synchronize_session=False)
        )
        return order
