from contextlib import AbstractAsyncContextManager
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.app.dto.order_detail import OrderDetail
from src.service.surprise_box.app.interface.i_order_query_repo import IOrderQueryRepo
from src.service.surprise_box.domain.entity.order_entity import Delivery, Payment
from src.service.surprise_box.domain.enum import DeliveryStatus, PaymentMethod, PaymentStatus
from src.service.surprise_box.domain.pickup_code import normalize_pickup_code
from src.service.surprise_box.driven_adapter.model.order_model import (
    DeliveryModel,
    OrderModel,
    PaymentModel,
)
from src.service.surprise_box.driven_adapter.repo.order_command_repo_impl import (
    OrderCommandRepoImpl,
)


class OrderQueryRepoImpl(IOrderQueryRepo):
    """Read-only order lookups; one short session per call."""

    def __init__(self, session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _to_payment(db_payment: PaymentModel) -> Payment:
        return Payment(
            id=db_payment.id,
            order_id=db_payment.order_id,
            payment_method=PaymentMethod(db_payment.payment_method),
            amount=db_payment.amount,
            currency=db_payment.currency,
            status=PaymentStatus(db_payment.status),
            transaction_id=db_payment.transaction_id,
            payment_gateway=db_payment.payment_gateway,
            payment_date=db_payment.payment_date,
            refund_amount=db_payment.refund_amount,
        )

    @staticmethod
    def _to_delivery(db_delivery: DeliveryModel) -> Delivery:
        return Delivery(
            id=db_delivery.id,
            order_id=db_delivery.order_id,
            delivery_address=db_delivery.delivery_address,
            delivery_service=db_delivery.delivery_service,
            status=DeliveryStatus(db_delivery.status),
            estimated_delivery_time=db_delivery.estimated_delivery_time,
            tracking_code=db_delivery.tracking_code,
        )

    async def _detail(self, session: AsyncSession, db_order: OrderModel) -> OrderDetail:
        payment_result = await session.execute(
            select(PaymentModel).where(PaymentModel.order_id == db_order.id).order_by(PaymentModel.id)
        )
        db_payment: Optional[PaymentModel] = payment_result.scalars().first()
        delivery_result = await session.execute(
            select(DeliveryModel).where(DeliveryModel.order_id == db_order.id)
        )
        db_delivery = delivery_result.scalar_one_or_none()
        return OrderDetail(
            order=OrderCommandRepoImpl._to_entity(db_order),
            payment=self._to_payment(db_payment) if db_payment else None,
            delivery=self._to_delivery(db_delivery) if db_delivery else None,
        )

    @Logger.io
    async def get_by_id(self, *, order_id: int) -> OrderDetail | None:
        async with self.session_factory() as session:
            result = await session.execute(select(OrderModel).where(OrderModel.id == order_id))
            db_order = result.scalar_one_or_none()
            return await self._detail(session, db_order) if db_order else None

    @Logger.io
    async def get_by_pickup_code(self, *, pickup_code: str) -> OrderDetail | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(OrderModel).where(OrderModel.pickup_code == normalize_pickup_code(pickup_code))
            )
            db_order = result.scalar_one_or_none()
            return await self._detail(session, db_order) if db_order else None
