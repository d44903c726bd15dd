from typing import Any
from unittest.mock import AsyncMock

import attrs
import pytest

from src.service.surprise_box.app.command.complete_order_use_case import CompleteOrderUseCase
from src.service.surprise_box.domain.entity.order_entity import Order
from src.service.surprise_box.domain.enum import FulfillmentType, OrderStatus, PaymentType
from src.service.surprise_box.domain.errors import (
    InvalidPickupCodeError,
    OrderAlreadyFinalizedError,
)
from test.service.surprise_box.fixtures import (
    CUSTOMER_ID,
    NOW,
    STORE_ID,
    FakeUnitOfWork,
    ManualClock,
)


def _completed_order() -> Order:
    order = Order.create(
        customer_id=CUSTOMER_ID,
        surprise_box_id=42,
        store_id=STORE_ID,
        pickup_code='AB23CD',
        payment_type=PaymentType.APP,
        fulfillment_type=FulfillmentType.PICKUP,
        now=NOW,
    )
    return attrs.evolve(order, id=101, status=OrderStatus.COMPLETED, pickuped_at=NOW)


class TestCompleteOrder:
    @pytest.fixture
    def orders(self) -> AsyncMock:
        repo = AsyncMock()
        repo.complete = AsyncMock(return_value=_completed_order())
        return repo

    @pytest.fixture
    def boxes(self) -> AsyncMock:
        return AsyncMock()

    @pytest.fixture
    def uow(self, boxes: AsyncMock, orders: AsyncMock) -> FakeUnitOfWork:
        return FakeUnitOfWork(boxes=boxes, orders=orders)

    @pytest.fixture
    def use_case(self, uow: FakeUnitOfWork) -> CompleteOrderUseCase:
        return CompleteOrderUseCase(uow=uow, clock=ManualClock())

    @pytest.mark.asyncio
    async def test_completes_order_then_confirms_box_sold(
        self,
        use_case: CompleteOrderUseCase,
        uow: FakeUnitOfWork,
        boxes: AsyncMock,
        orders: AsyncMock,
    ) -> None:
        call_order: list[str] = []

        async def _complete(**kwargs: Any) -> Order:
            call_order.append('complete')
            return _completed_order()

        async def _confirm_sold(**kwargs: Any) -> None:
            call_order.append('confirm_sold')

        orders.complete.side_effect = _complete
        boxes.confirm_sold.side_effect = _confirm_sold

        order = await use_case.execute(order_id=101, pickup_code='ab23cd', store_id=STORE_ID)

        assert order.status == OrderStatus.COMPLETED
        assert call_order == ['complete', 'confirm_sold']
        assert uow.commits == 1

    @pytest.mark.asyncio
    async def test_passes_clock_time_to_both_ledgers(
        self, use_case: CompleteOrderUseCase, orders: AsyncMock, boxes: AsyncMock
    ) -> None:
        await use_case.execute(order_id=101, pickup_code='AB23CD', store_id=STORE_ID)

        orders.complete.assert_awaited_once_with(
            order_id=101, pickup_code='AB23CD', store_id=STORE_ID, now=NOW
        )
        boxes.confirm_sold.assert_awaited_once_with(box_id=42, now=NOW)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'error',
        [InvalidPickupCodeError(), OrderAlreadyFinalizedError(101, 'completed')],
    )
    async def test_rejection_leaves_box_untouched(
        self,
        use_case: CompleteOrderUseCase,
        uow: FakeUnitOfWork,
        boxes: AsyncMock,
        orders: AsyncMock,
        error: Exception,
    ) -> None:
        orders.complete.side_effect = error

        with pytest.raises(type(error)):
            await use_case.execute(order_id=101, pickup_code='ZZZZZZ', store_id=STORE_ID)

        boxes.confirm_sold.assert_not_awaited()
        assert uow.commits == 0
        assert uow.rollbacks == 1
