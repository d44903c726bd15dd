from unittest.mock import AsyncMock

import attrs
import pytest

from src.platform.exception.exceptions import ForbiddenError
from src.service.surprise_box.app.dto import OrderDetail
from src.service.surprise_box.app.query.find_order_by_pickup_code_use_case import (
    FindOrderByPickupCodeUseCase,
)
from src.service.surprise_box.app.query.get_order_use_case import GetOrderUseCase
from src.service.surprise_box.domain.entity.order_entity import Order
from src.service.surprise_box.domain.enum import FulfillmentType, PaymentType
from src.service.surprise_box.domain.errors import OrderNotFoundError, StoreMismatchError
from test.service.surprise_box.fixtures import (
    CUSTOMER_ID,
    NOW,
    OTHER_CUSTOMER_ID,
    OTHER_STORE_ID,
    STORE_ID,
)


@pytest.fixture
def detail() -> OrderDetail:
    order = Order.create(
        customer_id=CUSTOMER_ID,
        surprise_box_id=42,
        store_id=STORE_ID,
        pickup_code='AB23CD',
        payment_type=PaymentType.APP,
        fulfillment_type=FulfillmentType.PICKUP,
        now=NOW,
    )
    return OrderDetail(order=attrs.evolve(order, id=101))


@pytest.fixture
def order_query_repo(detail: OrderDetail) -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=detail)
    repo.get_by_pickup_code = AsyncMock(return_value=detail)
    return repo


class TestGetOrder:
    @pytest.mark.asyncio
    async def test_owner_sees_order(self, order_query_repo: AsyncMock, detail: OrderDetail) -> None:
        use_case = GetOrderUseCase(order_query_repo=order_query_repo)

        assert await use_case.execute(order_id=101, customer_id=CUSTOMER_ID) == detail

    @pytest.mark.asyncio
    async def test_other_customer_forbidden(self, order_query_repo: AsyncMock) -> None:
        use_case = GetOrderUseCase(order_query_repo=order_query_repo)

        with pytest.raises(ForbiddenError):
            await use_case.execute(order_id=101, customer_id=OTHER_CUSTOMER_ID)

    @pytest.mark.asyncio
    async def test_missing_order(self, order_query_repo: AsyncMock) -> None:
        order_query_repo.get_by_id.return_value = None
        use_case = GetOrderUseCase(order_query_repo=order_query_repo)

        with pytest.raises(OrderNotFoundError):
            await use_case.execute(order_id=999, customer_id=CUSTOMER_ID)


class TestFindOrderByPickupCode:
    @pytest.mark.asyncio
    async def test_owning_store_finds_order(
        self, order_query_repo: AsyncMock, detail: OrderDetail
    ) -> None:
        use_case = FindOrderByPickupCodeUseCase(order_query_repo=order_query_repo)

        result = await use_case.execute(pickup_code='ab23cd', store_id=STORE_ID)

        assert result == detail
        order_query_repo.get_by_pickup_code.assert_awaited_once_with(pickup_code='ab23cd')

    @pytest.mark.asyncio
    async def test_other_store_is_rejected(self, order_query_repo: AsyncMock) -> None:
        use_case = FindOrderByPickupCodeUseCase(order_query_repo=order_query_repo)

        with pytest.raises(StoreMismatchError):
            await use_case.execute(pickup_code='AB23CD', store_id=OTHER_STORE_ID)

    @pytest.mark.asyncio
    async def test_unknown_code(self, order_query_repo: AsyncMock) -> None:
        order_query_repo.get_by_pickup_code.return_value = None
        use_case = FindOrderByPickupCodeUseCase(order_query_repo=order_query_repo)

        with pytest.raises(OrderNotFoundError):
            await use_case.execute(pickup_code='ZZZZZZ', store_id=STORE_ID)
