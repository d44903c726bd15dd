"""
Unit tests for CreateOrderUseCase

Covers input validation, the pre-checks on the reserved box, the pickup code
regeneration loop and which payment / delivery rows get written.
"""

from datetime import timedelta
from typing import Any
from unittest.mock import AsyncMock

import attrs
import pytest
from sqlalchemy.exc import OperationalError

from src.platform.exception.exceptions import InternalServiceError
from src.service.surprise_box.app.command.create_order_use_case import CreateOrderUseCase
from src.service.surprise_box.app.dto import CreateOrderCommand
from src.service.surprise_box.domain.entity.order_entity import Delivery, Order, Payment
from src.service.surprise_box.domain.enum import (
    DeliveryStatus,
    FulfillmentType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)
from src.service.surprise_box.domain.errors import (
    BoxNotFoundError,
    DeliveryAddressRequiredError,
    InvalidAmountError,
    NotReservedByCustomerError,
    PickupCodeCollisionError,
    ReservationExpiredError,
    StoreMismatchError,
)
from test.service.surprise_box.fixtures import (
    CUSTOMER_ID,
    NOW,
    OTHER_CUSTOMER_ID,
    OTHER_STORE_ID,
    STORE_ID,
    FakeUnitOfWork,
    ManualClock,
    make_box,
    make_reserved_box,
)


def _command(**overrides: Any) -> CreateOrderCommand:
    fields: dict[str, Any] = {
        'customer_id': CUSTOMER_ID,
        'surprise_box_id': 42,
        'store_id': STORE_ID,
        'payment_type': PaymentType.APP,
        'fulfillment_type': FulfillmentType.PICKUP,
        'payment_method': PaymentMethod.CARD,
        'amount': 9900,
        'transaction_id': 'txn_01HZX',
        'payment_gateway': 'liqpay',
    }
    fields |= overrides
    return CreateOrderCommand(**fields)


class RepositoryMocks:
    """Ledger doubles: the box is reserved by CUSTOMER_ID until NOW + 5 minutes."""

    def __init__(self, *, box: Any = None) -> None:
        self.box = box if box is not None else make_reserved_box()
        self.created_orders: list[Order] = []

        self.boxes = AsyncMock()
        self.boxes.get_by_id = AsyncMock(return_value=self.box)
        self.boxes.mark_sold = AsyncMock()

        self.orders = AsyncMock()
        self.orders.create = AsyncMock(side_effect=self._create_order)
        self.orders.add_payment = AsyncMock(side_effect=lambda *, payment: payment)
        self.orders.add_delivery = AsyncMock(side_effect=lambda *, delivery: delivery)

        self.uow = FakeUnitOfWork(boxes=self.boxes, orders=self.orders)

    async def _create_order(self, *, order: Order) -> Order:
        order.id = 101
        self.created_orders.append(order)
        return order


class TestCreateOrderValidation:
    @pytest.fixture
    def mocks(self) -> RepositoryMocks:
        return RepositoryMocks()

    @pytest.fixture
    def use_case(self, mocks: RepositoryMocks) -> CreateOrderUseCase:
        return CreateOrderUseCase(uow=mocks.uow, clock=ManualClock())

    @pytest.mark.asyncio
    @pytest.mark.parametrize('amount', [0, -100, True])
    async def test_non_positive_amount_rejected(
        self, use_case: CreateOrderUseCase, mocks: RepositoryMocks, amount: Any
    ) -> None:
        with pytest.raises(InvalidAmountError):
            await use_case.execute(command=_command(amount=amount))

        assert mocks.uow.entered == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize('address', [None, '', '   '])
    async def test_delivery_requires_address(
        self, use_case: CreateOrderUseCase, mocks: RepositoryMocks, address: Any
    ) -> None:
        with pytest.raises(DeliveryAddressRequiredError):
            await use_case.execute(
                command=_command(
                    fulfillment_type=FulfillmentType.DELIVERY, delivery_address=address
                )
            )

        assert mocks.uow.entered == 0


class TestCreateOrderBoxChecks:
    @pytest.mark.asyncio
    async def test_missing_box(self) -> None:
        mocks = RepositoryMocks()
        mocks.boxes.get_by_id.return_value = None
        use_case = CreateOrderUseCase(uow=mocks.uow, clock=ManualClock())

        with pytest.raises(BoxNotFoundError):
            await use_case.execute(command=_command())

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'box',
        [
            make_box(id=42),
            make_reserved_box(customer_id=OTHER_CUSTOMER_ID),
        ],
    )
    async def test_box_not_reserved_by_customer(self, box: Any) -> None:
        mocks = RepositoryMocks(box=box)
        use_case = CreateOrderUseCase(uow=mocks.uow, clock=ManualClock())

        with pytest.raises(NotReservedByCustomerError):
            await use_case.execute(command=_command())

        mocks.boxes.mark_sold.assert_not_awaited()
        mocks.orders.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_reservation(self) -> None:
        mocks = RepositoryMocks(box=make_reserved_box(expires_at=NOW))
        use_case = CreateOrderUseCase(
            uow=mocks.uow, clock=ManualClock(NOW + timedelta(microseconds=1))
        )

        with pytest.raises(ReservationExpiredError):
            await use_case.execute(command=_command())

        mocks.orders.create.assert_not_awaited()
        assert mocks.uow.commits == 0

    @pytest.mark.asyncio
    async def test_reservation_valid_at_exact_expiry(self) -> None:
        mocks = RepositoryMocks(box=make_reserved_box(expires_at=NOW))
        use_case = CreateOrderUseCase(uow=mocks.uow, clock=ManualClock(NOW))

        result = await use_case.execute(command=_command())

        assert result.order_id == 101

    @pytest.mark.asyncio
    async def test_store_mismatch(self) -> None:
        mocks = RepositoryMocks()
        use_case = CreateOrderUseCase(uow=mocks.uow, clock=ManualClock())

        with pytest.raises(StoreMismatchError):
            await use_case.execute(command=_command(store_id=OTHER_STORE_ID))

        mocks.boxes.mark_sold.assert_not_awaited()


class TestCreateOrderSuccess:
    @pytest.fixture
    def mocks(self) -> RepositoryMocks:
        return RepositoryMocks()

    @pytest.mark.asyncio
    async def test_app_pickup_order(self, mocks: RepositoryMocks) -> None:
        # Given
        use_case = CreateOrderUseCase(
            uow=mocks.uow, clock=ManualClock(), pickup_code_generator=lambda: 'AB23CD'
        )

        # When
        result = await use_case.execute(command=_command())

        # Then
        assert result.order_id == 101
        assert result.pickup_code == 'AB23CD'
        mocks.boxes.mark_sold.assert_awaited_once_with(box_id=42, customer_id=CUSTOMER_ID, now=NOW)

        order = mocks.created_orders[0]
        assert order.status == OrderStatus.PAID
        assert order.store_id == STORE_ID

        payment: Payment = mocks.orders.add_payment.await_args.kwargs['payment']
        assert payment.status == PaymentStatus.COMPLETED
        assert payment.currency == 'UAH'
        assert payment.amount == 9900
        assert payment.transaction_id == 'txn_01HZX'

        mocks.orders.add_delivery.assert_not_awaited()
        assert mocks.uow.commits == 1

    @pytest.mark.asyncio
    async def test_cash_delivery_order(self, mocks: RepositoryMocks) -> None:
        use_case = CreateOrderUseCase(uow=mocks.uow, clock=ManualClock(), currency='EUR')

        await use_case.execute(
            command=_command(
                payment_type=PaymentType.CASH,
                payment_method=PaymentMethod.CASH,
                fulfillment_type=FulfillmentType.DELIVERY,
                delivery_address='  Khreshchatyk St, 1, Kyiv ',
                delivery_service='glovo',
            )
        )

        assert mocks.created_orders[0].status == OrderStatus.PENDING
        payment: Payment = mocks.orders.add_payment.await_args.kwargs['payment']
        assert payment.status == PaymentStatus.PENDING
        assert payment.currency == 'EUR'

        delivery: Delivery = mocks.orders.add_delivery.await_args.kwargs['delivery']
        assert delivery.order_id == 101
        assert delivery.delivery_address == 'Khreshchatyk St, 1, Kyiv'
        assert delivery.status == DeliveryStatus.PENDING_ASSIGNMENT


class TestPickupCodeCollision:
    @pytest.mark.asyncio
    async def test_regenerates_on_collision(self) -> None:
        mocks = RepositoryMocks()
        codes = iter(['TAKEN2', 'FRESH3'])
        attempts: list[str] = []

        async def _create(*, order: Order) -> Order:
            attempts.append(order.pickup_code)
            if order.pickup_code == 'TAKEN2':
                raise PickupCodeCollisionError(order.pickup_code)
            return attrs.evolve(order, id=101)

        mocks.orders.create.side_effect = _create
        use_case = CreateOrderUseCase(
            uow=mocks.uow, clock=ManualClock(), pickup_code_generator=lambda: next(codes)
        )

        result = await use_case.execute(command=_command())

        assert attempts == ['TAKEN2', 'FRESH3']
        assert result.pickup_code == 'FRESH3'
        assert mocks.uow.commits == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_bounded_attempts(self) -> None:
        mocks = RepositoryMocks()
        mocks.orders.create.side_effect = PickupCodeCollisionError('TAKEN2')
        use_case = CreateOrderUseCase(
            uow=mocks.uow,
            clock=ManualClock(),
            pickup_code_generator=lambda: 'TAKEN2',
            max_pickup_code_attempts=3,
        )

        with pytest.raises(InternalServiceError):
            await use_case.execute(command=_command())

        assert mocks.orders.create.await_count == 3
        assert mocks.uow.commits == 0


def _database_locked(statement: str) -> OperationalError:
    return OperationalError(statement, {}, Exception('database is locked'))


class TestCreateOrderTransientRetry:
    @pytest.mark.asyncio
    async def test_deadlock_on_mark_sold_is_retried_once(self) -> None:
        # Given
        mocks = RepositoryMocks()
        mocks.boxes.mark_sold.side_effect = [_database_locked('UPDATE surprise_box'), None]
        use_case = CreateOrderUseCase(uow=mocks.uow, clock=ManualClock())

        # When
        result = await use_case.execute(command=_command())

        # Then
        assert result.order_id == 101
        assert mocks.boxes.mark_sold.await_count == 2
        assert mocks.uow.entered == 2
        assert mocks.uow.rollbacks >= 1
        assert mocks.uow.commits == 1

    @pytest.mark.asyncio
    async def test_lost_connection_on_order_insert_is_retried_once(self) -> None:
        mocks = RepositoryMocks()
        create_order = mocks.orders.create.side_effect
        calls = 0

        async def _flaky_create(*, order: Order) -> Order:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise _database_locked('INSERT INTO orders')
            return await create_order(order=order)

        mocks.orders.create.side_effect = _flaky_create
        use_case = CreateOrderUseCase(uow=mocks.uow, clock=ManualClock())

        result = await use_case.execute(command=_command())

        assert result.order_id == 101
        assert calls == 2
        assert mocks.orders.add_payment.await_count == 1
        assert mocks.uow.commits == 1

    @pytest.mark.asyncio
    async def test_second_transient_error_becomes_internal_error(self) -> None:
        mocks = RepositoryMocks()
        mocks.boxes.mark_sold.side_effect = _database_locked('UPDATE surprise_box')
        use_case = CreateOrderUseCase(uow=mocks.uow, clock=ManualClock())

        with pytest.raises(InternalServiceError):
            await use_case.execute(command=_command())

        assert mocks.boxes.mark_sold.await_count == 2
        mocks.orders.create.assert_not_awaited()
        assert mocks.uow.commits == 0
