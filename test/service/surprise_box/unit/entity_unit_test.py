from datetime import timedelta

import pytest

from src.platform.exception.exceptions import DomainError
from src.service.surprise_box.domain.entity.order_entity import Order, Payment
from src.service.surprise_box.domain.entity.surprise_box_entity import SurpriseBox
from src.service.surprise_box.domain.enum import (
    BoxStatus,
    FulfillmentType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)
from test.service.surprise_box.fixtures import (
    CUSTOMER_ID,
    NOW,
    OTHER_CUSTOMER_ID,
    STORE_ID,
    make_box,
    make_reserved_box,
)


class TestSurpriseBox:
    def _create(self, **overrides: object) -> SurpriseBox:
        fields: dict = {
            'store_id': STORE_ID,
            'category_id': 2,
            'title': 'Bakery surprise',
            'original_price': 30000,
            'discounted_price': 9900,
            'sale_start_time': NOW - timedelta(hours=1),
            'sale_end_time': NOW + timedelta(hours=5),
            'pickup_start_time': NOW + timedelta(hours=1),
            'pickup_end_time': NOW + timedelta(hours=3),
        }
        fields |= overrides
        return SurpriseBox.create(**fields)

    def test_create_defaults_to_active(self) -> None:
        box = self._create()

        assert box.status == BoxStatus.ACTIVE
        assert box.reserved_by is None
        assert box.reservation_expires_at is None

    @pytest.mark.parametrize(
        'overrides',
        [
            {'title': '  '},
            {'original_price': 0},
            {'discounted_price': 40000},
            {'pickup_end_time': NOW},
            {'sale_end_time': NOW - timedelta(hours=2)},
            {'pickup_end_time': NOW + timedelta(hours=6)},
            {'status': BoxStatus.SOLD},
        ],
    )
    def test_create_rejects_invalid_boxes(self, overrides: dict) -> None:
        with pytest.raises(DomainError):
            self._create(**overrides)

    def test_reservation_fields_require_reserved_status(self) -> None:
        with pytest.raises(DomainError, match='reservation fields'):
            make_box(status=BoxStatus.ACTIVE, reserved_by=CUSTOMER_ID, reservation_expires_at=NOW)

    def test_reserved_status_requires_reservation_fields(self) -> None:
        with pytest.raises(DomainError, match='reservation fields'):
            make_box(status=BoxStatus.RESERVED)

    def test_is_reserved_by(self) -> None:
        box = make_reserved_box(customer_id=CUSTOMER_ID)

        assert box.is_reserved_by(CUSTOMER_ID)
        assert not box.is_reserved_by(OTHER_CUSTOMER_ID)

    def test_reservation_expiry_boundary(self) -> None:
        box = make_reserved_box(expires_at=NOW)

        assert not box.is_reservation_expired(NOW)
        assert box.is_reservation_expired(NOW + timedelta(microseconds=1))

    def test_is_on_sale(self) -> None:
        box = make_box()

        assert box.is_on_sale(NOW)
        assert not box.is_on_sale(NOW + timedelta(hours=6))


class TestOrder:
    def _create(self, payment_type: PaymentType) -> Order:
        return Order.create(
            customer_id=CUSTOMER_ID,
            surprise_box_id=42,
            store_id=STORE_ID,
            pickup_code='AB23CD',
            payment_type=payment_type,
            fulfillment_type=FulfillmentType.PICKUP,
            now=NOW,
        )

    def test_app_payment_order_starts_paid(self) -> None:
        order = self._create(PaymentType.APP)

        assert order.status == OrderStatus.PAID
        assert order.order_date == NOW
        assert order.pickuped_at is None

    def test_cash_order_starts_pending(self) -> None:
        assert self._create(PaymentType.CASH).status == OrderStatus.PENDING

    def test_pickup_code_match_is_case_insensitive(self) -> None:
        order = self._create(PaymentType.APP)

        assert order.matches_pickup_code(' ab23cd ')
        assert not order.matches_pickup_code('AB23CE')

    @pytest.mark.parametrize(
        ('status', 'finalized'),
        [
            (OrderStatus.PAID, False),
            (OrderStatus.COMPLETED, True),
            (OrderStatus.CANCELLED, True),
            (OrderStatus.REFUNDED, True),
        ],
    )
    def test_is_finalized(self, status: OrderStatus, finalized: bool) -> None:
        order = self._create(PaymentType.APP)
        order.status = status

        assert order.is_finalized is finalized


class TestPayment:
    @pytest.mark.parametrize(
        ('payment_type', 'expected'),
        [(PaymentType.APP, PaymentStatus.COMPLETED), (PaymentType.CASH, PaymentStatus.PENDING)],
    )
    def test_status_follows_payment_type(
        self, payment_type: PaymentType, expected: PaymentStatus
    ) -> None:
        order = Order.create(
            customer_id=CUSTOMER_ID,
            surprise_box_id=42,
            store_id=STORE_ID,
            pickup_code='AB23CD',
            payment_type=payment_type,
            fulfillment_type=FulfillmentType.PICKUP,
            now=NOW,
        )
        order.id = 101

        payment = Payment.for_order(
            order=order, payment_method=PaymentMethod.CARD, amount=9900, currency='UAH'
        )

        assert payment.status == expected
        assert payment.order_id == 101
        assert payment.payment_date == NOW

    def test_requires_persisted_order(self) -> None:
        order = Order.create(
            customer_id=CUSTOMER_ID,
            surprise_box_id=42,
            store_id=STORE_ID,
            pickup_code='AB23CD',
            payment_type=PaymentType.APP,
            fulfillment_type=FulfillmentType.PICKUP,
            now=NOW,
        )

        with pytest.raises(ValueError, match='persisted order'):
            Payment.for_order(
                order=order, payment_method=PaymentMethod.CARD, amount=9900, currency='UAH'
            )
