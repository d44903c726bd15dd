from datetime import datetime
import secrets
from typing import Optional

import attrs

from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.domain.enum import (
    CancellerType,
    DeliveryStatus,
    FulfillmentType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)
from src.service.surprise_box.domain.pickup_code import normalize_pickup_code
from src.service.surprise_box.domain.state_machine import ORDER_STATE_MACHINE


@attrs.define
class Order:
    customer_id: int
    surprise_box_id: int
    store_id: int
    pickup_code: str
    payment_type: PaymentType
    fulfillment_type: FulfillmentType
    status: OrderStatus = OrderStatus.PENDING
    order_date: Optional[datetime] = None
    pickuped_at: Optional[datetime] = None
    cancelled_by: Optional[CancellerType] = None
    cancelled_at: Optional[datetime] = None
    refund_amount: Optional[int] = None
    id: Optional[int] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        customer_id: int,
        surprise_box_id: int,
        store_id: int,
        pickup_code: str,
        payment_type: PaymentType,
        fulfillment_type: FulfillmentType,
        now: datetime,
    ) -> 'Order':
        # App payments are settled before the order exists; cash is collected at the counter
        status = OrderStatus.PAID if payment_type == PaymentType.APP else OrderStatus.PENDING
        return cls(
            customer_id=customer_id,
            surprise_box_id=surprise_box_id,
            store_id=store_id,
            pickup_code=pickup_code,
            payment_type=payment_type,
            fulfillment_type=fulfillment_type,
            status=status,
            order_date=now,
            updated_at=now,
        )

    @property
    def is_finalized(self) -> bool:
        return ORDER_STATE_MACHINE.is_terminal(self.status)

    def matches_pickup_code(self, code: str) -> bool:
        return secrets.compare_digest(
            normalize_pickup_code(code).encode(), self.pickup_code.encode()
        )


@attrs.define
class Payment:
    order_id: int
    payment_method: PaymentMethod
    amount: int  # minor currency units
    currency: str
    status: PaymentStatus
    transaction_id: Optional[str] = None
    payment_gateway: Optional[str] = None
    payment_date: Optional[datetime] = None
    refund_amount: Optional[int] = None
    id: Optional[int] = None

    @classmethod
    def for_order(
        cls,
        *,
        order: Order,
        payment_method: PaymentMethod,
        amount: int,
        currency: str,
        transaction_id: Optional[str] = None,
        payment_gateway: Optional[str] = None,
    ) -> 'Payment':
        if order.id is None:
            raise ValueError('Payment can only be recorded for a persisted order')
        status = (
            PaymentStatus.COMPLETED if order.payment_type == PaymentType.APP else PaymentStatus.PENDING
        )
        return cls(
            order_id=order.id,
            payment_method=payment_method,
            amount=amount,
            currency=currency,
            status=status,
            transaction_id=transaction_id,
            payment_gateway=payment_gateway,
            payment_date=order.order_date,
        )


@attrs.define
class Delivery:
    order_id: int
    delivery_address: str
    delivery_service: Optional[str] = None
    status: DeliveryStatus = DeliveryStatus.PENDING_ASSIGNMENT
    estimated_delivery_time: Optional[datetime] = None
    tracking_code: Optional[str] = None
    id: Optional[int] = None
