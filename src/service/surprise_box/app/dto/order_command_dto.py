from datetime import datetime
from typing import Optional

import attrs

from src.service.surprise_box.domain.enum import FulfillmentType, PaymentMethod, PaymentType


@attrs.frozen
class ReservationResult:
    box_id: int
    customer_id: int
    expires_at: datetime


@attrs.frozen
class CreateOrderCommand:
    customer_id: int
    surprise_box_id: int
    store_id: int
    payment_type: PaymentType
    fulfillment_type: FulfillmentType
    payment_method: PaymentMethod
    amount: int  # minor currency units
    delivery_address: Optional[str] = None
    delivery_service: Optional[str] = None
    estimated_delivery_time: Optional[datetime] = None
    tracking_code: Optional[str] = None
    transaction_id: Optional[str] = None
    payment_gateway: Optional[str] = None


@attrs.frozen
class CreateOrderResult:
    order_id: int
    pickup_code: str
