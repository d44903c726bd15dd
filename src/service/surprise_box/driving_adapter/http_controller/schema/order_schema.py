from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.service.surprise_box.domain.enum import FulfillmentType, PaymentMethod, PaymentType


class ReserveBoxRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={'example': {'surprise_box_id': 42, 'reservation_minutes': 5}}
    )

    surprise_box_id: int = Field(gt=0)
    # Passed through raw; ReservationPolicy applies the default and rejects bad values
    reservation_minutes: Any = None


class ReserveBoxResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {'surprise_box_id': 42, 'expires_at': '2025-06-01T18:05:00Z'}
        }
    )

    surprise_box_id: int
    expires_at: datetime


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'examples': [
                {
                    'surprise_box_id': 42,
                    'store_id': 3,
                    'payment_type': 'app',
                    'fulfillment_type': 'pickup',
                    'payment_method': 'card',
                    'amount': 9900,
                    'transaction_id': 'txn_01HZX',
                    'payment_gateway': 'liqpay',
                },
                {
                    'surprise_box_id': 43,
                    'store_id': 3,
                    'payment_type': 'cash',
                    'fulfillment_type': 'delivery',
                    'payment_method': 'cash',
                    'amount': 12900,
                    'delivery_address': 'Khreshchatyk St, 1, Kyiv',
                },
            ]
        }
    )

    surprise_box_id: int = Field(gt=0)
    store_id: int = Field(gt=0)
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


class CreateOrderResponse(BaseModel):
    model_config = ConfigDict(json_schema_extra={'example': {'order_id': 101, 'pickup_code': 'AB23CD'}})

    order_id: int
    pickup_code: str


class CompleteOrderRequest(BaseModel):
    model_config = ConfigDict(json_schema_extra={'example': {'order_id': 101, 'pickup_code': 'AB23CD'}})

    order_id: int = Field(gt=0)
    pickup_code: str = Field(min_length=1, max_length=16)


class CompleteOrderResponse(BaseModel):
    order_id: int
    status: str
    pickuped_at: Optional[datetime] = None


class PaymentResponse(BaseModel):
    payment_method: str
    amount: int
    currency: str
    status: str
    transaction_id: Optional[str] = None
    payment_date: Optional[datetime] = None
    refund_amount: Optional[int] = None


class DeliveryResponse(BaseModel):
    delivery_address: str
    delivery_service: Optional[str] = None
    status: str
    estimated_delivery_time: Optional[datetime] = None
    tracking_code: Optional[str] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'id': 101,
                'customer_id': 7,
                'surprise_box_id': 42,
                'store_id': 3,
                'pickup_code': 'AB23CD',
                'status': 'paid',
                'payment_type': 'app',
                'fulfillment_type': 'pickup',
                'order_date': '2025-06-01T18:01:00Z',
                'pickuped_at': None,
                'payment': {
                    'payment_method': 'card',
                    'amount': 9900,
                    'currency': 'UAH',
                    'status': 'completed',
                },
                'delivery': None,
            }
        }
    )

    id: int
    customer_id: int
    surprise_box_id: int
    store_id: int
    pickup_code: str
    status: str
    payment_type: str
    fulfillment_type: str
    order_date: Optional[datetime] = None
    pickuped_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    refund_amount: Optional[int] = None
    payment: Optional[PaymentResponse] = None
    delivery: Optional[DeliveryResponse] = None
