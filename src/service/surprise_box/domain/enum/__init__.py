"""Surprise Box Domain Enums"""

from src.service.surprise_box.domain.enum.box_status import BoxEvent, BoxStatus
from src.service.surprise_box.domain.enum.order_option import (
    DeliveryStatus,
    FulfillmentType,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)
from src.service.surprise_box.domain.enum.order_status import (
    CancellerType,
    OrderEvent,
    OrderStatus,
)

__all__ = [
    'BoxEvent',
    'BoxStatus',
    'CancellerType',
    'DeliveryStatus',
    'FulfillmentType',
    'OrderEvent',
    'OrderStatus',
    'PaymentMethod',
    'PaymentStatus',
    'PaymentType',
]
