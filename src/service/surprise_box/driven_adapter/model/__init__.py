"""ORM models; importing this package registers every table on Base.metadata"""

from src.service.surprise_box.driven_adapter.model.order_model import (
    DeliveryModel,
    OrderModel,
    PaymentModel,
)
from src.service.surprise_box.driven_adapter.model.surprise_box_model import SurpriseBoxModel

__all__ = [
    'DeliveryModel',
    'OrderModel',
    'PaymentModel',
    'SurpriseBoxModel',
]
