from typing import Optional

import attrs

from src.service.surprise_box.domain.entity.order_entity import Delivery, Order, Payment


@attrs.frozen
class OrderDetail:
    order: Order
    payment: Optional[Payment] = None
    delivery: Optional[Delivery] = None
