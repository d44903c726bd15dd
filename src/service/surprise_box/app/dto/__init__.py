"""Application layer DTOs"""

from src.service.surprise_box.app.dto.order_command_dto import (
    CreateOrderCommand,
    CreateOrderResult,
    ReservationResult,
)
from src.service.surprise_box.app.dto.order_detail import OrderDetail

__all__ = [
    'CreateOrderCommand',
    'CreateOrderResult',
    'OrderDetail',
    'ReservationResult',
]
