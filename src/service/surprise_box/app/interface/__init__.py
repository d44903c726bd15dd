"""Application layer interfaces (Ports)"""

from src.service.surprise_box.app.interface.i_box_command_repo import IBoxCommandRepo
from src.service.surprise_box.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.surprise_box.app.interface.i_order_query_repo import IOrderQueryRepo

__all__ = [
    'IBoxCommandRepo',
    'IOrderCommandRepo',
    'IOrderQueryRepo',
]
