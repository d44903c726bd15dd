"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.surprise_box.app.command import (
    complete_order_use_case,
    create_order_use_case,
    release_box_use_case,
    reserve_box_use_case,
)
from src.service.surprise_box.app.query import (
    find_order_by_pickup_code_use_case,
    get_box_use_case,
    get_order_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    reserve_box_use_case,
    create_order_use_case,
    complete_order_use_case,
    release_box_use_case,
    get_box_use_case,
    get_order_use_case,
    find_order_by_pickup_code_use_case,
]
