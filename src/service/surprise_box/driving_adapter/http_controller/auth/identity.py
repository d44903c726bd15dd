"""
Caller identity.

Authentication happens at the gateway in front of this service; it forwards
the authenticated customer or store employee as plain headers.
"""

from typing import Annotated, Optional

from fastapi import Header

from src.platform.constant.route_constant import CUSTOMER_ID_HEADER, STORE_ID_HEADER
from src.platform.exception.exceptions import ForbiddenError


async def require_customer(
    customer_id: Annotated[Optional[int], Header(alias=CUSTOMER_ID_HEADER)] = None,
) -> int:
    if customer_id is None or customer_id <= 0:
        raise ForbiddenError('Only customers can perform this action')
    return customer_id


async def require_store_employee(
    store_id: Annotated[Optional[int], Header(alias=STORE_ID_HEADER)] = None,
) -> int:
    if store_id is None or store_id <= 0:
        raise ForbiddenError('Only store employees can perform this action')
    return store_id
