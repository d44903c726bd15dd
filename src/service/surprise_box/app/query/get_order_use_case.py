from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.app.dto.order_detail import OrderDetail
from src.service.surprise_box.app.interface.i_order_query_repo import IOrderQueryRepo
from src.service.surprise_box.domain.errors import OrderNotFoundError


class GetOrderUseCase:
    def __init__(self, *, order_query_repo: IOrderQueryRepo) -> None:
        self.order_query_repo = order_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        order_query_repo: IOrderQueryRepo = Depends(Provide[Container.order_query_repo]),
    ) -> Self:
        return cls(order_query_repo=order_query_repo)

    @Logger.io
    async def execute(self, *, order_id: int, customer_id: int) -> OrderDetail:
        detail = await self.order_query_repo.get_by_id(order_id=order_id)
        if detail is None:
            raise OrderNotFoundError()
        if detail.order.customer_id != customer_id:
            raise ForbiddenError('Only the customer who placed the order can view it')
        return detail
