from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.app.dto.order_detail import OrderDetail
from src.service.surprise_box.app.interface.i_order_query_repo import IOrderQueryRepo
from src.service.surprise_box.domain.errors import OrderNotFoundError, StoreMismatchError


class FindOrderByPickupCodeUseCase:
    """Counter lookup: the employee types the customer's code before completing."""

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
    async def execute(self, *, pickup_code: str, store_id: int) -> OrderDetail:
        detail = await self.order_query_repo.get_by_pickup_code(pickup_code=pickup_code)
        if detail is None:
            raise OrderNotFoundError('No order with this pickup code')
        if detail.order.store_id != store_id:
            raise StoreMismatchError('Order belongs to another store')
        return detail
