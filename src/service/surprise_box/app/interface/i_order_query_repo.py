from abc import ABC, abstractmethod

from src.service.surprise_box.app.dto.order_detail import OrderDetail


class IOrderQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, order_id: int) -> OrderDetail | None:
        pass

    @abstractmethod
    async def get_by_pickup_code(self, *, pickup_code: str) -> OrderDetail | None:
        pass
