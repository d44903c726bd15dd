from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.app.command.complete_order_use_case import CompleteOrderUseCase
from src.service.surprise_box.app.query.find_order_by_pickup_code_use_case import (
    FindOrderByPickupCodeUseCase,
)
from src.service.surprise_box.driving_adapter.http_controller.auth.identity import (
    require_store_employee,
)
from src.service.surprise_box.driving_adapter.http_controller.order_controller import (
    to_order_response,
)
from src.service.surprise_box.driving_adapter.http_controller.schema.order_schema import (
    CompleteOrderRequest,
    CompleteOrderResponse,
    OrderResponse,
)


router = APIRouter()


@router.post('/complete')
@Logger.io
async def complete_order(
    request: CompleteOrderRequest,
    store_id: int = Depends(require_store_employee),
    use_case: CompleteOrderUseCase = Depends(CompleteOrderUseCase.depends),
) -> CompleteOrderResponse:
    order = await use_case.execute(
        order_id=request.order_id, pickup_code=request.pickup_code, store_id=store_id
    )
    return CompleteOrderResponse(
        order_id=order.id or request.order_id,
        status=order.status.value,
        pickuped_at=order.pickuped_at,
    )


@router.get('/pickup/{pickup_code}')
@Logger.io
async def find_order_by_pickup_code(
    pickup_code: str,
    store_id: int = Depends(require_store_employee),
    use_case: FindOrderByPickupCodeUseCase = Depends(FindOrderByPickupCodeUseCase.depends),
) -> OrderResponse:
    detail = await use_case.execute(pickup_code=pickup_code, store_id=store_id)
    return to_order_response(detail)
