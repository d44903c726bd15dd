from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.app.command.release_box_use_case import ReleaseBoxUseCase
from src.service.surprise_box.app.query.get_box_use_case import GetBoxUseCase
from src.service.surprise_box.domain.entity.surprise_box_entity import SurpriseBox
from src.service.surprise_box.driving_adapter.http_controller.auth.identity import (
    require_customer,
)
from src.service.surprise_box.driving_adapter.http_controller.schema.box_schema import (
    BoxResponse,
    ReleaseReservationResponse,
)


router = APIRouter()


def to_box_response(box: SurpriseBox) -> BoxResponse:
    return BoxResponse(
        id=box.id or 0,
        store_id=box.store_id,
        category_id=box.category_id,
        title=box.title,
        description=box.description,
        original_price=box.original_price,
        discounted_price=box.discounted_price,
        image_url=box.image_url,
        pickup_start_time=box.pickup_start_time,
        pickup_end_time=box.pickup_end_time,
        sale_start_time=box.sale_start_time,
        sale_end_time=box.sale_end_time,
        status=box.status.value,
        reserved_by=box.reserved_by,
        reserved_at=box.reserved_at,
        reservation_expires_at=box.reservation_expires_at,
        business_name=box.business_name,
        store_address=box.store_address,
        store_city=box.store_city,
        category_name=box.category_name,
    )


@router.get('/{box_id}')
@Logger.io
async def get_box(
    box_id: int,
    use_case: GetBoxUseCase = Depends(GetBoxUseCase.depends),
) -> BoxResponse:
    box = await use_case.execute(box_id=box_id)
    return to_box_response(box)


@router.delete('/{box_id}/reservation')
@Logger.io
async def release_reservation(
    box_id: int,
    customer_id: int = Depends(require_customer),
    use_case: ReleaseBoxUseCase = Depends(ReleaseBoxUseCase.depends),
) -> ReleaseReservationResponse:
    """Abandon the caller's own reservation. Releasing twice, or someone else's hold, is a no-op."""
    released = await use_case.execute(box_id=box_id, customer_id=customer_id)
    return ReleaseReservationResponse(surprise_box_id=box_id, released=released)
