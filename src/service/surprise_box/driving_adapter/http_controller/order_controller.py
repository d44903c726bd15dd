from fastapi import APIRouter, Depends, status

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.app.command.create_order_use_case import CreateOrderUseCase
from src.service.surprise_box.app.command.reserve_box_use_case import ReserveBoxUseCase
from src.service.surprise_box.app.dto import CreateOrderCommand, OrderDetail
from src.service.surprise_box.app.query.get_order_use_case import GetOrderUseCase
from src.service.surprise_box.driving_adapter.http_controller.auth.identity import (
    require_customer,
)
from src.service.surprise_box.driving_adapter.http_controller.schema.order_schema import (
    CreateOrderRequest,
    CreateOrderResponse,
    DeliveryResponse,
    OrderResponse,
    PaymentResponse,
    ReserveBoxRequest,
    ReserveBoxResponse,
)


router = APIRouter()


def to_order_response(detail: OrderDetail) -> OrderResponse:
    order, payment, delivery = detail.order, detail.payment, detail.delivery
    return OrderResponse(
        id=order.id or 0,
        customer_id=order.customer_id,
        surprise_box_id=order.surprise_box_id,
        store_id=order.store_id,
        pickup_code=order.pickup_code,
        status=order.status.value,
        payment_type=order.payment_type.value,
        fulfillment_type=order.fulfillment_type.value,
        order_date=order.order_date,
        pickuped_at=order.pickuped_at,
        cancelled_by=order.cancelled_by.value if order.cancelled_by else None,
        cancelled_at=order.cancelled_at,
        refund_amount=order.refund_amount,
        payment=PaymentResponse(
            payment_method=payment.payment_method.value,
            amount=payment.amount,
            currency=payment.currency,
            status=payment.status.value,
            transaction_id=payment.transaction_id,
            payment_date=payment.payment_date,
            refund_amount=payment.refund_amount,
        )
        if payment
        else None,
        delivery=DeliveryResponse(
            delivery_address=delivery.delivery_address,
            delivery_service=delivery.delivery_service,
            status=delivery.status.value,
            estimated_delivery_time=delivery.estimated_delivery_time,
            tracking_code=delivery.tracking_code,
        )
        if delivery
        else None,
    )


@router.post('/reserve')
@Logger.io
async def reserve_box(
    request: ReserveBoxRequest,
    customer_id: int = Depends(require_customer),
    use_case: ReserveBoxUseCase = Depends(ReserveBoxUseCase.depends),
) -> ReserveBoxResponse:
    """Hold a box for the caller for a few minutes. Exactly one concurrent caller wins."""
    result = await use_case.execute(
        box_id=request.surprise_box_id,
        customer_id=customer_id,
        ttl_minutes=request.reservation_minutes,
    )
    return ReserveBoxResponse(surprise_box_id=result.box_id, expires_at=result.expires_at)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_order(
    request: CreateOrderRequest,
    customer_id: int = Depends(require_customer),
    use_case: CreateOrderUseCase = Depends(CreateOrderUseCase.depends),
) -> CreateOrderResponse:
    command = CreateOrderCommand(
        customer_id=customer_id,
        surprise_box_id=request.surprise_box_id,
        store_id=request.store_id,
        payment_type=request.payment_type,
        fulfillment_type=request.fulfillment_type,
        payment_method=request.payment_method,
        amount=request.amount,
        delivery_address=request.delivery_address,
        delivery_service=request.delivery_service,
        estimated_delivery_time=request.estimated_delivery_time,
        tracking_code=request.tracking_code,
        transaction_id=request.transaction_id,
        payment_gateway=request.payment_gateway,
    )
    result = await use_case.execute(command=command)
    return CreateOrderResponse(order_id=result.order_id, pickup_code=result.pickup_code)


@router.get('/{order_id}')
@Logger.io
async def get_order(
    order_id: int,
    customer_id: int = Depends(require_customer),
    use_case: GetOrderUseCase = Depends(GetOrderUseCase.depends),
) -> OrderResponse:
    detail = await use_case.execute(order_id=order_id, customer_id=customer_id)
    return to_order_response(detail)


@router.post('/{order_id}/cancel')
@Logger.io
async def cancel_order(
    order_id: int,
    customer_id: int = Depends(require_customer),
) -> None:
    # TODO: wire customer cancellation once refund rules are agreed with payments
    raise DomainError('Order cancellation is not implemented')
