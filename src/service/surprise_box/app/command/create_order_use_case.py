from datetime import datetime
from functools import partial
from typing import Callable, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.transient_retry import run_with_transient_retry
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import InternalServiceError
from src.platform.logging.loguru_io import Logger
from src.service.surprise_box.app.dto.order_command_dto import (
    CreateOrderCommand,
    CreateOrderResult,
)
from src.service.surprise_box.domain.entity.order_entity import Delivery, Order, Payment
from src.service.surprise_box.domain.enum import FulfillmentType
from src.service.surprise_box.domain.errors import (
    BoxNotFoundError,
    DeliveryAddressRequiredError,
    InvalidAmountError,
    NotReservedByCustomerError,
    PickupCodeCollisionError,
    ReservationExpiredError,
    StoreMismatchError,
)
from src.service.surprise_box.domain.pickup_code import generate_pickup_code
from src.service.surprise_box.domain.reservation_policy import Clock


class CreateOrderUseCase:
    """
    Convert an active reservation into an order.

    Input is validated before any transaction opens. Inside one transaction:
    1. Re-check the box: exists, reserved by this customer, not expired, same store
    2. RESERVED -> SOLD (conditional UPDATE re-validates owner and expiry)
    3. Insert the order with a fresh pickup code, regenerating on collision
    4. Insert the payment row and, for delivery, the delivery row
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        clock: Clock,
        pickup_code_generator: Optional[Callable[[], str]] = None,
        max_pickup_code_attempts: int = settings.PICKUP_CODE_MAX_ATTEMPTS,
        currency: str = settings.PAYMENT_CURRENCY,
    ) -> None:
        self.uow = uow
        self.clock = clock
        self.pickup_code_generator = pickup_code_generator or partial(
            generate_pickup_code, settings.PICKUP_CODE_LENGTH
        )
        self.max_pickup_code_attempts = max_pickup_code_attempts
        self.currency = currency

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow=uow, clock=clock)

    @staticmethod
    def _validate(command: CreateOrderCommand) -> None:
        if isinstance(command.amount, bool) or command.amount <= 0:
            raise InvalidAmountError(command.amount)
        if command.fulfillment_type == FulfillmentType.DELIVERY and not (
            command.delivery_address and command.delivery_address.strip()
        ):
            raise DeliveryAddressRequiredError()

    @Logger.io
    async def execute(self, *, command: CreateOrderCommand) -> CreateOrderResult:
        self._validate(command)
        return await run_with_transient_retry(lambda: self._create(command), label='ORDER')

    async def _create(self, command: CreateOrderCommand) -> CreateOrderResult:
        box_id = command.surprise_box_id
        async with self.uow:
            now = self.clock()

            box = await self.uow.boxes.get_by_id(box_id=box_id)
            if box is None:
                raise BoxNotFoundError(box_id)
            if not box.is_reserved_by(command.customer_id):
                raise NotReservedByCustomerError(box_id)
            if box.is_reservation_expired(now):
                raise ReservationExpiredError(box_id)
            if box.store_id != command.store_id:
                raise StoreMismatchError(
                    f'Surprise box {box_id} does not belong to store {command.store_id}'
                )

            await self.uow.boxes.mark_sold(box_id=box_id, customer_id=command.customer_id, now=now)
            order = await self._insert_order(command=command, now=now)
            order_id = order.id
            if order_id is None:
                raise InternalServiceError('Order ledger returned an order without an id')
            await self.uow.orders.add_payment(
                payment=Payment.for_order(
                    order=order,
                    payment_method=command.payment_method,
                    amount=command.amount,
                    currency=self.currency,
                    transaction_id=command.transaction_id,
                    payment_gateway=command.payment_gateway,
                )
            )
            if command.fulfillment_type == FulfillmentType.DELIVERY:
                await self.uow.orders.add_delivery(
                    delivery=Delivery(
                        order_id=order_id,
                        # _validate guarantees a non-blank address for delivery orders
                        delivery_address=(command.delivery_address or '').strip(),
                        delivery_service=command.delivery_service,
                        estimated_delivery_time=command.estimated_delivery_time,
                        tracking_code=command.tracking_code,
                    )
                )

            await self.uow.commit()

        return CreateOrderResult(order_id=order_id, pickup_code=order.pickup_code)

    async def _insert_order(self, *, command: CreateOrderCommand, now: datetime) -> Order:
        for attempt in range(1, self.max_pickup_code_attempts + 1):
            order = Order.create(
                customer_id=command.customer_id,
                surprise_box_id=command.surprise_box_id,
                store_id=command.store_id,
                pickup_code=self.pickup_code_generator(),
                payment_type=command.payment_type,
                fulfillment_type=command.fulfillment_type,
                now=now,
            )
            try:
                return await self.uow.orders.create(order=order)
            except PickupCodeCollisionError:
                Logger.base.warning(
                    f'🔁 [ORDER] Pickup code collision, attempt {attempt}/{self.max_pickup_code_attempts}'
                )

        raise InternalServiceError('Could not allocate a unique pickup code')
