"""
Typed rejections of the surprise box domain.

Each error carries a `reason` so HTTP clients and tests branch on the
outcome instead of parsing messages. Validation problems are 400, missing
rows are 404 and lost races / wrong owner / wrong state are 409.
"""

from enum import StrEnum

from src.platform.exception.exceptions import ConflictError, DomainError, NotFoundError


class RejectionReason(StrEnum):
    # validation
    INVALID_TTL = 'invalid_ttl'
    INVALID_AMOUNT = 'invalid_amount'
    DELIVERY_ADDRESS_REQUIRED = 'delivery_address_required'
    INVALID_PICKUP_CODE = 'invalid_pickup_code'
    # not found
    BOX_NOT_FOUND = 'box_not_found'
    ORDER_NOT_FOUND = 'order_not_found'
    # conflict
    NOT_AVAILABLE = 'not_available'
    ALREADY_RESERVED = 'already_reserved'
    NOT_RESERVED_BY_CUSTOMER = 'not_reserved_by_customer'
    RESERVATION_EXPIRED = 'reservation_expired'
    STORE_MISMATCH = 'store_mismatch'
    ALREADY_FINALIZED = 'already_finalized'
    INVALID_STATE_TRANSITION = 'invalid_state_transition'


# =============================================================================
# Validation (checked before any transaction opens)
# =============================================================================


class InvalidTtlError(DomainError):
    reason = RejectionReason.INVALID_TTL

    def __init__(self, ttl_minutes: object, max_minutes: int) -> None:
        super().__init__(
            f'reservation_minutes must be an integer between 1 and {max_minutes}, got {ttl_minutes!r}'
        )


class InvalidAmountError(DomainError):
    reason = RejectionReason.INVALID_AMOUNT

    def __init__(self, amount: object) -> None:
        super().__init__(f'Payment amount must be positive, got {amount!r}')


class DeliveryAddressRequiredError(DomainError):
    reason = RejectionReason.DELIVERY_ADDRESS_REQUIRED

    def __init__(self) -> None:
        super().__init__('Delivery address is required for delivery orders')


class InvalidPickupCodeError(DomainError):
    reason = RejectionReason.INVALID_PICKUP_CODE

    def __init__(self) -> None:
        super().__init__('Invalid pickup code')


# =============================================================================
# Not found
# =============================================================================


class BoxNotFoundError(NotFoundError):
    reason = RejectionReason.BOX_NOT_FOUND

    def __init__(self, box_id: int) -> None:
        self.box_id = box_id
        super().__init__(f'Surprise box {box_id} not found')


class OrderNotFoundError(NotFoundError):
    reason = RejectionReason.ORDER_NOT_FOUND

    def __init__(self, message: str = 'Order not found') -> None:
        super().__init__(message)


# =============================================================================
# Conflicts
# =============================================================================


class BoxNotAvailableError(ConflictError):
    reason = RejectionReason.NOT_AVAILABLE

    def __init__(self, box_id: int, detail: str = 'not available for reservation') -> None:
        self.box_id = box_id
        super().__init__(f'Surprise box {box_id} is {detail}')


class BoxAlreadyReservedError(ConflictError):
    reason = RejectionReason.ALREADY_RESERVED

    def __init__(self, box_id: int) -> None:
        self.box_id = box_id
        super().__init__(f'Surprise box {box_id} is already reserved')


class NotReservedByCustomerError(ConflictError):
    reason = RejectionReason.NOT_RESERVED_BY_CUSTOMER

    def __init__(self, box_id: int) -> None:
        self.box_id = box_id
        super().__init__(f'Surprise box {box_id} is not reserved by this customer')


class ReservationExpiredError(ConflictError):
    reason = RejectionReason.RESERVATION_EXPIRED

    def __init__(self, box_id: int) -> None:
        self.box_id = box_id
        super().__init__(f'Reservation for surprise box {box_id} has expired')


class StoreMismatchError(ConflictError):
    reason = RejectionReason.STORE_MISMATCH

    def __init__(self, message: str = 'Resource does not belong to this store') -> None:
        super().__init__(message)


class OrderAlreadyFinalizedError(ConflictError):
    reason = RejectionReason.ALREADY_FINALIZED

    def __init__(self, order_id: int, status: str) -> None:
        self.order_id = order_id
        self.status = status
        super().__init__(f'Order {order_id} is already {status}')


class InvalidStateTransitionError(ConflictError):
    reason = RejectionReason.INVALID_STATE_TRANSITION

    def __init__(self, entity: str, current: str, event: str) -> None:
        self.entity = entity
        self.current = current
        self.event = event
        super().__init__(f'Cannot {event} {entity} in status {current}')


class PickupCodeCollisionError(ConflictError):
    """Raised by the order ledger when a generated pickup code is already taken."""

    def __init__(self, pickup_code: str) -> None:
        super().__init__('Pickup code already in use')
        self.pickup_code = pickup_code
