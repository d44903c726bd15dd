from enum import StrEnum


class OrderStatus(StrEnum):
    PENDING = 'pending'
    PAID = 'paid'
    READY_FOR_PICKUP = 'ready_for_pickup'
    IN_DELIVERY = 'in_delivery'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'


class OrderEvent(StrEnum):
    MARK_PAID = 'mark_paid'
    MARK_READY = 'mark_ready'
    DISPATCH = 'dispatch'
    COMPLETE = 'complete'
    CANCEL = 'cancel'
    REFUND = 'refund'


class CancellerType(StrEnum):
    CUSTOMER = 'customer'
    STORE = 'store'
