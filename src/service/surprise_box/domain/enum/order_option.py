"""Checkout options chosen by the customer and the statuses of the rows they produce."""

from enum import StrEnum


class PaymentType(StrEnum):
    APP = 'app'  # paid in the app before the order is created
    CASH = 'cash'  # paid at the counter on pickup


class FulfillmentType(StrEnum):
    PICKUP = 'pickup'
    DELIVERY = 'delivery'


class PaymentMethod(StrEnum):
    CARD = 'card'
    DIGITAL_WALLET = 'digital_wallet'
    CASH = 'cash'
    APP = 'app'


class PaymentStatus(StrEnum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
    REFUNDED = 'refunded'


class DeliveryStatus(StrEnum):
    PENDING_ASSIGNMENT = 'pending_assignment'
    ASSIGNED = 'assigned'
    IN_TRANSIT = 'in_transit'
    DELIVERED = 'delivered'
    FAILED = 'failed'
