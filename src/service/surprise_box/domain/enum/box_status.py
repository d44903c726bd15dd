from enum import StrEnum


class BoxStatus(StrEnum):
    DRAFT = 'draft'
    ACTIVE = 'active'
    RESERVED = 'reserved'
    SOLD = 'sold'
    EXPIRED = 'expired'  # sale window lapsed
    CANCELLED = 'cancelled'  # withdrawn by the store


class BoxEvent(StrEnum):
    ACTIVATE = 'activate'
    RESERVE = 'reserve'
    RELEASE = 'release'
    SELL = 'sell'
    CONFIRM_SOLD = 'confirm_sold'
    WITHDRAW = 'withdraw'
    EXPIRE_SALE = 'expire_sale'
