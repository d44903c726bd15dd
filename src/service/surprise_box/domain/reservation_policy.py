"""Reservation lifetime rules and the notion of "now" used by every ledger call."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

import attrs

from src.service.surprise_box.domain.enum import BoxStatus
from src.service.surprise_box.domain.errors import InvalidTtlError


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_reservation_expired(
    *, status: BoxStatus, reservation_expires_at: Optional[datetime], now: datetime
) -> bool:
    # Strict: at exactly expires_at the hold is still valid
    return (
        status == BoxStatus.RESERVED
        and reservation_expires_at is not None
        and reservation_expires_at < now
    )


@attrs.frozen
class ReservationPolicy:
    default_minutes: int = 5
    max_minutes: int = 15

    def __attrs_post_init__(self) -> None:
        if not 0 < self.default_minutes <= self.max_minutes:
            raise ValueError(
                f'default_minutes ({self.default_minutes}) must be within 1..{self.max_minutes}'
            )

    def resolve_ttl(self, ttl_minutes: object) -> int:
        if ttl_minutes is None:
            return self.default_minutes
        if (
            isinstance(ttl_minutes, bool)
            or not isinstance(ttl_minutes, int)
            or not 0 < ttl_minutes <= self.max_minutes
        ):
            raise InvalidTtlError(ttl_minutes, self.max_minutes)
        return ttl_minutes

    def expires_at(self, *, now: datetime, ttl_minutes: int) -> datetime:
        return now + timedelta(minutes=ttl_minutes)
