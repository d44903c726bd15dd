"""
https://docs.sqlalchemy.org/en/20/core/custom_types.html#augmenting-existing-types

Timezone-aware UTC datetime column type.

PostgreSQL keeps the offset in ``timestamptz``; SQLite stores plain text and
hands back naive values. Binding always normalises to UTC and loading always
returns an aware UTC datetime, so ``reservation_expires_at < now`` compares
the same way on both engines.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator


class UtcDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> Any:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f'Naive datetime is not allowed: {value!r}')
        value = value.astimezone(timezone.utc)
        if dialect.name == 'sqlite':
            # Text storage: keep a single offset-free representation for ordering
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
