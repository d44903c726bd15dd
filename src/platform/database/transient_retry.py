"""
Bounded retry for transient database failures.

Deadlocks, serialization failures and dropped connections abort the whole
transaction; the operation is replayed from the start on a fresh session.
Anything else (including every domain rejection) propagates untouched.
"""

import random
from typing import Awaitable, Callable, TypeVar

import anyio
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import InternalServiceError
from src.platform.logging.loguru_io import Logger


T = TypeVar('T')

# serialization_failure, deadlock_detected, lock_not_available
TRANSIENT_SQLSTATES = frozenset({'40001', '40P01', '55P03'})


def is_transient_db_error(exc: BaseException) -> bool:
    if isinstance(exc, IntegrityError):
        return False
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, DBAPIError):
        if exc.connection_invalidated:
            return True
        sqlstate = getattr(exc.orig, 'sqlstate', None) or getattr(exc.orig, 'pgcode', None)
        return sqlstate in TRANSIENT_SQLSTATES
    return False


async def run_with_transient_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    label: str,
    retries: int | None = None,
    jitter_ms: int | None = None,
) -> T:
    retries = settings.TRANSIENT_RETRY_ATTEMPTS if retries is None else retries
    jitter_ms = settings.TRANSIENT_RETRY_JITTER_MS if jitter_ms is None else jitter_ms

    attempt = 0
    while True:
        try:
            return await operation()
        except DBAPIError as e:
            if not is_transient_db_error(e):
                raise
            if attempt >= retries:
                Logger.base.error(f'❌ [{label}] Transient database error, giving up: {e}')
                raise InternalServiceError() from e
            attempt += 1
            delay = random.uniform(0, jitter_ms) / 1000
            Logger.base.warning(
                f'🔁 [{label}] Transient database error, retry {attempt}/{retries} in {delay:.3f}s: {e}'
            )
            await anyio.sleep(delay)
