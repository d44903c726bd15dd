from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from src.platform.database.transient_retry import is_transient_db_error, run_with_transient_retry
from src.platform.exception.exceptions import InternalServiceError
from src.service.surprise_box.domain.errors import BoxAlreadyReservedError


class _PgError(Exception):
    def __init__(self, sqlstate: str) -> None:
        super().__init__(f'sqlstate {sqlstate}')
        self.sqlstate = sqlstate


def _dbapi_error(sqlstate: str) -> DBAPIError:
    return DBAPIError('UPDATE surprise_box', {}, _PgError(sqlstate))


class TestIsTransientDbError:
    @pytest.mark.parametrize('sqlstate', ['40001', '40P01', '55P03'])
    def test_deadlock_and_serialization_failures(self, sqlstate: str) -> None:
        assert is_transient_db_error(_dbapi_error(sqlstate))

    def test_operational_error(self) -> None:
        assert is_transient_db_error(OperationalError('SELECT 1', {}, Exception('locked')))

    def test_invalidated_connection(self) -> None:
        error = DBAPIError('SELECT 1', {}, Exception('gone'), connection_invalidated=True)
        assert is_transient_db_error(error)

    def test_integrity_error_is_permanent(self) -> None:
        assert not is_transient_db_error(IntegrityError('INSERT', {}, _PgError('23505')))

    def test_other_sqlstate_is_permanent(self) -> None:
        assert not is_transient_db_error(_dbapi_error('42P01'))


class TestRunWithTransientRetry:
    @pytest.mark.asyncio
    async def test_returns_first_success(self) -> None:
        operation = AsyncMock(return_value='ok')

        assert await run_with_transient_retry(operation, label='TEST', retries=1) == 'ok'
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_transient_error(self) -> None:
        operation = AsyncMock(side_effect=[_dbapi_error('40P01'), 'ok'])

        result = await run_with_transient_retry(operation, label='TEST', retries=1, jitter_ms=0)

        assert result == 'ok'
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_internal_error(self) -> None:
        operation = AsyncMock(side_effect=_dbapi_error('40001'))

        with pytest.raises(InternalServiceError):
            await run_with_transient_retry(operation, label='TEST', retries=2, jitter_ms=0)

        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_domain_errors_pass_through(self) -> None:
        operation = AsyncMock(side_effect=BoxAlreadyReservedError(42))

        with pytest.raises(BoxAlreadyReservedError):
            await run_with_transient_retry(operation, label='TEST', retries=1, jitter_ms=0)

        assert operation.await_count == 1
