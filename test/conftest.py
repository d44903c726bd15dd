"""
Test Configuration and Fixtures

This module provides:
- Environment setup that must happen before application modules are imported
- Marker assignment by directory (test/**/unit/ -> unit, test/**/integration/ -> integration)

Architecture:
- Unit tests (test/**/unit/): use-case tests with AsyncMock ledgers, no database
- Integration tests (test/**/integration/): real ledgers on a temporary SQLite file
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the loguru sinks are built at import time
# =============================================================================
import os
from pathlib import Path
import tempfile


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    # Default engine for anything resolved through the container; fixtures
    # hand out their own per-test database file
    default_db = Path(tempfile.gettempdir()) / f'surprise_box_test_{os.getpid()}.db'
    os.environ.setdefault('DATABASE_URL', f'sqlite+aiosqlite:///{default_db}')
    os.environ.setdefault('DEPLOY_ENV', 'test')


# Call immediately to set env vars before any imports
_early_setup_test_environment()

import pytest  # noqa: E402


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        path = str(item.path)
        if f'{os.sep}unit{os.sep}' in path:
            item.add_marker(pytest.mark.unit)
        elif f'{os.sep}integration{os.sep}' in path:
            item.add_marker(pytest.mark.integration)
