"""
Tests for database connection resilience and retry logic.
"""

import pytest
from sqlalchemy.exc import OperationalError
from waitlist.db import Database, retry_on_db_error


@pytest.mark.asyncio
async def test_check_connection_healthy(settings_factory):
    """Test database health check returns True when DB is available."""
    database = Database(settings_factory())
    try:
        assert await database.check_connection() is True
    finally:
        await database.dispose()


@pytest.mark.asyncio
async def test_check_connection_unreachable(settings_factory, tmp_path):
    """Test database health check returns False when the database cannot be opened."""
    missing = tmp_path / "missing-dir" / "waitlist.db"
    database = Database(settings_factory(DATABASE_URL=f"sqlite+aiosqlite:///{missing}"))
    try:
        assert await database.check_connection() is False
    finally:
        await database.dispose()


@pytest.mark.asyncio
async def test_retry_on_db_error_success():
    """Test retry logic succeeds on first attempt."""
    call_count = 0

    async def successful_func():
        nonlocal call_count
        call_count += 1
        return "success"

    result = await retry_on_db_error(successful_func)
    assert result == "success"
    assert call_count == 1


@pytest.mark.asyncio
async def test_retry_on_db_error_retries_on_connection_error():
    """Test retry logic retries on connection errors."""
    call_count = 0

    async def failing_then_success():
        nonlocal call_count
        call_count += 1
        if call_count < 2:
            raise OperationalError("connection reset by peer", None, None)
        return "success"

    result = await retry_on_db_error(failing_then_success, max_retries=3, base_delay=0.01)
    assert result == "success"
    assert call_count == 2


@pytest.mark.asyncio
async def test_retry_on_db_error_fails_after_max_retries():
    """Test retry logic fails after max retries exhausted."""
    call_count = 0

    async def always_failing():
        nonlocal call_count
        call_count += 1
        raise OperationalError("connection timeout", None, None)

    with pytest.raises(OperationalError):
        await retry_on_db_error(always_failing, max_retries=2, base_delay=0.01)

    assert call_count == 2


@pytest.mark.asyncio
async def test_retry_on_db_error_no_retry_on_constraint_violation():
    """Test retry logic does NOT retry on non-retryable errors."""
    call_count = 0

    async def constraint_error():
        nonlocal call_count
        call_count += 1
        raise OperationalError("unique constraint violated", None, None)

    with pytest.raises(OperationalError):
        await retry_on_db_error(constraint_error, max_retries=3, base_delay=0.01)

    assert call_count == 1


@pytest.mark.asyncio
async def test_database_retry_uses_settings(settings_factory):
    """Test Database.retry applies the configured attempt count."""
    database = Database(settings_factory(DB_RETRY_MAX_ATTEMPTS=4, DB_RETRY_BASE_DELAY=0.001))
    call_count = 0

    async def always_failing():
        nonlocal call_count
        call_count += 1
        raise OperationalError("server closed the connection unexpectedly", None, None)

    try:
        with pytest.raises(OperationalError):
            await database.retry(always_failing)
    finally:
        await database.dispose()

    assert call_count == 4
