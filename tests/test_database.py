"""Tests for transaction and conflict-retry helpers."""

import pytest
from sqlalchemy.exc import IntegrityError

from app.config import Settings
from app.core.exceptions import ConflictException, ServerErrorException
from app.database import is_unique_violation, retry_once_on_conflict


class FakeDriverError(Exception):
    """Driver exception carrying an optional SQLSTATE, like asyncpg's."""

    def __init__(self, message: str, sqlstate: str | None = None):
        super().__init__(message)
        self.sqlstate = sqlstate


def integrity_error(message: str, sqlstate: str | None = None) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, FakeDriverError(message, sqlstate))


UNIQUE = integrity_error("UNIQUE constraint failed: enrolled_users.emed_identifier")
FOREIGN_KEY = integrity_error("FOREIGN KEY constraint failed")


def test_is_unique_violation() -> None:
    assert is_unique_violation(UNIQUE)
    assert is_unique_violation(integrity_error("duplicate key value", sqlstate="23505"))
    assert not is_unique_violation(FOREIGN_KEY)
    assert not is_unique_violation(
        integrity_error('violates foreign key constraint "fk_x"', sqlstate="23503")
    )


@pytest.mark.asyncio
async def test_retry_succeeds_after_one_collision() -> None:
    """Test a first collision is retried and the second attempt's result returned."""
    calls = []

    async def run() -> str:
        calls.append(1)
        if len(calls) == 1:
            raise UNIQUE
        return "ok"

    result = await retry_once_on_conflict(run, "conflict", operation="redeem_code")
    assert result == "ok"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_retry_gives_up_after_second_collision() -> None:
    """Test two collisions in a row become a conflict."""
    calls = []

    async def run() -> str:
        calls.append(1)
        raise UNIQUE

    with pytest.raises(ConflictException) as exc_info:
        await retry_once_on_conflict(run, "Could not allocate", operation="issue_batch")
    assert exc_info.value.message == "Could not allocate"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_retry_does_not_treat_foreign_key_error_as_collision() -> None:
    """Test non-unique integrity errors fail once as a server error."""
    calls = []

    async def run() -> str:
        calls.append(1)
        raise FOREIGN_KEY

    with pytest.raises(ServerErrorException):
        await retry_once_on_conflict(run, "conflict", operation="provision_company")
    assert len(calls) == 1


def test_cors_origins_parsing() -> None:
    """Test comma-separated CORS origins are split and blanks dropped."""
    settings = Settings(
        DATABASE_URL="sqlite+aiosqlite:///./unused.db",
        JWT_SECRET_KEY="secret",
        CORS_ORIGINS="http://a.example, http://b.example,,",
    )
    assert settings.cors_origins == ["http://a.example", "http://b.example"]
