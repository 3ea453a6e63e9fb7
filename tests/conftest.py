import os
import sys
from collections.abc import AsyncGenerator
from datetime import timedelta

import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Settings require these; tests never talk to the default database directly
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./emed_dev.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

from app.config import settings  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.database import async_database_url, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import metadata  # noqa: E402
from app.models.enrollment_codes import enrollment_codes  # noqa: E402
from app.services.program_service import ProgramService  # noqa: E402

# Test database URL - MUST be different from the application database.
# Defaults to a local SQLite file; point it at PostgreSQL to test row locking.
TEST_DATABASE_URL = async_database_url(
    os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./emed_test.db")
)

# Safety check: tests drop every table
if async_database_url(settings.database_url) == TEST_DATABASE_URL:
    print("\n❌ CRITICAL ERROR: Test database URL is same as the application database!")
    print("This would DROP all application data during tests.")
    print("Please set TEST_DATABASE_URL to a separate test database in .env")
    sys.exit(1)

# Use NullPool to avoid event loop issues between tests
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,  # Set to True for SQL debugging
    poolclass=NullPool,
)

# Create test session factory
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session with a fresh schema and the program row."""
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    async with TestSessionLocal() as session:
        await ProgramService.ensure_program(session, settings.program_code)
        yield session

    # Drop tables after test
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def provision_payload() -> dict:
    """Sample provisioning request for testing."""
    return {
        "companyName": "Acme Corp",
        "address": "1 Main Street, Springfield",
        "industry": "Manufacturing",
        "size": "51-200",
        "adminUser": {
            "name": "Jane Admin",
            "email": "jane@acme.example.com",
            "title": "HR Director",
        },
    }


@pytest_asyncio.fixture
async def provisioned_company(client: AsyncClient, provision_payload: dict) -> dict:
    """Provision a company through the API and return the response body."""
    response = await client.post("/api/v1/companies/provision", json=provision_payload)
    assert response.status_code == 201
    return response.json()


def _auth_headers(admin_id: int, company_id: int, email: str = "admin@example.com") -> dict:
    token = create_access_token(
        data={
            "sub": str(admin_id),
            "admin_id": admin_id,
            "company_id": company_id,
            "email": email,
            "name": "Test Admin",
        },
        expires_delta=timedelta(minutes=30),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(provisioned_company: dict) -> dict:
    """Authentication headers for the provisioned company's admin."""
    return _auth_headers(
        provisioned_company["admin"]["id"],
        provisioned_company["company"]["id"],
        provisioned_company["admin"]["email"],
    )


@pytest_asyncio.fixture
async def issued_batch(client: AsyncClient, admin_headers: dict) -> dict:
    """Issue a batch of five codes for the provisioned company."""
    response = await client.post(
        "/api/v1/codes/generate",
        json={"quantity": 5, "notes": "Q1 rollout"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def enrollment_payload(issued_batch: dict) -> dict:
    """Enrollment request using the first issued code."""
    return {
        "code": issued_batch["codes"][0],
        "name": "Sam Employee",
        "email": "sam@acme.example.com",
        "phone": "+1 555-123-4567",
        "dateOfBirth": "1985-04-12",
        "address": "22 Elm Street",
    }


@pytest_asyncio.fixture
async def enrolled_user(client: AsyncClient, enrollment_payload: dict) -> dict:
    """Enroll an employee through the API and return the response body."""
    response = await client.post("/api/v1/enroll", json=enrollment_payload)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def auth_headers_for():
    """Build bearer headers for any admin and company, bypassing login."""
    return _auth_headers


@pytest.fixture
def get_code_row(db_session: AsyncSession):
    """Read an enrollment code row straight from the database."""

    async def _get(code: str) -> dict:
        db_session.expire_all()
        result = await db_session.execute(
            select(enrollment_codes).where(enrollment_codes.c.code == code)
        )
        return dict(result.mappings().one())

    return _get


@pytest.fixture
def session_factory(db_session: AsyncSession) -> async_sessionmaker[AsyncSession]:
    """Factory for extra sessions on the test database, e.g. for concurrent requests."""
    return TestSessionLocal
