"""Tests for admin authentication."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import decode_access_token
from app.models.admins import admins


@pytest.mark.asyncio
async def test_login_success(
    client: AsyncClient,
    db_session: AsyncSession,
    provisioned_company: dict,
) -> None:
    """Test login returns a token carrying admin and company claims."""
    response = await client.post(
        "/api/v1/auth/login",
        json={
            "email": provisioned_company["credentials"]["email"],
            "password": provisioned_company["credentials"]["tempPassword"],
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["admin"]["id"] == provisioned_company["admin"]["id"]
    assert data["company"]["name"] == "Acme Corp"
    assert data["company"]["size"] == "51-200"

    claims = decode_access_token(data["token"])
    assert claims is not None
    assert claims["admin_id"] == provisioned_company["admin"]["id"]
    assert claims["company_id"] == provisioned_company["company"]["id"]
    assert claims["type"] == "access"

    last_login = await db_session.scalar(
        select(admins.c.last_login).where(admins.c.id == provisioned_company["admin"]["id"])
    )
    assert last_login is not None


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, provisioned_company: dict) -> None:
    """Test a wrong password is rejected with a generic message."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": provisioned_company["credentials"]["email"], "password": "wrong"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient) -> None:
    """Test an unknown email gets the same answer as a wrong password."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@example.com", "password": "whatever"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_me_returns_principal(
    client: AsyncClient,
    provisioned_company: dict,
    admin_headers: dict,
) -> None:
    """Test the token resolves to the admin principal."""
    response = await client.get("/api/v1/auth/me", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["admin_id"] == provisioned_company["admin"]["id"]
    assert data["company_id"] == provisioned_company["company"]["id"]


@pytest.mark.asyncio
async def test_admin_endpoint_requires_token(client: AsyncClient) -> None:
    """Test admin endpoints reject requests without a token."""
    response = await client.get("/api/v1/codes")
    assert response.status_code == 401

    response = await client.get(
        "/api/v1/codes", headers={"Authorization": "Bearer not-a-real-token"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_inactive_admin_forbidden(
    client: AsyncClient,
    db_session: AsyncSession,
    provisioned_company: dict,
    admin_headers: dict,
) -> None:
    """Test a deactivated admin's token no longer grants access."""
    await db_session.execute(
        update(admins)
        .where(admins.c.id == provisioned_company["admin"]["id"])
        .values(active=False)
    )
    await db_session.commit()

    response = await client.get("/api/v1/codes", headers=admin_headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Access denied"


@pytest.mark.asyncio
async def test_token_for_other_company_forbidden(
    client: AsyncClient,
    provisioned_company: dict,
    auth_headers_for,
) -> None:
    """Test a token whose company does not match the admin is refused."""
    headers = auth_headers_for(
        provisioned_company["admin"]["id"], provisioned_company["company"]["id"] + 1000
    )
    response = await client.get("/api/v1/code-batches", headers=headers)
    assert response.status_code == 403
