"""Tests for health and instrumentation endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """Test basic health check."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_ping(client: AsyncClient) -> None:
    """Test ping."""
    response = await client.get("/api/v1/ping")
    assert response.json() == {"message": "pong"}


@pytest.mark.asyncio
async def test_unknown_route_uses_error_body(client: AsyncClient) -> None:
    """Test framework errors share the application error shape."""
    response = await client.get("/api/v1/does-not-exist")
    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "HTTPException"
    assert data["path"].endswith("/api/v1/does-not-exist")


@pytest.mark.asyncio
async def test_prometheus_metrics_exposed(client: AsyncClient) -> None:
    """Test Prometheus metrics are served at the root path."""
    await client.get("/api/v1/ping")
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "http_request" in response.text


@pytest.mark.asyncio
async def test_request_id_echoed(client: AsyncClient) -> None:
    """Test the caller's request id is returned, or one is generated."""
    response = await client.get("/api/v1/ping", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"

    response = await client.get("/api/v1/ping")
    assert response.headers["X-Request-ID"]
