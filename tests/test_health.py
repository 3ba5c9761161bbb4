"""Tests for health check endpoints."""

import pytest
from httpx import AsyncClient

from cradle_access import __version__


@pytest.mark.asyncio
async def test_liveness_endpoint(client: AsyncClient):
    """Test that liveness endpoint returns 200."""
    response = await client.get("/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"


@pytest.mark.asyncio
async def test_readiness_with_seeded_catalog(client: AsyncClient, seeded):
    """Test that readiness endpoint returns 200 once the catalog is seeded."""
    response = await client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ready",
        "checks": {"database": "ok", "catalog": "ok"},
    }


@pytest.mark.asyncio
async def test_readiness_with_empty_catalog(client: AsyncClient):
    """An unseeded database is reachable but not ready."""
    response = await client.get("/health/ready")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"] == {"database": "ok", "catalog": "empty"}


@pytest.mark.asyncio
async def test_info_endpoint(client: AsyncClient):
    """Test that info endpoint returns application metadata."""
    response = await client.get("/info")

    assert response.status_code == 200
    data = response.json()
    assert data["version"] == __version__
    assert "environment" in data
