# tests/test_api.py

"""Tests for the root, health and request logging behaviour of the API."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_read_root(async_client: AsyncClient):
    response = await async_client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the chesselo API"}


@pytest.mark.asyncio
async def test_health_check(async_client: AsyncClient):
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_request_id_is_generated(async_client: AsyncClient):
    response = await async_client.get("/health")

    assert len(response.headers["X-Request-ID"]) == 8


@pytest.mark.asyncio
async def test_request_id_is_echoed(async_client: AsyncClient):
    response = await async_client.get("/health", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Request-ID"] == "abc123"
