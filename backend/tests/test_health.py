"""Test health check and version endpoints."""

import pytest
from httpx import AsyncClient

from filedeck import __version__


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["service"] == "filedeck"
    assert data["version"] == __version__


@pytest.mark.asyncio
async def test_ping(client: AsyncClient):
    resp = await client.get("/api/ping")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_version(client: AsyncClient, files_root, cache_root):
    resp = await client.get("/api/version")
    assert resp.status_code == 200
    data = resp.json()
    assert data["language"] == "python"
    assert data["storage"] == "Local"
    assert data["dirFiles"] == str(files_root.resolve())
    assert data["dirCache"] == str(cache_root.resolve())
