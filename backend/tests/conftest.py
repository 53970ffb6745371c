"""
Garden Map Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── markers_path: Fresh markers.json location under tmp_path
    ├── store / marker_service: Real store + service on that file
    ├── app: FastAPI app bound to that file
    ├── test_client: HTTPX AsyncClient talking to the app in-process
    ├── api_client: MarkerApiClient over the same transport
    └── sample_marker: A valid create body
"""

import os
import tempfile

# Override settings BEFORE any gardenmap import builds the Settings singleton
os.environ["MARKERS_FILE"] = os.path.join(
    tempfile.mkdtemp(prefix="gardenmap_test_"), "markers.json"
)
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.setdefault("CORS_ORIGINS", "*")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from gardenmap.client.api_client import MarkerApiClient
from gardenmap.main import create_app
from gardenmap.services.marker_service import MarkerService
from gardenmap.services.marker_store import MarkerStore


@pytest.fixture
def markers_path(tmp_path):
    """Path of a markers file that does not exist yet."""
    return str(tmp_path / "markers.json")


@pytest.fixture
def store(markers_path):
    return MarkerStore(markers_path)


@pytest.fixture
def marker_service(store):
    return MarkerService(store, serialize_writes=True)


@pytest.fixture
def app(markers_path):
    return create_app(markers_path)


@pytest.fixture
def sample_marker():
    return {"latlng": {"lat": 1, "lng": 2}, "data": {"name": "Rose"}}


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app via ASGITransport.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/markers")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def api_client(app):
    """MarkerApiClient whose requests never leave the process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test/api") as client:
        yield MarkerApiClient(client=client)
