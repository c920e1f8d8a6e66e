"""
CatRouter - Test Configuration (conftest.py)
============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── upload_dir: Temporary upload destination
    ├── app_settings: Settings pointed at upload_dir
    ├── test_app: FastAPI app built from app_settings (lifespan not started)
    ├── test_client: HTTPX AsyncClient with the lifespan running
    ├── mock_host: MagicMock host exposing use()/remove_middleware()
    └── sample_image_bytes: Fake image content for upload tests
"""

import os
import tempfile
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set before any catrouter import builds the module-level settings and app
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="catrouter_test_")
os.environ["LOG_LEVEL"] = "WARNING"

from catrouter.config import Settings  # noqa: E402
from catrouter.main import create_app  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def upload_dir(tmp_path):
    """A fresh upload destination for each test."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def app_settings(upload_dir):
    """Settings for the richer (upload) variant, writing into upload_dir."""
    return Settings(upload_dir=str(upload_dir), log_level="WARNING")


@pytest.fixture
def test_app(app_settings):
    return create_app(app_settings)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    Provides an async HTTP test client with the app lifespan running.

    ASGITransport does not send lifespan events, so the lifespan context is
    entered here; the cat router is mounted for the duration of the test.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/tutorials-router/cats")
            assert response.status_code == 200
    """
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture
def mock_host():
    """A host double that records use()/remove_middleware() calls."""
    host = MagicMock()
    host.use = MagicMock()
    host.remove_middleware = MagicMock()
    return host


@pytest.fixture
def sample_image_bytes():
    """
    Minimal JPEG bytes: Start of Image + JFIF header + End of Image.
    Nothing validates content type; any bytes would do.
    """
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )
