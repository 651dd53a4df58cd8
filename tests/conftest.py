"""
Pytest configuration and shared fixtures.

Provides fake encoders, recording stores, pre-built routers and an API
test client for the semroute test suite.

IMPORTANT: Environment variables must be set BEFORE importing semroute
modules that use pydantic-settings, as Settings validates on import.
"""

import asyncio
import os

# Set test environment variables before importing semroute modules
os.environ["ENCODER_BACKEND"] = "fastembed"
os.environ["STORE_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEBUG"] = "false"
os.environ.pop("ROUTES_FILE", None)

# Now safe to import everything else
import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from fixtures import FakeEncoder, RecordingStore, make_routes


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "asyncio: mark test as async")
    config.addinivalue_line(
        "markers", "integration: mark test as requiring real backends"
    )
    config.addinivalue_line("markers", "slow: mark test as slow-running")


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset all singleton instances between tests.

    This ensures each test starts with a clean state.
    """
    yield

    from semroute.router.engine import reset_router

    reset_router()

    from semroute.metrics import store

    if store._store is not None:
        store._store.reset()

    from semroute.config import get_settings

    get_settings.cache_clear()


@pytest.fixture
def fake_encoder():
    """Lookup-table encoder over the shared test vectors."""
    return FakeEncoder()


@pytest.fixture
def recording_store():
    """In-memory store that records every write."""
    return RecordingStore()


@pytest.fixture
def routes():
    """Three small routes: chitchat, weather and billing."""
    return make_routes()


@pytest.fixture
async def built_router(routes, fake_encoder, recording_store):
    """
    A Router built over the test routes with dot-product scoring.

    Usage:
        match = await built_router.match("good evening")
    """
    from semroute.router import Router, with_dot_product_similarity

    return await Router.build(
        routes, fake_encoder, recording_store, with_dot_product_similarity(1.0)
    )


@pytest.fixture
def test_client(routes, fake_encoder, recording_store):
    """
    Create a FastAPI TestClient backed by a router over the fake encoder.

    Patch at the module where the functions are CALLED from (semroute.main),
    since the import created local bindings there.
    """
    from semroute.router import Router, with_dot_product_similarity

    built_router = asyncio.run(
        Router.build(
            routes, fake_encoder, recording_store, with_dot_product_similarity(1.0)
        )
    )

    with patch("semroute.main.ensure_router_initialized", new_callable=AsyncMock), patch(
        "semroute.main.get_router", new_callable=AsyncMock
    ) as mock_get_router, patch(
        "semroute.main.close_router", new_callable=AsyncMock
    ):
        mock_get_router.return_value = built_router

        from semroute.main import app

        with TestClient(app) as client:
            yield client
