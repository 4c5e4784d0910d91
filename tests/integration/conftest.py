"""Shared fixtures for integration tests against a live engine."""

import os

import pytest
import pytest_asyncio

from anxcloud.api import API, Context, HTTPClient

# Skip all integration tests unless RUN_ANXCLOUD_INTEGRATION_TESTS=1
pytestmark = pytest.mark.skipif(
    os.environ.get("RUN_ANXCLOUD_INTEGRATION_TESTS") != "1",
    reason="Requires engine access. Set RUN_ANXCLOUD_INTEGRATION_TESTS=1 and ANEXIA_TOKEN to run",
)


@pytest_asyncio.fixture
async def api():
    """API talking to the engine configured via ANEXIA_TOKEN and ANEXIA_BASE_URL."""
    async with HTTPClient.from_env() as client:
        yield API(client)


@pytest.fixture
def ctx():
    return Context.background()
