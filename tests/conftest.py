"""Shared test fixtures."""

import os

# Settings() requires JWT_SECRET at import time
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")
os.environ.setdefault("AUTOSTART_SIMULATION", "false")

import random  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from config.settings import settings  # noqa: E402
from src.main import app  # noqa: E402
from src.ps_market.infrastructure.roster import load_roster  # noqa: E402
from src.ps_runtime.application.runtime import MarketRuntime  # noqa: E402


@pytest.fixture
def runtime() -> MarketRuntime:
    """A stopped runtime over the full roster, everyone playing, seeded rng."""
    rng = random.Random(7)
    return MarketRuntime(settings, players=load_roster(rng, all_playing=True), rng=rng)


@pytest.fixture
async def client(runtime: MarketRuntime) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints.

    ASGITransport does not run the lifespan, so the runtime is attached directly.
    """
    app.state.runtime = runtime
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
