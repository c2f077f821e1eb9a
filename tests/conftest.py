"""Shared test fixtures for the dicelog test suite.

roller
    A fresh DiceRoller per test.

client
    An AsyncClient wired to the FastAPI app, with get_roller overridden so
    every request in the test shares the roller fixture. httpx's ASGITransport
    doesn't run the app lifespan, so the override is what provides the roller.

Pure unit tests (utils, patterns, notation, dice) need no fixture.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dicelog.dependencies import get_roller
from dicelog.main import app
from dicelog.roller import DiceRoller


@pytest.fixture
def roller() -> DiceRoller:
    return DiceRoller()


@pytest_asyncio.fixture
async def client(roller):
    app.dependency_overrides[get_roller] = lambda: roller

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.pop(get_roller, None)
