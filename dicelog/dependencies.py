"""FastAPI dependencies for dicelog."""

from __future__ import annotations

from starlette.requests import Request

from dicelog.roller import DiceRoller


def get_roller(request: Request) -> DiceRoller:
    """Return the process-wide roller created in the app lifespan."""
    return request.app.state.roller
