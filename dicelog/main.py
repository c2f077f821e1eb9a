from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dicelog.roller import DiceRoller
from dicelog.routers import rolls


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app.state.roller = DiceRoller()
    yield


app = FastAPI(title="dicelog", lifespan=lifespan)

app.include_router(rolls.router)
