from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from queen_of_hearts.api.audit import router as audit_router
from queen_of_hearts.api.configuration import router as configuration_router
from queen_of_hearts.api.games import router as games_router
from queen_of_hearts.config import get_settings
from queen_of_hearts.storage.database import Base, engine

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title="Queen of Hearts Ledger API", lifespan=lifespan)
app.include_router(games_router)
app.include_router(configuration_router)
app.include_router(audit_router)
