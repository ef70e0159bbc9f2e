"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

from fastapi import FastAPI

from imagesearch.api.routes import router
from imagesearch.config import Settings, get_settings
from imagesearch.errors import PersistenceError
from imagesearch.index.models import Index
from imagesearch.index.store import IndexStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def load_index_state(app: FastAPI, settings: Settings) -> Index | None:
    """Load the persisted index into app state; a missing or broken index is logged, not raised."""
    app.state.settings = settings
    store = IndexStore(settings.index_path)
    try:
        index: Index | None = store.load()
    except PersistenceError as exc:
        logger.warning("%s; searches will fail until 'build' has been run", exc)
        index = None
    app.state.index = index
    return index


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: load the index on startup."""
    settings: Settings = getattr(app.state, "settings", None) or get_settings()

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    logger.info("Starting imagesearch (index=%s)", settings.index_path)
    index = load_index_state(app, settings)
    if index is not None:
        logger.info("imagesearch ready with %d terms", len(index))
    yield

    logger.info("imagesearch shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="imagesearch",
        description="Search a local label index of classified images",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.state.index = None

    application.include_router(router)
    return application
