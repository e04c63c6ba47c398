"""FastAPI server exposing the health endpoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.health_routes import health_router
from src.config import settings
from src.health.clients import Integrations, SqlAlchemyDatabase
from src.health.runner import CustomChecks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire dependency clients on startup unless they were injected."""
    if getattr(app.state, "integrations", None) is None:
        app.state.integrations = Integrations.from_settings(settings)
    if getattr(app.state, "custom_checks", None) is None:
        app.state.custom_checks = {}

    yield

    # Shutdown
    database = app.state.integrations.database
    if isinstance(database, SqlAlchemyDatabase):
        database.dispose()


def create_app(
    integrations: Integrations | None = None,
    custom_checks: CustomChecks | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Server Health Check",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.integrations = integrations
    app.state.custom_checks = dict(custom_checks or {})

    app.include_router(health_router)

    return app
