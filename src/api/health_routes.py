"""Health endpoint.

Endpoints:
  GET  /health   run every configured check once; 200 when all pass, else 500
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from src.config import settings
from src.health.clients import IntegrationNotConfiguredError
from src.health.runner import run_checks

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
def health(request: Request) -> JSONResponse:
    """Evaluate process health with a fresh registry."""
    state = request.app.state
    integrations = state.integrations
    custom_checks = getattr(state, "custom_checks", None)
    cfg = getattr(state, "settings", None) or settings

    try:
        registry = run_checks(integrations, cfg, custom_checks)
    except IntegrationNotConfiguredError as e:
        logger.error("Health check misconfigured: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    healthy = registry.ok()
    body: dict[str, Any] = {
        "status": "ok" if healthy else "failing",
        "results": registry.results(),
    }
    return JSONResponse(status_code=200 if healthy else 500, content=body)
