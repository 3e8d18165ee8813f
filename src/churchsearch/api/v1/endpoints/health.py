"""Health check endpoints — Service and backend health monitoring."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from churchsearch import __version__
from churchsearch.adapters.base.adapter import AdapterHealth
from churchsearch.api.deps import get_engine
from churchsearch.core.engine import ChurchSearchEngine

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Response models ──────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    """Service health check response."""

    status: str = Field(description="Health status (e.g. 'healthy')")
    version: str = Field(description="churchsearch server version")
    service: str = Field(description="Service name ('churchsearch')")
    backend: str = Field(description="Name of the data backend adapter")


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service Health Check",
    description="Returns service health, server version, and the configured backend adapter.",
)
async def health_check(
    engine: ChurchSearchEngine = Depends(get_engine),
) -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        service="churchsearch",
        backend=engine.backend.name,
    )


@router.get(
    "/health/backend",
    response_model=AdapterHealth,
    summary="Backend Health Check",
    description="Probe the data backend and report status, latency, and a diagnostic message.",
)
async def backend_health(
    engine: ChurchSearchEngine = Depends(get_engine),
) -> AdapterHealth:
    """Check health of the data backend."""
    return await engine.health_check()
