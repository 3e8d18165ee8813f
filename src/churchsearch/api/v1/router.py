"""API v1 Router — Church search and health endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from churchsearch.api.v1.endpoints.churches import router as churches_router
from churchsearch.api.v1.endpoints.health import router as health_router

router = APIRouter(tags=["v1"])
router.include_router(churches_router)
router.include_router(health_router)
