"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from churchsearch import __version__
from churchsearch.api.deps import set_engine
from churchsearch.api.errors import register_exception_handlers
from churchsearch.api.middleware import REQUEST_ID_HEADER, RequestContextMiddleware
from churchsearch.api.v1.router import router as v1_router
from churchsearch.config.settings import Settings
from churchsearch.core.engine import ChurchSearchEngine
from churchsearch.observability.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        # CLI-provided config first, then churchsearch-config.yaml in the working directory
        yaml_path = Path(os.environ.get("CHURCHSEARCH_CONFIG_FILE", "churchsearch-config.yaml"))
        if yaml_path.exists():
            logger.info("Loading configuration from %s", yaml_path)
            settings = Settings.from_yaml(yaml_path)
        else:
            settings = Settings()

    setup_logging(settings.observability)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        logger.info("Starting churchsearch v%s", __version__)

        engine = ChurchSearchEngine(settings)
        await engine.initialize()
        set_engine(engine)

        app.state.settings = settings
        app.state.engine = engine

        logger.info("churchsearch is ready to serve requests on port %d", settings.server.port)
        yield

        logger.info("Shutting down churchsearch...")
        await engine.shutdown()
        set_engine(None)
        logger.info("churchsearch shutdown complete")

    app = FastAPI(
        title="churchsearch",
        description=(
            "Geospatial church directory search: free-text, radius, bounding-box, "
            "and nearby queries shaped as list rows, map pins, or GeoJSON."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestContextMiddleware)

    register_exception_handlers(app)
    app.include_router(v1_router, prefix="/v1")

    return app
