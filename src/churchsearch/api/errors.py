"""Exception handlers — Translate search-core errors into JSON error bodies.

Validation failures name the offending field. Backend failures are logged
with their cause and answered with a generic message so backend details
never reach the caller. Any other exception becomes a generic 500 with the
same ``{"error": ...}`` body.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from churchsearch.core.exceptions import BackendError, NotFoundError, ValidationError
from churchsearch.models.response import ErrorResponse

logger = logging.getLogger(__name__)


def _error(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return _error(400, ErrorResponse(error=exc.message, kind=exc.kind, field=exc.field))


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, ErrorResponse(error="Not found"))


async def _backend_error(request: Request, exc: BackendError) -> JSONResponse:
    logger.error("%s %s backend failure: %s", request.method, request.url.path, exc, exc_info=exc)
    return _error(500, ErrorResponse(error=exc.public_message))


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s unhandled error: %s", request.method, request.url.path, exc, exc_info=exc)
    return _error(500, ErrorResponse(error="Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the search-core exception handlers to ``app``."""
    app.add_exception_handler(ValidationError, _validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(NotFoundError, _not_found)  # type: ignore[arg-type]
    app.add_exception_handler(BackendError, _backend_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unexpected_error)
