"""Request context middleware.

Binds a request id into ``structlog.contextvars`` for the duration of each
request so every log line the request produces carries it, and echoes the
id back in the ``X-Request-ID`` response header. A caller-supplied
``X-Request-ID`` is reused.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_MAX_REQUEST_ID_CHARS = 64


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = _request_id(request.headers.get(REQUEST_ID_HEADER))
        start = time.monotonic()

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            response = await call_next(request)
            logger.info(
                "%s %s -> %d in %d ms",
                request.method,
                request.url.path,
                response.status_code,
                int((time.monotonic() - start) * 1000),
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _request_id(supplied: str | None) -> str:
    if supplied and supplied.strip():
        return supplied.strip()[:_MAX_REQUEST_ID_CHARS]
    return f"req_{uuid.uuid4().hex[:12]}"
