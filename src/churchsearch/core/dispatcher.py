"""Variant Dispatcher — Routes a validated query to exactly one backend operation.

The routing table is closed: every ``SearchVariant`` maps to one
``BackendOperation`` and a function that builds that operation's
parameters. The output mode never changes which operation runs; it is
carried on the ``BackendCall`` so shaping downstream knows what to build.

Backend failures are wrapped in ``BackendError`` and never retried here.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from churchsearch.adapters.base.adapter import BackendOperation, ChurchBackend
from churchsearch.adapters.base.exceptions import AdapterError
from churchsearch.core.exceptions import BackendError
from churchsearch.models.query import (
    BBoxCriteria,
    NearbyCriteria,
    OutputMode,
    RadiusCriteria,
    SearchQuery,
    SearchVariant,
    TextCriteria,
)

logger = logging.getLogger(__name__)


class BackendCall(BaseModel):
    """One planned backend invocation."""

    model_config = ConfigDict(frozen=True)

    operation: BackendOperation
    params: dict[str, Any] = Field(default_factory=dict)
    output: OutputMode = OutputMode.LIST


# ── Parameter builders ───────────────────────────────────────────────────────


def _text_params(c: TextCriteria) -> dict[str, Any]:
    params: dict[str, Any] = {
        "q": c.q,
        "p_country": c.country,
        "p_belief": c.belief.value if c.belief else None,
        "p_trinit": c.trinitarian,
        "p_region": c.region,
        "p_locality": c.locality,
        "p_postal_code": c.postal_code,
        "p_languages": list(c.languages) or None,
        "p_programs": list(c.programs) or None,
        "p_limit": c.limit,
    }
    # Omitted arguments fall back to the SQL function defaults.
    return {k: v for k, v in params.items() if v is not None}


def _radius_params(c: RadiusCriteria) -> dict[str, Any]:
    return {
        "p_lng": c.center_lng,
        "p_lat": c.center_lat,
        "p_radius_m": c.radius_m,
        "p_limit": c.limit,
    }


def _bbox_params(c: BBoxCriteria) -> dict[str, Any]:
    return {
        "p_min_lng": c.min_lng,
        "p_min_lat": c.min_lat,
        "p_max_lng": c.max_lng,
        "p_max_lat": c.max_lat,
        "p_limit": c.limit,
    }


def _nearby_params(c: NearbyCriteria) -> dict[str, Any]:
    return {
        "p_lng": c.center_lng,
        "p_lat": c.center_lat,
        "p_limit": c.limit,
    }


ROUTES: dict[SearchVariant, tuple[BackendOperation, Callable[[Any], dict[str, Any]]]] = {
    SearchVariant.TEXT: (BackendOperation.SEARCH, _text_params),
    SearchVariant.RADIUS: (BackendOperation.WITHIN_RADIUS, _radius_params),
    SearchVariant.BBOX: (BackendOperation.IN_BBOX, _bbox_params),
    SearchVariant.NEARBY: (BackendOperation.NEARBY, _nearby_params),
}


class VariantDispatcher:
    """Selects and issues the backend call for a ``SearchQuery``.

    Attributes:
        backend: The data backend adapter.
    """

    def __init__(self, backend: ChurchBackend, routes: dict[SearchVariant, Any] | None = None) -> None:
        self.backend = backend
        self._routes = routes if routes is not None else ROUTES
        missing = [v.value for v in SearchVariant if v not in self._routes]
        if missing:
            raise ValueError(f"No backend route for variant(s): {', '.join(missing)}")

    def plan(self, query: SearchQuery) -> BackendCall:
        """Build the backend call for a query without issuing it."""
        operation, build_params = self._routes[query.variant]
        return BackendCall(operation=operation, params=build_params(query.criteria), output=query.output)

    async def dispatch(self, query: SearchQuery) -> list[dict[str, Any]]:
        """Issue the single backend call for ``query`` and return its raw rows.

        Raises:
            BackendError: If the backend call fails or returns malformed data.
        """
        call = self.plan(query)
        start = time.monotonic()
        try:
            rows = await self.backend.call(call.operation, call.params)
        except AdapterError as e:
            raise BackendError(f"{call.operation.value} failed: {e}") from e

        if not isinstance(rows, list):
            raise BackendError(f"{call.operation.value} returned {type(rows).__name__}, expected a list")
        if not all(isinstance(row, Mapping) for row in rows):
            raise BackendError(f"{call.operation.value} returned rows that are not JSON objects")

        logger.info(
            "%s returned %d rows in %d ms",
            call.operation.value,
            len(rows),
            int((time.monotonic() - start) * 1000),
        )
        return rows
