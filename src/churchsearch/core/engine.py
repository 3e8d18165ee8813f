"""Search Engine — Orchestrates one search request from payload to shaped result.

The engine manages the request lifecycle:
  1. Normalization: Validate the payload into a ``SearchQuery``
  2. Dispatch: Issue the single backend call for the query's variant
  3. Shaping: Build list rows, map pins, or a GeoJSON FeatureCollection

Each request is independent. The only state the engine holds is the
backend adapter and its connection pool.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import TYPE_CHECKING, Any

from churchsearch.adapters.base.adapter import AdapterHealth, ChurchBackend
from churchsearch.adapters.base.exceptions import AdapterError, RecordNotFoundError
from churchsearch.adapters.postgrest.adapter import PostgrestAdapter
from churchsearch.core.dispatcher import VariantDispatcher
from churchsearch.core.exceptions import BackendError, NotFoundError, ValidationError
from churchsearch.core.normalizer import normalize_request
from churchsearch.core.shaper import ShapedResult, shape, to_record, to_records
from churchsearch.models.church import ChurchRecord
from churchsearch.models.query import OutputMode, SearchQuery

if TYPE_CHECKING:
    from churchsearch.config.settings import Settings

logger = logging.getLogger(__name__)


class ChurchSearchEngine:
    """Core orchestrator for church search.

    Pipeline:
      payload → [Normalizer] → SearchQuery
              → [Dispatcher] → backend rows
              → [Shaper]     → list | pins | FeatureCollection

    Attributes:
        settings: Application configuration.
        backend: The data backend adapter.
        dispatcher: Variant-to-operation router.
    """

    def __init__(self, settings: Settings, backend: ChurchBackend | None = None) -> None:
        self.settings = settings
        self.backend = backend if backend is not None else _backend_from_settings(settings)
        self.dispatcher = VariantDispatcher(self.backend)

    async def initialize(self) -> None:
        """Initialize the backend adapter."""
        await self.backend.initialize()
        logger.info("Church search engine initialized (backend: %s)", self.backend.name)

    async def shutdown(self) -> None:
        """Release backend connections."""
        await self.backend.shutdown()
        logger.info("Church search engine shut down")

    # ──────────────────────────────────────────────────────────────────────
    # Search
    # ──────────────────────────────────────────────────────────────────────

    async def search_payload(
        self,
        body: Any,
        output: OutputMode | None = None,
        infer_variant: bool = False,
    ) -> ShapedResult:
        """Normalize a raw request body and run the search.

        Args:
            body: Decoded JSON body carrying ``_variant`` / ``_output`` and criteria.
            output: Forced output mode (the GeoJSON endpoint always passes one).
            infer_variant: Infer a missing ``_variant`` from the body's keys.

        Raises:
            ValidationError: If the body is invalid. No backend call is made.
            BackendError: If the backend call fails.
        """
        query = normalize_request(body, output, infer_variant=infer_variant)
        return await self.search(query)

    async def search(self, query: SearchQuery) -> ShapedResult:
        """Run a validated query and shape the backend rows."""
        start_time = time.monotonic()

        rows = await self.dispatcher.dispatch(query)
        records = to_records(rows, query)
        result = shape(records, query)

        logger.info(
            "Search variant=%s output=%s rows=%d in %d ms",
            query.variant.value,
            query.output.value,
            len(records),
            int((time.monotonic() - start_time) * 1000),
        )
        return result

    # ──────────────────────────────────────────────────────────────────────
    # Single record
    # ──────────────────────────────────────────────────────────────────────

    async def get_church(self, church_id: str) -> ChurchRecord:
        """Fetch one church by its UUID.

        Raises:
            ValidationError: If ``church_id`` is not a UUID.
            NotFoundError: If no church has this identifier.
            BackendError: If the backend call fails.
        """
        try:
            normalized_id = str(uuid.UUID(church_id.strip()))
        except ValueError as e:
            raise ValidationError("church_id", "must be a UUID") from e

        try:
            row = await self.backend.fetch_church(normalized_id)
        except RecordNotFoundError as e:
            raise NotFoundError(normalized_id) from e
        except AdapterError as e:
            raise BackendError(f"fetch_church failed: {e}", public_message="Failed to fetch church.") from e

        try:
            return to_record(row)
        except BackendError as e:
            raise BackendError(str(e), public_message="Failed to fetch church.") from e

    async def health_check(self) -> AdapterHealth:
        return await self.backend.health_check()


def _backend_from_settings(settings: Settings) -> ChurchBackend:
    cfg = settings.backend
    return PostgrestAdapter(
        base_url=cfg.base_url,
        api_key=cfg.api_key,
        db_schema=cfg.db_schema,
        record_table=cfg.record_table,
        timeout=cfg.timeout,
    )
