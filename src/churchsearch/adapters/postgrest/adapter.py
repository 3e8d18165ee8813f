"""PostgREST adapter — Church data backend served by PostgREST / Supabase.

Remote procedures are invoked with ``POST /rest/v1/rpc/<name>`` and a JSON
object of named arguments; single records are read from a view with a
PostgREST filter. Communication uses ``httpx``.

Usage::

    adapter = PostgrestAdapter(
        base_url="https://xyz.supabase.co",
        api_key="your-anon-key",
        db_schema="api",
    )
    await adapter.initialize()
    rows = await adapter.call(BackendOperation.IN_BBOX, {"p_min_lng": -123.0, ...})
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

import httpx

from churchsearch.adapters.base.adapter import AdapterHealth, BackendOperation, ChurchBackend
from churchsearch.adapters.base.exceptions import (
    ConfigurationError,
    ConnectionError,
    MalformedResponseError,
    QueryError,
    RecordNotFoundError,
)

logger = logging.getLogger(__name__)

_ERROR_SNIPPET_CHARS = 500


class PostgrestAdapter(ChurchBackend):
    """Church backend for PostgREST (including Supabase).

    Args:
        base_url: Project URL, e.g. ``"https://xyz.supabase.co"``.
        api_key: Key sent as both ``apikey`` header and bearer token.
        db_schema: Exposed schema; sent as ``Content-Profile`` / ``Accept-Profile``.
        record_table: View that serves full single-church records.
        timeout: HTTP request timeout in seconds.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:54321",
        api_key: str | None = None,
        db_schema: str | None = None,
        record_table: str = "v1_churches",
        timeout: float = 15.0,
        **httpx_kwargs: Any,
    ) -> None:
        if not base_url:
            raise ConfigurationError("PostgREST base_url must not be empty.")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._db_schema = db_schema
        self._record_table = record_table
        self._timeout = timeout
        self._httpx_kwargs = httpx_kwargs
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "postgrest"

    async def initialize(self) -> None:
        """Create the pooled ``httpx.AsyncClient``."""
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"
        if self._db_schema:
            headers["Content-Profile"] = self._db_schema
            headers["Accept-Profile"] = self._db_schema

        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/rest/v1",
            timeout=httpx.Timeout(self._timeout),
            headers=headers,
            **self._httpx_kwargs,
        )
        logger.info("PostgREST adapter ready at %s (schema: %s)", self._base_url, self._db_schema or "default")

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Remote procedures ────────────────────────────────────────────────

    async def call(self, operation: BackendOperation, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Invoke ``/rpc/<operation>`` and return its rows."""
        client = self._require_client()
        path = f"/rpc/{operation.value}"

        try:
            resp = await client.post(path, json=params)
        except httpx.TransportError as e:
            raise ConnectionError(f"Network error calling {path}: {e}") from e

        if resp.is_error:
            raise QueryError(f"HTTP {resp.status_code} from {path}: {resp.text[:_ERROR_SNIPPET_CHARS]}")

        return _rows_from(resp, path)

    # ── Single record ────────────────────────────────────────────────────

    async def fetch_church(self, church_id: str) -> dict[str, Any]:
        """Read one row from the record view, filtered on ``church_id``."""
        client = self._require_client()
        path = f"/{self._record_table}"

        try:
            resp = await client.get(
                path,
                params={"church_id": f"eq.{church_id}", "select": "*", "limit": "1"},
            )
        except httpx.TransportError as e:
            raise ConnectionError(f"Network error fetching {path}: {e}") from e

        if resp.is_error:
            raise QueryError(f"HTTP {resp.status_code} from {path}: {resp.text[:_ERROR_SNIPPET_CHARS]}")

        rows = _rows_from(resp, path)
        if not rows:
            raise RecordNotFoundError(f"Church '{church_id}' not found.")
        return rows[0]

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        """Probe the PostgREST root endpoint."""
        if not self._client:
            return AdapterHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            resp = await self._client.get("/")
            latency_ms = int((time.monotonic() - start) * 1000)
        except httpx.HTTPError as e:
            return AdapterHealth(status="unhealthy", message=str(e))

        return AdapterHealth(
            status="healthy" if resp.status_code == 200 else "degraded",
            latency_ms=latency_ms,
            last_check=datetime.now(UTC).isoformat(),
            message=f"PostgREST returned HTTP {resp.status_code}",
        )

    # ── Helpers ──────────────────────────────────────────────────────────

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise ConnectionError("PostgREST client not initialized.")
        return self._client


def _rows_from(resp: httpx.Response, path: str) -> list[dict[str, Any]]:
    """Decode a PostgREST body into a list of row objects."""
    try:
        data = resp.json()
    except ValueError as e:
        raise MalformedResponseError(f"Non-JSON body from {path}") from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise MalformedResponseError(f"Expected a JSON array from {path}, got {type(data).__name__}")
    if not all(isinstance(row, dict) for row in data):
        raise MalformedResponseError(f"Expected JSON objects in the array from {path}")
    return data
