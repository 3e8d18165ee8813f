"""churchsearch Python SDK — Async and sync clients for the church search REST API.

Usage::

    # Async
    async with AsyncChurchSearchClient("http://localhost:8080") as client:
        resp = await client.search_radius(-122.4, 37.8, radius_m=5000)

    # Sync (wraps async client internally)
    client = ChurchSearchClient("http://localhost:8080")
    layer = client.geojson(variant="bbox", min_lng=-123, min_lat=37, max_lng=-122, max_lat=38)

Error responses raise ``httpx.HTTPStatusError``; the server's JSON error body
is available on ``exc.response.json()``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar, cast

import httpx

_T = TypeVar("_T")

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Response types (plain dicts, not server models)
# ═══════════════════════════════════════════════════════════════════════════════

SearchResult = dict[str, Any]
"""List or pin response dict with ``items`` and ``count``."""

GeoJSONResult = dict[str, Any]
"""GeoJSON FeatureCollection dict."""

ChurchResult = dict[str, Any]
"""Single church record dict."""


def _body(variant: str | None, output: str | None, criteria: dict[str, Any]) -> dict[str, Any]:
    payload = {k: v for k, v in criteria.items() if v is not None}
    if variant:
        payload["_variant"] = variant
    if output:
        payload["_output"] = output
    return payload


# ═══════════════════════════════════════════════════════════════════════════════
# Async client
# ═══════════════════════════════════════════════════════════════════════════════


class AsyncChurchSearchClient:
    """Async Python client for the churchsearch API.

    Args:
        base_url: Server URL, e.g. ``"http://localhost:8080"``.
        timeout: Request timeout in seconds.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        timeout: float = 30.0,
        **httpx_kwargs: Any,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            **httpx_kwargs,
        )

    async def __aenter__(self) -> AsyncChurchSearchClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        resp = await self._client.post(path, json=payload)
        resp.raise_for_status()
        return cast(dict[str, Any], resp.json())

    # ── Health ──

    async def health(self) -> dict[str, Any]:
        """Check server health."""
        resp = await self._client.get("/v1/health")
        resp.raise_for_status()
        return cast(dict[str, Any], resp.json())

    # ── Search ──

    async def search(
        self,
        q: str | None = None,
        *,
        output: str = "list",
        **filters: Any,
    ) -> SearchResult:
        """Free-text search with optional filters.

        Args:
            q: Search term. ``None`` lists churches matching the filters only.
            output: ``"list"`` or ``"pins"``.
            **filters: ``belief``, ``languages``, ``country``, ``region``,
                ``locality``, ``postal_code``, ``trinitarian``, ``programs``, ``limit``.
        """
        return await self._post("/v1/churches/search", _body(None, output, {"q": q, **filters}))

    async def search_radius(
        self,
        lng: float,
        lat: float,
        *,
        radius_m: float,
        limit: int | None = None,
        output: str = "list",
    ) -> SearchResult:
        """Churches within ``radius_m`` meters of ``(lng, lat)``; rows carry ``distance_m``."""
        criteria = {"center_lng": lng, "center_lat": lat, "radius_m": radius_m, "limit": limit}
        return await self._post("/v1/churches/search", _body("radius", output, criteria))

    async def search_bbox(
        self,
        min_lng: float,
        min_lat: float,
        max_lng: float,
        max_lat: float,
        *,
        limit: int | None = None,
        output: str = "list",
    ) -> SearchResult:
        """Churches inside a bounding box."""
        criteria = {"min_lng": min_lng, "min_lat": min_lat, "max_lng": max_lng, "max_lat": max_lat, "limit": limit}
        return await self._post("/v1/churches/search", _body("bbox", output, criteria))

    async def nearby(self, lng: float, lat: float, *, limit: int | None = None) -> SearchResult:
        """The closest churches to ``(lng, lat)``, nearest first."""
        criteria = {"center_lng": lng, "center_lat": lat, "limit": limit}
        return await self._post("/v1/churches/search", _body("nearby", None, criteria))

    async def geojson(self, *, variant: str | None = None, **criteria: Any) -> GeoJSONResult:
        """Any variant's results as a GeoJSON FeatureCollection."""
        return await self._post("/v1/churches/geojson", _body(variant, None, criteria))

    # ── Single record ──

    async def get_church(self, church_id: str) -> ChurchResult:
        """Fetch one church by UUID."""
        resp = await self._client.get(f"/v1/churches/{church_id}")
        resp.raise_for_status()
        return cast(dict[str, Any], resp.json())


# ═══════════════════════════════════════════════════════════════════════════════
# Sync client (wraps AsyncChurchSearchClient)
# ═══════════════════════════════════════════════════════════════════════════════


class ChurchSearchClient:
    """Synchronous Python client for the churchsearch API.

    Wraps :class:`AsyncChurchSearchClient` using ``asyncio.run``.

    Args:
        base_url: Server URL.
        timeout: Request timeout in seconds.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        timeout: float = 30.0,
        **httpx_kwargs: Any,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._httpx_kwargs = httpx_kwargs

    def _run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        """Run an async coroutine synchronously."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop and loop.is_running():
            # Already inside an event loop (e.g. Jupyter): run in a worker thread
            import concurrent.futures

            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
                return pool.submit(asyncio.run, coro).result()

        return asyncio.run(coro)

    def _make_client(self) -> AsyncChurchSearchClient:
        return AsyncChurchSearchClient(
            self._base_url,
            timeout=self._timeout,
            **self._httpx_kwargs,
        )

    def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        """Open a client, invoke one async method on it, and close it."""

        async def _go() -> Any:
            async with self._make_client() as c:
                return await getattr(c, method)(*args, **kwargs)

        return self._run(_go())

    def health(self) -> dict[str, Any]:
        """Check server health."""
        return cast(dict[str, Any], self._call("health"))

    def search(self, q: str | None = None, *, output: str = "list", **filters: Any) -> SearchResult:
        """Free-text search with optional filters."""
        return cast(SearchResult, self._call("search", q, output=output, **filters))

    def search_radius(
        self,
        lng: float,
        lat: float,
        *,
        radius_m: float,
        limit: int | None = None,
        output: str = "list",
    ) -> SearchResult:
        """Churches within ``radius_m`` meters of ``(lng, lat)``."""
        return cast(SearchResult, self._call("search_radius", lng, lat, radius_m=radius_m, limit=limit, output=output))

    def search_bbox(
        self,
        min_lng: float,
        min_lat: float,
        max_lng: float,
        max_lat: float,
        *,
        limit: int | None = None,
        output: str = "list",
    ) -> SearchResult:
        """Churches inside a bounding box."""
        return cast(
            SearchResult,
            self._call("search_bbox", min_lng, min_lat, max_lng, max_lat, limit=limit, output=output),
        )

    def nearby(self, lng: float, lat: float, *, limit: int | None = None) -> SearchResult:
        """The closest churches to ``(lng, lat)``."""
        return cast(SearchResult, self._call("nearby", lng, lat, limit=limit))

    def geojson(self, *, variant: str | None = None, **criteria: Any) -> GeoJSONResult:
        """Any variant's results as a GeoJSON FeatureCollection."""
        return cast(GeoJSONResult, self._call("geojson", variant=variant, **criteria))

    def get_church(self, church_id: str) -> ChurchResult:
        """Fetch one church by UUID."""
        return cast(ChurchResult, self._call("get_church", church_id))
