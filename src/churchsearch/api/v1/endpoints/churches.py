"""Church endpoints — search, GeoJSON layer, and single-record lookup.

Search bodies select their variant with ``_variant`` (``text`` when absent,
``radius``, ``bbox``, ``nearby``) and their output shape with ``_output``
(``list`` when absent, ``pins``, ``geojson``). Every other field is a
criterion for the selected variant; unknown fields are ignored. The GeoJSON
endpoint infers a missing ``_variant`` from the geographic keys present.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from churchsearch.api.deps import get_engine
from churchsearch.core.engine import ChurchSearchEngine
from churchsearch.core.exceptions import ValidationError
from churchsearch.models.church import ChurchRecord
from churchsearch.models.query import OutputMode
from churchsearch.models.response import (
    ChurchListResponse,
    ErrorResponse,
    FeatureCollection,
    PinListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/churches")

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Validation error naming the offending field"},
    500: {"model": ErrorResponse, "description": "Backend failure with a generic message"},
}


async def _read_body(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ValidationError("body", "request body is not valid JSON") from e


@router.post(
    "/search",
    summary="Search Churches",
    description=(
        "Search the directory by free text and filters, radius, bounding box, "
        "or proximity.\n\n"
        "| `_variant` | Required fields | Default `limit` |\n"
        "|---|---|---|\n"
        "| `text` (default) | none (`q`, `belief`, `languages`, `country`, `region`, `locality` optional) | 1000 |\n"
        "| `radius` | `center_lng`, `center_lat`, `radius_m` (or `radius_km`) | 200 |\n"
        "| `bbox` | `min_lng`, `min_lat`, `max_lng`, `max_lat` | 500 |\n"
        "| `nearby` | `center_lng`, `center_lat` | 50 |\n\n"
        "Text filters (`q`, `belief`, `languages`, ...) only apply to `text` searches; "
        "`radius`, `bbox` and `nearby` ignore them.\n\n"
        "`_output`: `list` (default) returns `{items, count}` rows, `pins` returns "
        "map markers with coordinates, `geojson` returns a FeatureCollection."
    ),
    responses={
        200: {"description": "Shaped results (empty collection when nothing matches)"},
        **_ERROR_RESPONSES,
    },
)
async def search_churches(
    request: Request,
    engine: ChurchSearchEngine = Depends(get_engine),
) -> JSONResponse:
    """Run a church search and return the requested result shape."""
    body = await _read_body(request)
    result: ChurchListResponse | PinListResponse | FeatureCollection = await engine.search_payload(body)
    return JSONResponse(result.model_dump(mode="json"))


@router.post(
    "/geojson",
    response_model=FeatureCollection,
    summary="Search Churches as GeoJSON",
    description=(
        "Accepts the same bodies as `/churches/search` and always returns a "
        "GeoJSON FeatureCollection of Point features (`[longitude, latitude]`). "
        "Churches without coordinates are omitted.\n\n"
        "Without `_variant`, any `min_lng`/`min_lat`/`max_lng`/`max_lat` key selects "
        "`bbox`, a center plus `radius_m` or `radius_km` selects `radius`, and "
        "anything else is a text search."
    ),
    responses=_ERROR_RESPONSES,
)
async def search_churches_geojson(
    request: Request,
    engine: ChurchSearchEngine = Depends(get_engine),
) -> FeatureCollection:
    body = await _read_body(request)
    return await engine.search_payload(body, output=OutputMode.GEOJSON, infer_variant=True)  # type: ignore[return-value]


@router.get(
    "/{church_id}",
    response_model=ChurchRecord,
    response_model_exclude={"distance_m"},
    summary="Get Church",
    description="Return one church by its UUID.",
    responses={
        404: {"model": ErrorResponse, "description": "No church with this identifier"},
        **_ERROR_RESPONSES,
    },
)
async def get_church(
    church_id: str,
    engine: ChurchSearchEngine = Depends(get_engine),
) -> ChurchRecord:
    return await engine.get_church(church_id)
