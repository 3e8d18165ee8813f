"""Result Shaper — Turns backend rows into list rows, map pins, or GeoJSON.

Backend rows are not uniform: coordinates may arrive as ``longitude`` /
``latitude`` columns or as a GeoJSON ``geojson`` point, numbers may arrive as
strings, and radius rows report distance as ``distance_m``, ``distance_km``
or a bare ``distance`` in kilometers. ``to_records`` resolves all of that
into ``ChurchRecord`` objects; the ``to_*`` functions then project records
for each consumer. Backend order is always preserved.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

import pydantic

from churchsearch.core.exceptions import BackendError
from churchsearch.core.geo import GeoPoint, haversine_m, valid_lat, valid_lng
from churchsearch.models.church import BeliefType, ChurchPin, ChurchRecord
from churchsearch.models.query import NearbyCriteria, OutputMode, RadiusCriteria, SearchQuery
from churchsearch.models.response import (
    ChurchListResponse,
    Feature,
    FeatureCollection,
    PinListResponse,
    PointGeometry,
)

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("address", "locality", "region", "postal_code", "country", "website", "church_summary")
_PIN_FIELDS = set(ChurchPin.model_fields)
_GEOMETRY_FIELDS = {"latitude", "longitude"}

ShapedResult = ChurchListResponse | PinListResponse | FeatureCollection


# ═══════════════════════════════════════════════════════════════════════════════
# Rows → records
# ═══════════════════════════════════════════════════════════════════════════════


def to_records(rows: Iterable[Mapping[str, Any]], query: SearchQuery | None = None) -> list[ChurchRecord]:
    """Build ChurchRecords from raw backend rows.

    Distances are only resolved when the query has a center point.

    Raises:
        BackendError: If a row lacks an identifier or name, or has fields of the wrong type.
    """
    center: GeoPoint | None = None
    if query is not None and isinstance(query.criteria, RadiusCriteria | NearbyCriteria):
        center = GeoPoint(lng=query.criteria.center_lng, lat=query.criteria.center_lat)

    return [to_record(row, center) for row in rows]


def to_record(row: Mapping[str, Any], center: GeoPoint | None = None) -> ChurchRecord:
    """Build one ChurchRecord; ``center`` enables ``distance_m``."""
    lng, lat = _coordinates(row)
    data: dict[str, Any] = {
        "church_id": _identifier(row.get("church_id", row.get("id"))),
        "name": row.get("name"),
        "longitude": lng,
        "latitude": lat,
        "belief_type": _belief(row.get("belief_type")),
        "trinitarian_beliefs": row.get("trinitarian_beliefs"),
        "service_languages": _languages(row.get("service_languages")),
    }
    for field in _TEXT_FIELDS:
        data[field] = _text(row.get(field))
    if center is not None:
        data["distance_m"] = _distance_m(row, center, lng, lat)

    try:
        return ChurchRecord.model_validate(data)
    except pydantic.ValidationError as e:
        raise BackendError(f"Malformed church row: {e.errors()[0]['loc']}: {e.errors()[0]['msg']}") from e


# ═══════════════════════════════════════════════════════════════════════════════
# Records → consumer shapes
# ═══════════════════════════════════════════════════════════════════════════════


def shape(records: list[ChurchRecord], query: SearchQuery) -> ShapedResult:
    """Project records into the shape requested by ``query.output``."""
    if query.output is OutputMode.PINS:
        return to_pins(records)
    if query.output is OutputMode.GEOJSON:
        return to_feature_collection(records, include_distance=query.has_distance)
    return to_list(records, include_distance=query.has_distance)


def to_list(records: list[ChurchRecord], include_distance: bool = False) -> ChurchListResponse:
    """Full rows, including churches without coordinates."""
    exclude = None if include_distance else {"distance_m"}
    items = [r.model_dump(mode="json", exclude=exclude) for r in records]
    return ChurchListResponse(items=items, count=len(items))


def to_pins(records: list[ChurchRecord]) -> PinListResponse:
    """Minimal markers; churches missing either coordinate are dropped."""
    pins = [ChurchPin.model_validate(r.model_dump(include=_PIN_FIELDS)) for r in records if r.has_coordinates]
    return PinListResponse(items=pins, count=len(pins))


def to_feature_collection(records: list[ChurchRecord], include_distance: bool = False) -> FeatureCollection:
    """GeoJSON Point features with ``[longitude, latitude]`` coordinates.

    Churches without coordinates are left out rather than given null geometry.
    """
    exclude = _GEOMETRY_FIELDS if include_distance else _GEOMETRY_FIELDS | {"distance_m"}
    features = [
        Feature(
            id=r.church_id,
            geometry=PointGeometry(coordinates=(r.longitude, r.latitude)),  # type: ignore[arg-type]
            properties=r.model_dump(mode="json", exclude=exclude),
        )
        for r in records
        if r.has_coordinates
    ]
    return FeatureCollection(features=features)


# ── Field coercion ───────────────────────────────────────────────────────────


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _geojson_point(value: Any) -> tuple[float | None, float | None] | None:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return None
    if not isinstance(value, Mapping) or value.get("type") != "Point":
        return None
    coords = value.get("coordinates")
    if not isinstance(coords, list | tuple) or len(coords) < 2:
        return None
    return _as_float(coords[0]), _as_float(coords[1])


def _coordinates(row: Mapping[str, Any]) -> tuple[float | None, float | None]:
    """Return ``(lng, lat)``, preferring columns over the ``geojson`` point."""
    lng = _as_float(row.get("longitude"))
    lat = _as_float(row.get("latitude"))
    if lng is None or lat is None:
        point = _geojson_point(row.get("geojson"))
        if point is not None:
            lng, lat = point

    if lng is not None and not valid_lng(lng):
        logger.warning("Dropping out-of-range longitude %s for church %s", lng, row.get("church_id"))
        lng = None
    if lat is not None and not valid_lat(lat):
        logger.warning("Dropping out-of-range latitude %s for church %s", lat, row.get("church_id"))
        lat = None
    return lng, lat


def _identifier(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _text(value: Any) -> Any:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return value


def _belief(value: Any) -> BeliefType | None:
    if value is None:
        return None
    try:
        return BeliefType(str(value).strip().lower())
    except ValueError:
        logger.warning("Unrecognised belief_type %r, treating as unknown", value)
        return BeliefType.UNKNOWN


def _languages(value: Any) -> Any:
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list | tuple):
        return value
    out: list[str] = []
    for item in value:
        if isinstance(item, str) and item.strip() and item.strip() not in out:
            out.append(item.strip())
    return tuple(out)


def _distance_m(row: Mapping[str, Any], center: GeoPoint, lng: float | None, lat: float | None) -> float | None:
    meters = _as_float(row.get("distance_m"))
    if meters is not None:
        return meters
    km = _as_float(row.get("distance_km"))
    if km is None:
        km = _as_float(row.get("distance"))
    if km is not None:
        return km * 1000
    if lng is not None and lat is not None:
        return haversine_m(center, GeoPoint(lng=lng, lat=lat))
    return None
