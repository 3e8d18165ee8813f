"""Response models — the three consumer-facing result shapes plus the error body.

1. **List** — ``ChurchListResponse`` with full church rows.
2. **Pins** — ``PinListResponse`` with minimal map markers.
3. **GeoJSON** — ``FeatureCollection`` of Point features.

An empty result is still a successful response with an empty collection.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from churchsearch.models.church import ChurchPin

# ═══════════════════════════════════════════════════════════════════════════════
# List / pin modes
# ═══════════════════════════════════════════════════════════════════════════════


class ChurchListResponse(BaseModel):
    """Tabular rows for a list view.

    ``distance_m`` is only present on rows from radius and nearby searches.
    """

    items: list[dict[str, Any]] = Field(default_factory=list, description="Church rows in backend order")
    count: int = Field(default=0, description="Number of rows returned")


class PinListResponse(BaseModel):
    """Map pins; every pin has both coordinates."""

    items: list[ChurchPin] = Field(default_factory=list, description="Pins in backend order")
    count: int = Field(default=0, description="Number of pins returned")


# ═══════════════════════════════════════════════════════════════════════════════
# GeoJSON mode (RFC 7946)
# ═══════════════════════════════════════════════════════════════════════════════


class PointGeometry(BaseModel):
    """GeoJSON Point. Coordinates are ``[longitude, latitude]``."""

    type: Literal["Point"] = "Point"
    coordinates: tuple[float, float]


class Feature(BaseModel):
    type: Literal["Feature"] = "Feature"
    id: str
    geometry: PointGeometry
    properties: dict[str, Any] = Field(default_factory=dict)


class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[Feature] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """Error body shared by every endpoint.

    ``kind`` and ``field`` are only set for validation failures.
    """

    error: str = Field(description="Error message")
    kind: str | None = Field(default=None, description="Error kind, e.g. 'validation_error'")
    field: str | None = Field(default=None, description="Offending request field")
