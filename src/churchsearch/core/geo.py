"""Geospatial helpers.

Distances here only fill gaps left by the backend, so a spherical-earth
haversine is accurate enough.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt

EARTH_RADIUS_M = 6_371_000


@dataclass(frozen=True)
class GeoPoint:
    """A WGS84 longitude/latitude pair in decimal degrees."""

    lng: float
    lat: float


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in meters between two points."""
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlat = lat2 - lat1
    dlng = radians(b.lng - a.lng)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * asin(min(1.0, sqrt(h)))


def valid_lng(value: float) -> bool:
    return -180.0 <= value <= 180.0


def valid_lat(value: float) -> bool:
    return -90.0 <= value <= 90.0
