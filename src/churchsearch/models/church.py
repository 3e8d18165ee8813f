"""Church record models — read-only projections of backend-owned church data."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BeliefType(str, Enum):
    """Closed classification of a church's tradition."""

    ORTHODOX = "orthodox"
    ROMAN_CATHOLIC = "roman_catholic"
    PROTESTANT = "protestant"
    ANGLICAN = "anglican"
    OTHER = "other"
    UNKNOWN = "unknown"


class ChurchRecord(BaseModel):
    """Canonical projection of one church's public data.

    Coordinates are nullable because not every church is geocoded.
    ``distance_m`` is only populated for radius and nearby searches.
    """

    model_config = ConfigDict(frozen=True)

    church_id: str = Field(description="Stable church identifier (UUID)")
    name: str = Field(description="Display name")
    latitude: float | None = Field(default=None, description="WGS84 latitude in decimal degrees")
    longitude: float | None = Field(default=None, description="WGS84 longitude in decimal degrees")
    address: str | None = Field(default=None, description="Street address")
    locality: str | None = Field(default=None, description="City or town")
    region: str | None = Field(default=None, description="State, province, or region")
    postal_code: str | None = Field(default=None, description="Postal code")
    country: str | None = Field(default=None, description="Country code")
    website: str | None = Field(default=None, description="Website URL")
    belief_type: BeliefType | None = Field(default=None, description="Tradition classification")
    trinitarian_beliefs: bool | None = Field(default=None, description="Whether the church holds trinitarian beliefs")
    church_summary: str | None = Field(default=None, description="Short description")
    service_languages: tuple[str, ...] = Field(default=(), description="Service languages, in backend order")
    distance_m: float | None = Field(default=None, description="Distance from the query center in meters")

    @property
    def has_coordinates(self) -> bool:
        """True when both longitude and latitude are known."""
        return self.longitude is not None and self.latitude is not None


class ChurchPin(BaseModel):
    """Minimal map-marker projection of a ChurchRecord."""

    church_id: str
    name: str
    latitude: float
    longitude: float
    locality: str | None = None
    region: str | None = None
    country: str | None = None
    website: str | None = None
    belief_type: BeliefType | None = None
    service_languages: tuple[str, ...] = ()
