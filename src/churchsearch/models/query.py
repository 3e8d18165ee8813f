"""Search query models — the canonical, validated form of a search request.

A ``SearchQuery`` pairs selection criteria (which churches) with an output
mode (how to shape them). The criteria are a tagged union over
``SearchVariant``; the output mode is independent of the variant, so any
variant can be rendered as list rows, map pins, or GeoJSON.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from churchsearch.models.church import BeliefType

MAX_LIMIT = 1000

DEFAULT_TEXT_LIMIT = 1000
DEFAULT_RADIUS_LIMIT = 200
DEFAULT_BBOX_LIMIT = 500
DEFAULT_NEARBY_LIMIT = 50


class SearchVariant(str, Enum):
    """Selection shapes accepted by the search core."""

    TEXT = "text"
    RADIUS = "radius"
    BBOX = "bbox"
    NEARBY = "nearby"


class OutputMode(str, Enum):
    """Result shapes produced by the result shaper."""

    LIST = "list"
    PINS = "pins"
    GEOJSON = "geojson"


def _longitude(**kwargs: Any) -> Any:
    return Field(ge=-180, le=180, allow_inf_nan=False, **kwargs)


def _latitude(**kwargs: Any) -> Any:
    return Field(ge=-90, le=90, allow_inf_nan=False, **kwargs)


def _limit(default: int) -> Any:
    return Field(default=default, ge=1, le=MAX_LIMIT, description="Maximum number of rows to return")


_NUMERIC_FIELDS = ("limit", "radius_m", "center_lng", "center_lat", "min_lng", "min_lat", "max_lng", "max_lat")


class _Criteria(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator(*_NUMERIC_FIELDS, mode="before", check_fields=False)
    @classmethod
    def _reject_booleans(cls, v: Any) -> Any:
        """JSON true/false would otherwise coerce to 1/0."""
        if isinstance(v, bool):
            raise ValueError("must be a number, not a boolean")
        return v


class TextCriteria(_Criteria):
    """Free-text term plus attribute filters."""

    variant: Literal[SearchVariant.TEXT] = SearchVariant.TEXT
    q: str | None = Field(default=None, max_length=500, description="Free-text search term")
    belief: BeliefType | None = Field(default=None, description="Tradition filter")
    languages: tuple[str, ...] = Field(default=(), description="Service language codes (any match)")
    country: str | None = Field(default=None, description="Country filter")
    region: str | None = Field(default=None, description="Region filter")
    locality: str | None = Field(default=None, description="Locality filter")
    postal_code: str | None = Field(default=None, description="Postal code filter")
    trinitarian: bool | None = Field(default=None, description="Trinitarian beliefs filter")
    programs: tuple[str, ...] = Field(default=(), description="Programs offered filter")
    limit: int = _limit(DEFAULT_TEXT_LIMIT)

    @field_validator("q", "country", "region", "locality", "postal_code", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("belief", mode="before")
    @classmethod
    def _normalize_belief(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower().replace(" ", "_") or None
        return v

    @field_validator("languages", "programs", mode="before")
    @classmethod
    def _ordered_unique(cls, v: Any) -> Any:
        """Accept a list or a comma-separated string; keep first occurrences in order."""
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, list | tuple):
            return v
        out: list[str] = []
        for item in v:
            if not isinstance(item, str):
                raise ValueError("must contain only strings")
            value = item.strip().lower()
            if value and value not in out:
                out.append(value)
        return tuple(out)


class RadiusCriteria(_Criteria):
    """Churches within ``radius_m`` meters of a center point."""

    variant: Literal[SearchVariant.RADIUS] = SearchVariant.RADIUS
    center_lng: float = _longitude(validation_alias=AliasChoices("center_lng", "lng"))
    center_lat: float = _latitude(validation_alias=AliasChoices("center_lat", "lat"))
    radius_m: float = Field(gt=0, allow_inf_nan=False, description="Search radius in meters")
    limit: int = _limit(DEFAULT_RADIUS_LIMIT)


class BBoxCriteria(_Criteria):
    """Churches inside a longitude/latitude bounding box."""

    variant: Literal[SearchVariant.BBOX] = SearchVariant.BBOX
    min_lng: float = _longitude()
    min_lat: float = _latitude()
    max_lng: float = _longitude()
    max_lat: float = _latitude()
    limit: int = _limit(DEFAULT_BBOX_LIMIT)

    @field_validator("max_lng", "max_lat")
    @classmethod
    def _max_not_below_min(cls, v: float, info: ValidationInfo) -> float:
        lower_name = info.field_name.replace("max_", "min_")  # type: ignore[union-attr]
        lower = info.data.get(lower_name)
        if lower is not None and v < lower:
            raise ValueError(f"must be greater than or equal to {lower_name}")
        return v


class NearbyCriteria(_Criteria):
    """The churches closest to a point, nearest first."""

    variant: Literal[SearchVariant.NEARBY] = SearchVariant.NEARBY
    center_lng: float = _longitude(validation_alias=AliasChoices("center_lng", "lng"))
    center_lat: float = _latitude(validation_alias=AliasChoices("center_lat", "lat"))
    limit: int = _limit(DEFAULT_NEARBY_LIMIT)


SearchCriteria = Annotated[
    TextCriteria | RadiusCriteria | BBoxCriteria | NearbyCriteria,
    Field(discriminator="variant"),
]

CRITERIA_MODELS: dict[SearchVariant, type[_Criteria]] = {
    SearchVariant.TEXT: TextCriteria,
    SearchVariant.RADIUS: RadiusCriteria,
    SearchVariant.BBOX: BBoxCriteria,
    SearchVariant.NEARBY: NearbyCriteria,
}


class SearchQuery(BaseModel):
    """Canonical search query: what to select, and how to shape it."""

    model_config = ConfigDict(frozen=True)

    criteria: SearchCriteria
    output: OutputMode = OutputMode.LIST

    @property
    def variant(self) -> SearchVariant:
        return self.criteria.variant

    @property
    def has_distance(self) -> bool:
        """True when rows carry a distance from a query center."""
        return self.criteria.variant in (SearchVariant.RADIUS, SearchVariant.NEARBY)
