"""Query Normalizer — turns an untyped payload into a validated ``SearchQuery``.

Normalization is pure: it never touches the network. Each variant has its
own criteria model; unknown fields are ignored, numeric strings are coerced
when unambiguous, and defaults apply only to absent fields. The first
problem found is reported as a ``ValidationError`` naming the field.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Annotated, Any

import pydantic
from pydantic import Field, TypeAdapter

from churchsearch.core.exceptions import ValidationError
from churchsearch.models.query import CRITERIA_MODELS, OutputMode, SearchQuery, SearchVariant, TextCriteria

logger = logging.getLogger(__name__)

_radius_km_adapter: TypeAdapter[float] = TypeAdapter(Annotated[float, Field(gt=0, allow_inf_nan=False)])

VARIANT_FIELD = "_variant"
OUTPUT_FIELD = "_output"

_BBOX_KEYS = {"min_lng", "min_lat", "max_lng", "max_lat"}
_CENTER_KEYS = {"center_lng", "center_lat", "lng", "lat"}
_RADIUS_KEYS = {"radius_m", "radius_km"}

# Filters only the text variant forwards to the backend.
_TEXT_ONLY_FIELDS = set(TextCriteria.model_fields) - {"variant", "limit"}


def normalize(
    payload: Any,
    variant: str | SearchVariant | None = None,
    output: str | OutputMode | None = OutputMode.LIST,
) -> SearchQuery:
    """Validate a raw payload and build the canonical query.

    Args:
        payload: Decoded JSON object with the variant's fields.
        variant: Variant discriminator. ``None`` means text search.
        output: Requested result shape.

    Returns:
        The validated SearchQuery.

    Raises:
        ValidationError: If the payload, variant, or any field is invalid.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("body", "request body must be a JSON object")

    selected = _parse_enum(SearchVariant, variant, VARIANT_FIELD, default=SearchVariant.TEXT)
    mode = _parse_enum(OutputMode, output, OUTPUT_FIELD, default=OutputMode.LIST)

    fields = {k: v for k, v in payload.items() if isinstance(k, str) and not k.startswith("_")}
    if selected is not SearchVariant.TEXT:
        ignored = sorted(k for k in fields if k in _TEXT_ONLY_FIELDS)
        if ignored:
            logger.debug("Ignoring text filters %s for %s search", ", ".join(ignored), selected.value)
    if selected is SearchVariant.RADIUS:
        fields = _radius_km_to_meters(fields)
    fields["variant"] = selected

    model = CRITERIA_MODELS[selected]
    try:
        criteria = model.model_validate(fields)
    except pydantic.ValidationError as e:
        raise _to_validation_error(e) from e

    logger.debug("Normalized %s query (output=%s)", selected.value, mode.value)
    return SearchQuery(criteria=criteria, output=mode)


def normalize_request(
    body: Any,
    output: str | OutputMode | None = None,
    infer_variant: bool = False,
) -> SearchQuery:
    """Normalize a request body that carries its own ``_variant`` / ``_output`` fields.

    Args:
        body: Decoded JSON request body.
        output: Forced output mode; overrides any ``_output`` in the body.
        infer_variant: When ``_variant`` is absent, pick it from the body's
            keys (see ``infer_variant_from``) instead of defaulting to text.
    """
    if not isinstance(body, Mapping):
        raise ValidationError("body", "request body must be a JSON object")
    requested_output = output if output is not None else body.get(OUTPUT_FIELD)
    variant = body.get(VARIANT_FIELD)
    if variant is None and infer_variant:
        variant = infer_variant_from(body)
    return normalize(body, variant, requested_output)


def infer_variant_from(body: Mapping[str, Any]) -> SearchVariant:
    """Guess the variant of a body that has no ``_variant``.

    Any bounding-box corner selects ``bbox``; a center plus a radius selects
    ``radius``; anything else is a text search.
    """
    keys = set(body)
    if keys & _BBOX_KEYS:
        return SearchVariant.BBOX
    if keys & _CENTER_KEYS and keys & _RADIUS_KEYS:
        return SearchVariant.RADIUS
    return SearchVariant.TEXT


def _parse_enum(enum_cls: Any, value: Any, field: str, default: Any) -> Any:
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValidationError(field, f"must be one of: {allowed}")


def _radius_km_to_meters(fields: dict[str, Any]) -> dict[str, Any]:
    """Accept ``radius_km`` when ``radius_m`` is absent."""
    if "radius_m" in fields or "radius_km" not in fields:
        return fields
    if isinstance(fields["radius_km"], bool):
        raise ValidationError("radius_km", "must be a number, not a boolean")
    try:
        km = _radius_km_adapter.validate_python(fields["radius_km"])
    except pydantic.ValidationError as e:
        raise ValidationError("radius_km", e.errors()[0]["msg"]) from e
    return {**fields, "radius_m": km * 1000}


def _to_validation_error(exc: pydantic.ValidationError) -> ValidationError:
    first = exc.errors()[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "variant"]
    field = loc[0] if loc else "body"
    return ValidationError(field, first.get("msg", "invalid value"))
