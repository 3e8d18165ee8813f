"""Tests for the query normalizer."""

from __future__ import annotations

import logging

import pytest

from churchsearch.core.exceptions import ValidationError
from churchsearch.core.normalizer import infer_variant_from, normalize, normalize_request
from churchsearch.models.church import BeliefType
from churchsearch.models.query import (
    BBoxCriteria,
    NearbyCriteria,
    OutputMode,
    RadiusCriteria,
    SearchVariant,
    TextCriteria,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Variant and output selection
# ═══════════════════════════════════════════════════════════════════════════════


class TestVariantSelection:
    def test_missing_variant_is_text(self) -> None:
        query = normalize({"q": "grace"})
        assert isinstance(query.criteria, TextCriteria)
        assert query.variant is SearchVariant.TEXT
        assert query.output is OutputMode.LIST

    def test_absent_variant_equals_explicit_text(self) -> None:
        implicit = normalize({"q": "grace", "country": "US"})
        explicit = normalize({"q": "grace", "country": "US"}, "text")
        assert implicit == explicit

    def test_variant_is_case_insensitive(self) -> None:
        query = normalize({"center_lng": 0, "center_lat": 0}, " Nearby ")
        assert isinstance(query.criteria, NearbyCriteria)

    def test_unknown_variant(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({}, "polygon")
        assert exc_info.value.field == "_variant"
        assert "text" in exc_info.value.message

    def test_unknown_output(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({}, output="csv")
        assert exc_info.value.field == "_output"

    def test_output_is_independent_of_variant(self) -> None:
        query = normalize({"q": "grace"}, "text", "geojson")
        assert query.variant is SearchVariant.TEXT
        assert query.output is OutputMode.GEOJSON

    def test_non_object_payload(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize(["q", "grace"])
        assert exc_info.value.field == "body"


class TestNormalizeRequest:
    def test_reads_variant_and_output_from_body(self) -> None:
        query = normalize_request({"_variant": "bbox", "_output": "pins", "min_lng": -1, "min_lat": -1, "max_lng": 1, "max_lat": 1})
        assert isinstance(query.criteria, BBoxCriteria)
        assert query.output is OutputMode.PINS

    def test_forced_output_overrides_body(self) -> None:
        query = normalize_request({"_output": "pins", "q": "grace"}, output=OutputMode.GEOJSON)
        assert query.output is OutputMode.GEOJSON

    def test_empty_body_is_unfiltered_text_search(self) -> None:
        query = normalize_request({})
        assert isinstance(query.criteria, TextCriteria)
        assert query.criteria.q is None
        assert query.criteria.limit == 1000

    def test_non_object_body(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize_request("grace")
        assert exc_info.value.field == "body"


# ═══════════════════════════════════════════════════════════════════════════════
# Text criteria
# ═══════════════════════════════════════════════════════════════════════════════


class TestTextCriteria:
    def test_filters(self) -> None:
        query = normalize(
            {
                "q": "  cathedral ",
                "belief": "Roman Catholic",
                "languages": ["ENG", "spa", "eng"],
                "country": "US",
                "region": "",
                "trinitarian": "true",
            }
        )
        c = query.criteria
        assert isinstance(c, TextCriteria)
        assert c.q == "cathedral"
        assert c.belief is BeliefType.ROMAN_CATHOLIC
        assert c.languages == ("eng", "spa")
        assert c.region is None
        assert c.trinitarian is True

    def test_comma_separated_languages(self) -> None:
        c = normalize({"languages": "eng, rus,,eng"}).criteria
        assert isinstance(c, TextCriteria)
        assert c.languages == ("eng", "rus")

    def test_non_string_language(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"languages": ["eng", 3]})
        assert exc_info.value.field == "languages"

    def test_unknown_belief(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"belief": "druid"})
        assert exc_info.value.field == "belief"

    def test_unknown_fields_are_ignored(self) -> None:
        query = normalize({"q": "grace", "colour": "blue", "_debug": True})
        assert query == normalize({"q": "grace"})

    def test_query_too_long(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"q": "x" * 501})
        assert exc_info.value.field == "q"


# ═══════════════════════════════════════════════════════════════════════════════
# Radius criteria
# ═══════════════════════════════════════════════════════════════════════════════


class TestRadiusCriteria:
    def test_defaults(self) -> None:
        c = normalize({"center_lng": -122.4, "center_lat": 37.8, "radius_m": 5000}, "radius").criteria
        assert isinstance(c, RadiusCriteria)
        assert c.center_lng == -122.4
        assert c.center_lat == 37.8
        assert c.radius_m == 5000
        assert c.limit == 200

    def test_numeric_strings_are_coerced(self) -> None:
        c = normalize({"center_lng": "-122.4", "center_lat": "37.8", "radius_m": "5000", "limit": "10"}, "radius").criteria
        assert isinstance(c, RadiusCriteria)
        assert c.radius_m == 5000.0
        assert c.limit == 10

    def test_lng_lat_aliases(self) -> None:
        c = normalize({"lng": 2.35, "lat": 48.85, "radius_m": 1000}, "radius").criteria
        assert isinstance(c, RadiusCriteria)
        assert (c.center_lng, c.center_lat) == (2.35, 48.85)

    def test_radius_km_is_converted(self) -> None:
        c = normalize({"center_lng": 0, "center_lat": 0, "radius_km": 2.5}, "radius").criteria
        assert isinstance(c, RadiusCriteria)
        assert c.radius_m == 2500

    def test_radius_m_wins_over_radius_km(self) -> None:
        c = normalize({"center_lng": 0, "center_lat": 0, "radius_m": 100, "radius_km": 2.5}, "radius").criteria
        assert isinstance(c, RadiusCriteria)
        assert c.radius_m == 100

    def test_negative_radius_km(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"center_lng": 0, "center_lat": 0, "radius_km": -1}, "radius")
        assert exc_info.value.field == "radius_km"

    @pytest.mark.parametrize("radius", [-5, 0, "abc"])
    def test_invalid_radius(self, radius: object) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"center_lng": 0, "center_lat": 0, "radius_m": radius}, "radius")
        assert exc_info.value.field == "radius_m"

    def test_missing_radius(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"center_lng": 0, "center_lat": 0}, "radius")
        assert exc_info.value.field == "radius_m"

    def test_missing_center(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"center_lat": 0, "radius_m": 10}, "radius")
        assert exc_info.value.field == "center_lng"

    @pytest.mark.parametrize(
        ("field", "value"),
        [("center_lng", 180.5), ("center_lng", -181), ("center_lat", 91), ("center_lat", -90.01)],
    )
    def test_out_of_range_center(self, field: str, value: float) -> None:
        payload = {"center_lng": 0, "center_lat": 0, "radius_m": 10, field: value}
        with pytest.raises(ValidationError) as exc_info:
            normalize(payload, "radius")
        assert exc_info.value.field == field

    def test_boundary_coordinates_are_valid(self) -> None:
        c = normalize({"center_lng": 180, "center_lat": -90, "radius_m": 1}, "radius").criteria
        assert isinstance(c, RadiusCriteria)
        assert c.center_lng == 180


# ═══════════════════════════════════════════════════════════════════════════════
# Bounding box criteria
# ═══════════════════════════════════════════════════════════════════════════════


class TestBBoxCriteria:
    def test_defaults(self) -> None:
        c = normalize({"min_lng": -123, "min_lat": 37, "max_lng": -122, "max_lat": 38}, "bbox").criteria
        assert isinstance(c, BBoxCriteria)
        assert c.limit == 500

    def test_degenerate_box_is_valid(self) -> None:
        c = normalize({"min_lng": 1, "min_lat": 2, "max_lng": 1, "max_lat": 2}, "bbox").criteria
        assert isinstance(c, BBoxCriteria)

    def test_inverted_longitude(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"min_lng": 10, "min_lat": 0, "max_lng": -10, "max_lat": 1}, "bbox")
        assert exc_info.value.field == "max_lng"
        assert "min_lng" in exc_info.value.message

    def test_inverted_latitude(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"min_lng": 0, "min_lat": 5, "max_lng": 1, "max_lat": 4}, "bbox")
        assert exc_info.value.field == "max_lat"

    def test_missing_corner(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"min_lng": 0, "min_lat": 0, "max_lng": 1}, "bbox")
        assert exc_info.value.field == "max_lat"


# ═══════════════════════════════════════════════════════════════════════════════
# Limits
# ═══════════════════════════════════════════════════════════════════════════════


class TestLimits:
    @pytest.mark.parametrize(
        ("variant", "payload", "expected"),
        [
            ("text", {}, 1000),
            ("radius", {"center_lng": 0, "center_lat": 0, "radius_m": 1}, 200),
            ("bbox", {"min_lng": 0, "min_lat": 0, "max_lng": 1, "max_lat": 1}, 500),
            ("nearby", {"center_lng": 0, "center_lat": 0}, 50),
        ],
    )
    def test_default_limit_per_variant(self, variant: str, payload: dict, expected: int) -> None:
        assert normalize(payload, variant).criteria.limit == expected

    @pytest.mark.parametrize("limit", [0, -1, 1001, 2.5])
    def test_invalid_limit(self, limit: object) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"limit": limit})
        assert exc_info.value.field == "limit"

    def test_max_limit_is_accepted(self) -> None:
        assert normalize({"limit": 1000}).criteria.limit == 1000


# ═══════════════════════════════════════════════════════════════════════════════
# Strict coercion
# ═══════════════════════════════════════════════════════════════════════════════


class TestStrictCoercion:
    @pytest.mark.parametrize(
        ("variant", "payload", "field"),
        [
            ("text", {"limit": True}, "limit"),
            ("radius", {"center_lng": 0, "center_lat": 0, "radius_m": True}, "radius_m"),
            ("radius", {"center_lng": 0, "center_lat": 0, "radius_km": True}, "radius_km"),
            ("nearby", {"center_lng": False, "center_lat": 0}, "center_lng"),
            ("bbox", {"min_lng": 0, "min_lat": 0, "max_lng": 1, "max_lat": True}, "max_lat"),
        ],
    )
    def test_booleans_are_not_numbers(self, variant: str, payload: dict, field: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize(payload, variant)
        assert exc_info.value.field == field
        assert "boolean" in exc_info.value.message

    def test_numeric_strings_still_accepted(self) -> None:
        c = normalize({"min_lng": "0", "min_lat": "0", "max_lng": "1.5", "max_lat": "1", "limit": "20"}, "bbox").criteria
        assert isinstance(c, BBoxCriteria)
        assert c.max_lng == 1.5
        assert c.limit == 20

    @pytest.mark.parametrize("field", ["languages", "programs"])
    def test_explicit_null_list_filter(self, field: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({field: None})
        assert exc_info.value.field == field

    def test_explicit_null_limit(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize({"limit": None})
        assert exc_info.value.field == "limit"


# ═══════════════════════════════════════════════════════════════════════════════
# Variant inference (GeoJSON bodies without ``_variant``)
# ═══════════════════════════════════════════════════════════════════════════════


class TestVariantInference:
    @pytest.mark.parametrize(
        ("body", "expected"),
        [
            ({"min_lng": -123, "min_lat": 37, "max_lng": -122, "max_lat": 38}, SearchVariant.BBOX),
            ({"max_lat": 38}, SearchVariant.BBOX),
            ({"center_lng": -122.4, "center_lat": 37.8, "radius_m": 500}, SearchVariant.RADIUS),
            ({"lng": -122.4, "lat": 37.8, "radius_km": 2}, SearchVariant.RADIUS),
            ({"center_lng": -122.4, "center_lat": 37.8}, SearchVariant.TEXT),
            ({"q": "grace"}, SearchVariant.TEXT),
            ({}, SearchVariant.TEXT),
        ],
    )
    def test_infer_variant_from(self, body: dict, expected: SearchVariant) -> None:
        assert infer_variant_from(body) is expected

    def test_inference_is_opt_in(self) -> None:
        body = {"min_lng": -123, "min_lat": 37, "max_lng": -122, "max_lat": 38}
        assert normalize_request(body).variant is SearchVariant.TEXT
        assert normalize_request(body, infer_variant=True).variant is SearchVariant.BBOX

    def test_explicit_variant_wins(self) -> None:
        body = {"_variant": "text", "min_lng": -123, "q": "grace"}
        assert normalize_request(body, infer_variant=True).variant is SearchVariant.TEXT

    def test_incomplete_inferred_bbox_names_missing_corner(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize_request({"min_lng": -123, "min_lat": 37, "max_lng": -122}, infer_variant=True)
        assert exc_info.value.field == "max_lat"


class TestIgnoredTextFilters:
    def test_geographic_variants_log_ignored_filters(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="churchsearch.core.normalizer")
        query = normalize({"center_lng": 0, "center_lat": 0, "radius_m": 10, "belief": "orthodox", "country": "US"}, "radius")
        assert isinstance(query.criteria, RadiusCriteria)
        assert any("Ignoring text filters belief, country for radius search" in r.getMessage() for r in caplog.records)

    def test_text_variant_logs_nothing_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="churchsearch.core.normalizer")
        normalize({"belief": "orthodox"})
        assert not any("Ignoring" in r.getMessage() for r in caplog.records)
