"""Tests for the variant dispatcher."""

from __future__ import annotations

import pytest

from churchsearch.adapters.base.adapter import BackendOperation
from churchsearch.adapters.base.exceptions import ConnectionError, QueryError
from churchsearch.core.dispatcher import ROUTES, VariantDispatcher
from churchsearch.core.exceptions import BackendError
from churchsearch.core.normalizer import normalize
from churchsearch.models.query import OutputMode, SearchVariant
from tests.conftest import FakeBackend


class TestRouting:
    def test_every_variant_has_a_route(self) -> None:
        assert set(ROUTES) == set(SearchVariant)

    def test_missing_route_is_rejected(self, fake_backend: FakeBackend) -> None:
        routes = {k: v for k, v in ROUTES.items() if k is not SearchVariant.NEARBY}
        with pytest.raises(ValueError, match="nearby"):
            VariantDispatcher(fake_backend, routes)

    def test_text_plan_drops_unset_filters(self, fake_backend: FakeBackend) -> None:
        call = VariantDispatcher(fake_backend).plan(normalize({"q": "grace", "belief": "anglican", "languages": ["eng"]}))
        assert call.operation is BackendOperation.SEARCH
        assert call.params == {"q": "grace", "p_belief": "anglican", "p_languages": ["eng"], "p_limit": 1000}

    def test_unfiltered_text_plan(self, fake_backend: FakeBackend) -> None:
        call = VariantDispatcher(fake_backend).plan(normalize({}))
        assert call.params == {"p_limit": 1000}

    def test_trinitarian_false_is_sent(self, fake_backend: FakeBackend) -> None:
        call = VariantDispatcher(fake_backend).plan(normalize({"trinitarian": False}))
        assert call.params["p_trinit"] is False

    def test_radius_plan(self, fake_backend: FakeBackend) -> None:
        query = normalize({"center_lng": -122.4, "center_lat": 37.8, "radius_m": 5000}, "radius")
        call = VariantDispatcher(fake_backend).plan(query)
        assert call.operation is BackendOperation.WITHIN_RADIUS
        assert call.params == {"p_lng": -122.4, "p_lat": 37.8, "p_radius_m": 5000.0, "p_limit": 200}

    def test_bbox_plan(self, fake_backend: FakeBackend) -> None:
        query = normalize({"min_lng": -123, "min_lat": 37, "max_lng": -122, "max_lat": 38}, "bbox")
        call = VariantDispatcher(fake_backend).plan(query)
        assert call.operation is BackendOperation.IN_BBOX
        assert call.params == {
            "p_min_lng": -123.0,
            "p_min_lat": 37.0,
            "p_max_lng": -122.0,
            "p_max_lat": 38.0,
            "p_limit": 500,
        }

    def test_nearby_plan(self, fake_backend: FakeBackend) -> None:
        query = normalize({"center_lng": 2.35, "center_lat": 48.85, "limit": 5}, "nearby")
        call = VariantDispatcher(fake_backend).plan(query)
        assert call.operation is BackendOperation.NEARBY
        assert call.params == {"p_lng": 2.35, "p_lat": 48.85, "p_limit": 5}

    def test_output_does_not_change_operation(self, fake_backend: FakeBackend) -> None:
        dispatcher = VariantDispatcher(fake_backend)
        payload = {"min_lng": 0, "min_lat": 0, "max_lng": 1, "max_lat": 1}
        as_list = dispatcher.plan(normalize(payload, "bbox", "list"))
        as_geojson = dispatcher.plan(normalize(payload, "bbox", "geojson"))
        assert as_list.operation is as_geojson.operation
        assert as_list.params == as_geojson.params
        assert as_geojson.output is OutputMode.GEOJSON


class TestDispatch:
    async def test_single_backend_call(self, fake_backend: FakeBackend) -> None:
        fake_backend.rows = [{"church_id": "a", "name": "A"}]
        rows = await VariantDispatcher(fake_backend).dispatch(normalize({"q": "a"}))
        assert rows == [{"church_id": "a", "name": "A"}]
        assert len(fake_backend.calls) == 1
        assert fake_backend.calls[0][0] is BackendOperation.SEARCH

    async def test_empty_rows(self, fake_backend: FakeBackend) -> None:
        rows = await VariantDispatcher(fake_backend).dispatch(normalize({"q": "nothing"}))
        assert rows == []

    @pytest.mark.parametrize("error", [ConnectionError("refused"), QueryError("HTTP 500")])
    async def test_adapter_error_becomes_backend_error(self, fake_backend: FakeBackend, error: Exception) -> None:
        fake_backend.error = error
        with pytest.raises(BackendError) as exc_info:
            await VariantDispatcher(fake_backend).dispatch(normalize({}))
        assert exc_info.value.__cause__ is error
        assert exc_info.value.public_message == "Failed to search churches."
        assert len(fake_backend.calls) == 1

    async def test_non_list_result(self, fake_backend: FakeBackend) -> None:
        fake_backend.rows = {"rows": []}  # type: ignore[assignment]
        with pytest.raises(BackendError, match="expected a list"):
            await VariantDispatcher(fake_backend).dispatch(normalize({}))

    @pytest.mark.parametrize("rows", [["not-a-row"], [{"church_id": "a", "name": "A"}, None], [[1, 2]]])
    async def test_non_object_rows(self, fake_backend: FakeBackend, rows: list) -> None:
        fake_backend.rows = rows
        with pytest.raises(BackendError, match="not JSON objects"):
            await VariantDispatcher(fake_backend).dispatch(normalize({}))
