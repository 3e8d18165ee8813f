"""Shared test fixtures and configuration."""

from __future__ import annotations

from typing import Any

import pytest

from churchsearch.adapters.base.adapter import AdapterHealth, BackendOperation, ChurchBackend
from churchsearch.adapters.base.exceptions import RecordNotFoundError
from churchsearch.config.settings import Settings

GRACE_ID = "7d4f0c52-8a1e-4c3b-9f2a-1b2c3d4e5f60"
TRINITY_ID = "7d4f0c52-8a1e-4c3b-9f2a-1b2c3d4e5f61"
MISSION_ID = "7d4f0c52-8a1e-4c3b-9f2a-1b2c3d4e5f62"


class FakeBackend(ChurchBackend):
    """In-memory backend that records every call it receives."""

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        record: dict[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.rows = rows if rows is not None else []
        self.record = record
        self.error = error
        self.calls: list[tuple[BackendOperation, dict[str, Any]]] = []
        self.fetches: list[str] = []
        self.initialized = False

    @property
    def name(self) -> str:
        return "fake"

    async def initialize(self) -> None:
        self.initialized = True

    async def shutdown(self) -> None:
        self.initialized = False

    async def call(self, operation: BackendOperation, params: dict[str, Any]) -> list[dict[str, Any]]:
        self.calls.append((operation, params))
        if self.error:
            raise self.error
        return self.rows

    async def fetch_church(self, church_id: str) -> dict[str, Any]:
        self.fetches.append(church_id)
        if self.error:
            raise self.error
        if self.record is None:
            raise RecordNotFoundError(f"Church '{church_id}' not found.")
        return self.record

    async def health_check(self) -> AdapterHealth:
        return AdapterHealth(status="healthy", message="fake backend")


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        backend={"base_url": "http://backend.test", "api_key": "test-key"},
        observability={"log_format": "console"},
    )


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def grace_row() -> dict[str, Any]:
    """A fully geocoded church row."""
    return {
        "church_id": GRACE_ID,
        "name": "Grace Cathedral",
        "latitude": 37.8,
        "longitude": -122.4,
        "address": "1100 California St",
        "locality": "San Francisco",
        "region": "CA",
        "postal_code": "94108",
        "country": "US",
        "website": "https://gracecathedral.org",
        "belief_type": "anglican",
        "trinitarian_beliefs": True,
        "church_summary": "Episcopal cathedral on Nob Hill.",
        "service_languages": ["eng", "spa"],
    }


@pytest.fixture
def trinity_row() -> dict[str, Any]:
    """A row with string coordinates and a duplicated language."""
    return {
        "church_id": TRINITY_ID,
        "name": "Holy Trinity Orthodox Cathedral",
        "latitude": "37.7989",
        "longitude": "-122.4194",
        "locality": "San Francisco",
        "region": "CA",
        "country": "US",
        "website": None,
        "belief_type": "orthodox",
        "service_languages": ["eng", "rus", "eng"],
    }


@pytest.fixture
def mission_row() -> dict[str, Any]:
    """A church that has not been geocoded."""
    return {
        "church_id": MISSION_ID,
        "name": "Mission Street Chapel",
        "latitude": None,
        "longitude": None,
        "locality": "San Francisco",
        "country": "US",
        "belief_type": None,
        "service_languages": None,
    }


@pytest.fixture
def sample_rows(
    grace_row: dict[str, Any],
    trinity_row: dict[str, Any],
    mission_row: dict[str, Any],
) -> list[dict[str, Any]]:
    return [grace_row, trinity_row, mission_row]
