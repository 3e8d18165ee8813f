"""Base backend adapter — Abstract interface for church data backends.

Every data backend must implement this interface to serve the search core.
The adapter is responsible for:
  1. Executing one named remote operation and returning its raw rows
  2. Fetching a single church record by identifier
  3. Reporting health status

Adapters return raw rows; turning rows into ``ChurchRecord`` objects is the
result shaper's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class BackendOperation(str, Enum):
    """Remote operations exposed by the data backend."""

    SEARCH = "search_churches"
    WITHIN_RADIUS = "churches_within_radius"
    IN_BBOX = "churches_in_bbox"
    NEARBY = "churches_nearby"


class AdapterHealth(BaseModel):
    """Health status of a backend adapter."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    message: str | None = Field(default=None, description="Additional health message")


class ChurchBackend(ABC):
    """Abstract base class for church data backends.

    All adapters must implement:
      - call(): Execute one remote operation and return its rows
      - fetch_church(): Retrieve a single church by ID
      - health_check(): Report adapter health status

    Adapters hold no per-request state. Connection pooling and
    configuration are handled during initialization.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique adapter name (e.g., 'postgrest')."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the adapter (connections, pools, etc.).

        Called once during application startup.
        """

    @abstractmethod
    async def shutdown(self) -> None:
        """Gracefully shut down the adapter and release its connections."""

    @abstractmethod
    async def call(self, operation: BackendOperation, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Execute a remote operation.

        Args:
            operation: The backend operation to invoke.
            params: Operation arguments, already in the backend's naming.

        Returns:
            Raw rows in backend order. An empty list is a valid result.

        Raises:
            AdapterError: On transport failure, backend error, or malformed body.
        """

    @abstractmethod
    async def fetch_church(self, church_id: str) -> dict[str, Any]:
        """Retrieve a single church row by its identifier.

        Raises:
            RecordNotFoundError: If no church has this identifier.
        """

    @abstractmethod
    async def health_check(self) -> AdapterHealth:
        """Check the health of the data backend."""
