"""Search core exceptions.

Every failure that leaves the search core is one of these three kinds; the
HTTP layer maps each kind to a status code and error body.
"""

from __future__ import annotations


class ChurchSearchError(Exception):
    """Base exception for the search core."""

    kind = "error"


class ValidationError(ChurchSearchError):
    """Raised when a search payload is malformed or missing required input.

    Attributes:
        field: Name of the offending payload field.
        message: Human-readable description of the problem.
    """

    kind = "validation_error"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class BackendError(ChurchSearchError):
    """Raised when the data backend fails or returns malformed data.

    The original exception is chained as ``__cause__``; its details are for
    server-side logs only.
    """

    kind = "backend_error"

    def __init__(self, message: str, public_message: str = "Failed to search churches.") -> None:
        self.public_message = public_message
        super().__init__(message)


class NotFoundError(ChurchSearchError):
    """Raised when a church identifier has no matching record."""

    kind = "not_found"

    def __init__(self, church_id: str) -> None:
        self.church_id = church_id
        super().__init__(f"Church '{church_id}' not found")
