"""Adapter-specific exceptions."""


class AdapterError(Exception):
    """Base exception for adapter errors."""


class ConnectionError(AdapterError):
    """Raised when the adapter cannot reach the data backend."""


class RecordNotFoundError(AdapterError):
    """Raised when a requested church record does not exist."""


class QueryError(AdapterError):
    """Raised when the backend rejects or fails a remote call."""


class MalformedResponseError(AdapterError):
    """Raised when the backend answers with a body that is not the expected shape."""


class ConfigurationError(AdapterError):
    """Raised when adapter configuration is invalid."""
