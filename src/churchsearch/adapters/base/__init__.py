"""Base adapter interface — Abstract classes for church data backends."""

from churchsearch.adapters.base.adapter import BackendOperation, ChurchBackend

__all__ = ["BackendOperation", "ChurchBackend"]
