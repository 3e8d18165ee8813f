"""API dependencies — Dependency injection for FastAPI endpoints."""

from __future__ import annotations

from churchsearch.core.engine import ChurchSearchEngine

# Global engine instance (set during application lifespan)
_engine: ChurchSearchEngine | None = None


def set_engine(engine: ChurchSearchEngine | None) -> None:
    """Set the global engine instance (called during app lifespan)."""
    global _engine
    _engine = engine


def get_engine() -> ChurchSearchEngine:
    """Get the global search engine instance.

    Raises:
        RuntimeError: If the engine is not initialized.
    """
    if _engine is None:
        raise RuntimeError("Church search engine not initialized. Is the server running?")
    return _engine
