"""Configuration package."""

from churchsearch.config.settings import Settings

__all__ = ["Settings"]
