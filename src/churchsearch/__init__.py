"""churchsearch — Geospatial search core for a church directory."""

__version__ = "0.1.0"
