"""churchsearch Python SDK — Client library for the church search API.

Provides both async and sync clients.

Quick start::

    from churchsearch.client import ChurchSearchClient

    client = ChurchSearchClient("http://localhost:8080")
    pins = client.search_bbox(-123.0, 37.0, -122.0, 38.0, output="pins")
"""

from churchsearch.client.client import AsyncChurchSearchClient, ChurchSearchClient

__all__ = ["AsyncChurchSearchClient", "ChurchSearchClient"]
