"""
Directory Aggregator

Collects UK trade-directory listings from Google Places, the REFCOM
registry and the FGAS company directory, reshaped into one record format.

Quick start (library usage):
    import asyncio
    from directory_aggregator import search_registry

    result = asyncio.run(search_registry(postcode="LS1 4DY"))
    for record in result["normalized"]:
        print(record.company_name, record.address)

Or run the HTTP API:
    python -m directory_aggregator serve
"""

from .parsers import NormalizedRecord, Source, normalize
from .exceptions import (
    DirectoryAggregatorError,
    InvalidRequest,
    UpstreamError,
    GeocodeNotFound,
    ScrapeError,
    FrameNotFound,
)

__version__ = "1.0.0"
__all__ = [
    "NormalizedRecord",
    "Source",
    "normalize",
    "search_places",
    "search_registry",
    "scrape_directory",
    "DirectoryAggregatorError",
    "InvalidRequest",
    "UpstreamError",
    "GeocodeNotFound",
    "ScrapeError",
    "FrameNotFound",
]


def __getattr__(name):
    """Lazy imports for the source clients.

    The FGAS scraper pulls in Playwright; deferring the clients keeps
    `import directory_aggregator` light for callers that only normalize.
    """
    if name == "search_places":
        from .extraction.places import search_places
        return search_places
    if name == "search_registry":
        from .extraction.registry import search_registry
        return search_registry
    if name == "scrape_directory":
        from .extraction.directory import scrape_directory
        return scrape_directory
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
