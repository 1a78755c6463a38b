"""Custom exceptions for the directory-aggregator service."""


class DirectoryAggregatorError(Exception):
    """Base exception for all directory-aggregator errors."""
    pass


class InvalidRequest(DirectoryAggregatorError):
    """Raised when required search inputs are missing or malformed."""
    pass


class ConfigurationError(DirectoryAggregatorError):
    """Raised when configuration is invalid or incomplete."""
    pass


class UpstreamError(DirectoryAggregatorError):
    """Raised when a remote API or the scraped site fails."""
    pass


class GeocodeNotFound(UpstreamError):
    """Raised when the geocoding API returns no results for a location."""
    pass


class ScrapeError(UpstreamError):
    """Raised when driving the directory site in the browser fails."""
    pass


class FrameNotFound(ScrapeError):
    """Raised when the search or pagination iframe cannot be located."""
    pass
