"""
Exception types for the YouTube comment exporter.

Discovery failures (channel resolution, catalog assembly) are fatal to the
operation that raised them. Per-video failures during bulk export are
recorded on the result instead of being raised.
"""

from typing import Optional


class YouTubeExporterError(Exception):
    """Base class for all exporter errors."""
    pass


class CredentialMissing(YouTubeExporterError):
    """Raised before any network call when no API key was supplied."""
    pass


class TransportError(YouTubeExporterError):
    """A YouTube API call failed or returned a body we could not read."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class CatalogFetchError(TransportError):
    """
    Catalog assembly aborted after some pages were already collected.

    The partial catalog (ranked and truncated like a complete one) is kept
    on `catalog` so the caller can decide whether to use it.
    """

    def __init__(self, message: str, catalog, status: Optional[int] = None):
        super().__init__(message, status=status)
        self.catalog = catalog


class ChannelNotFound(YouTubeExporterError):
    """Neither a handle nor a channel ID lookup matched the identifier."""
    pass


class VideoNotFound(YouTubeExporterError):
    """The videos endpoint returned no item for the requested ID."""
    pass
