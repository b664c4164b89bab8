"""Error taxonomy for the news cache."""


class NewsCacheError(Exception):
    """Base exception for news cache operations."""


class FeedError(NewsCacheError):
    """Raised when the remote feed cannot be used."""


class FeedTransportError(FeedError):
    """Raised on network or HTTP failures talking to the feed endpoint."""


class FeedPayloadError(FeedError):
    """Raised when the feed response is not the expected JSON shape."""


class DateParseError(NewsCacheError):
    """Raised when a publication date matches none of the accepted formats."""


class StoreError(NewsCacheError):
    """Raised when the local SQLite store fails.

    This is the one failure class that reaches the coordinator, since it
    means the cache itself is broken rather than merely stale.
    """


class RefreshCancelled(NewsCacheError):
    """Raised inside a write transaction to roll back a superseded refresh."""
