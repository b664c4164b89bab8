"""Remote feed ingestion and normalization."""

from .feed_client import FeedClient
from .models import FeedResponse, FeedResult, RawArticle
from .normalize import (
    PLACEHOLDER_TITLE,
    UNKNOWN_AUTHOR,
    article_id_for,
    normalize_article,
    normalize_feed,
    parse_published_at,
)

__all__ = [
    "FeedClient",
    "FeedResponse",
    "FeedResult",
    "RawArticle",
    "PLACEHOLDER_TITLE",
    "UNKNOWN_AUTHOR",
    "article_id_for",
    "normalize_article",
    "normalize_feed",
    "parse_published_at",
]
