"""Turn raw feed articles into cache rows."""

import hashlib
import logging
import uuid
from typing import Iterable, List, Optional, Tuple

import pendulum
from pendulum.parsing.exceptions import ParserError

from ..clock import now_millis
from ..exceptions import DateParseError
from ..models import Article
from .models import RawArticle

logger = logging.getLogger(__name__)

PLACEHOLDER_TITLE = "No title available"
UNKNOWN_AUTHOR = "Unknown"


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


def article_id_for(url: Optional[str]) -> str:
    """
    Derive the stable article id from its URL.

    Articles without a URL get a random id; they cannot be deduplicated.
    """
    # Whitespace-only urls are treated like absent ones
    if url and url.strip():
        return hashlib.sha256(url.encode("utf-8")).hexdigest()
    return str(uuid.uuid4())


def parse_published_at(value: Optional[str]) -> int:
    """Parse an ISO-8601 timestamp to epoch millis. Naive times are UTC."""
    if value is None or not value.strip():
        raise DateParseError("Missing publication date")

    try:
        parsed = pendulum.parse(value.strip(), tz="UTC")
    except (ParserError, ValueError) as e:
        raise DateParseError(f"Unrecognised publication date: {value!r}") from e

    # Durations and intervals are valid ISO-8601 but not instants
    if not isinstance(parsed, pendulum.DateTime):
        raise DateParseError(f"Not a timestamp: {value!r}")
    return parsed.int_timestamp * 1000 + parsed.microsecond // 1000


def published_millis(value: Optional[str], fallback: int) -> int:
    """Parse a publication date, substituting ``fallback`` when it fails."""
    try:
        return parse_published_at(value)
    except DateParseError as e:
        logger.debug("%s; using fetch time", e)
        return fallback


def normalize_article(raw: RawArticle, category: str, fetched_at: Optional[int] = None) -> Article:
    """Map a raw feed article to a cache row tagged with ``category``."""
    if fetched_at is None:
        fetched_at = now_millis()

    # Blank url and title count as missing: random id, placeholder title
    return Article(
        article_id=article_id_for(raw.url),
        category=category,
        title=_blank_to_none(raw.title) or PLACEHOLDER_TITLE,
        author=_blank_to_none(raw.author) or UNKNOWN_AUTHOR,
        published_at=raw.published_at or "",
        published_at_millis=published_millis(raw.published_at, fetched_at),
        url=raw.url or "",
        image_url=_blank_to_none(raw.url_to_image),
        source_name=_blank_to_none(raw.source_name),
        fetched_at=fetched_at,
    )


def normalize_feed(
    raws: Iterable[RawArticle],
    category: str,
    fetched_at: Optional[int] = None,
) -> Tuple[List[Article], int]:
    """
    Normalize a whole feed.

    Returns:
        Tuple of (articles, skipped count)
    """
    if fetched_at is None:
        fetched_at = now_millis()

    articles = []
    skipped = 0
    for raw in raws:
        try:
            articles.append(normalize_article(raw, category, fetched_at))
        except (TypeError, ValueError) as e:
            skipped += 1
            logger.warning("Skipping unusable article %r: %s", raw.url, e)
    return articles, skipped
