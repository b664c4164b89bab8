"""Bookmark model."""

from pydantic import Field

from .base import CacheModel


class Bookmark(CacheModel):
    """Article marked for permanent retention."""

    article_id: str = Field(..., description="Bookmarked article id")
    bookmarked_at: int = Field(..., description="Bookmark time in epoch millis")
