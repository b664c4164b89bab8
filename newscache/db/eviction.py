"""Per-category cache bound that never touches bookmarked articles."""

import logging

from pydantic import BaseModel, Field

from .articles import ArticleStore

logger = logging.getLogger(__name__)

DEFAULT_KEEP_LIMIT = 100


class EvictionResult(BaseModel):
    """Outcome of one eviction pass."""

    category: str = Field(..., description="Evicted category")
    kept: int = Field(0, description="Most recent ids kept")
    deleted: int = Field(0, description="Rows deleted")


class EvictionPolicy:
    """Keep the newest ``keep_limit`` articles of a category plus every bookmark.

    Runs as two explicit steps: read the ids to keep, then delete by
    exclusion. SQLite does not reliably honour ``ORDER BY ... LIMIT``
    inside a ``NOT IN`` subquery, so the keep-set is never computed in
    the same statement as the delete.
    """

    def __init__(self, articles: ArticleStore, keep_limit: int = DEFAULT_KEEP_LIMIT) -> None:
        if keep_limit < 1:
            raise ValueError("keep_limit must be at least 1")
        self.articles = articles
        self.keep_limit = keep_limit

    def evict(self, category: str) -> EvictionResult:
        """Evict a category. Joins the caller's transaction when one is open."""
        with self.articles.db.transaction("articles"):
            keep_ids = self.articles.ids_to_keep(category, self.keep_limit)
            if len(keep_ids) < self.keep_limit:
                return EvictionResult(category=category, kept=len(keep_ids))

            deleted = self.articles.delete_except(category, keep_ids)

        if deleted:
            logger.debug("Evicted %d articles from %s", deleted, category)
        return EvictionResult(category=category, kept=len(keep_ids), deleted=deleted)
