"""Feed synchronizer: network -> normalize -> upsert -> evict."""

import asyncio
import logging
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..clock import now_millis
from ..db import ArticleStore, Database, EvictionPolicy, EvictionResult
from ..exceptions import RefreshCancelled
from ..ingestion import FeedClient, normalize_feed
from ..models import Article
from .cancel import CancelToken

logger = logging.getLogger(__name__)


class RefreshResult(BaseModel):
    """Outcome of refreshing one category."""

    category: str = Field(..., description="Refreshed category")
    success: bool = Field(..., description="Whether new data reached the store")
    fetched: int = Field(0, description="Articles returned by the feed")
    stored: int = Field(0, description="Rows upserted")
    skipped: int = Field(0, description="Articles dropped during normalization")
    evicted: int = Field(0, description="Rows removed by eviction")
    cancelled: bool = Field(False, description="Superseded before commit")
    error: Optional[str] = Field(None, description="Error message if failed")


class FeedSynchronizer:
    """Refresh the local cache of a category from the remote feed.

    Network, payload and date problems never escape ``refresh``: the cache
    stays the visible truth and the failure is only reported in the
    result. A failing local store raises ``StoreError``.
    """

    def __init__(
        self,
        client: FeedClient,
        db: Database,
        articles: ArticleStore,
        eviction: EvictionPolicy,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        """Initialize feed synchronizer."""
        self.client = client
        self.db = db
        self.articles = articles
        self.eviction = eviction
        self.clock = clock

    async def refresh(self, category: str, token: Optional[CancelToken] = None) -> RefreshResult:
        """Fetch ``category`` and merge it into the store."""
        if token is None:
            token = CancelToken()

        feed = await self.client.fetch_feed(category)
        if token.cancelled:
            logger.debug("Refresh of %s superseded after fetch", category)
            return RefreshResult(category=category, success=False, cancelled=True)

        if not feed.success:
            logger.warning("Refresh of %s failed, keeping cached rows: %s", category, feed.error)
            return RefreshResult(category=category, success=False, error=feed.error)

        articles, skipped = normalize_feed(feed.articles, category, self.clock())

        try:
            stored, eviction = await asyncio.to_thread(self._write, category, articles, token)
        except RefreshCancelled:
            logger.debug("Refresh of %s superseded, write rolled back", category)
            return RefreshResult(
                category=category,
                success=False,
                cancelled=True,
                fetched=feed.item_count,
            )

        logger.info(
            "Refreshed %s: %d fetched, %d stored, %d evicted",
            category,
            feed.item_count,
            stored,
            eviction.deleted,
        )
        return RefreshResult(
            category=category,
            success=True,
            fetched=feed.item_count,
            stored=stored,
            skipped=skipped,
            evicted=eviction.deleted,
        )

    def _write(
        self,
        category: str,
        articles: List[Article],
        token: CancelToken,
    ) -> Tuple[int, EvictionResult]:
        """Upsert then evict in one transaction; roll back if superseded."""
        with self.db.transaction("articles", guard=token.commit_guard):
            token.raise_if_cancelled()
            stored = self.articles.upsert(articles)
            eviction = self.eviction.evict(category)
        return stored, eviction
