"""Bookmark storage."""

from typing import FrozenSet, List, Optional

from ..clock import now_millis
from ..models import Article, Bookmark
from .articles import row_to_article
from .connection import Database
from .live import LiveQuery


class BookmarkStore:
    """Persistent set of article ids kept regardless of category or age."""

    def __init__(self, db: Database) -> None:
        """Initialize bookmark storage."""
        self.db = db

    def add(self, article_id: str, bookmarked_at: Optional[int] = None) -> None:
        """Bookmark an article. An existing bookmark keeps its original time."""
        if bookmarked_at is None:
            bookmarked_at = now_millis()
        with self.db.transaction("bookmarks") as conn:
            conn.execute(
                """
                INSERT INTO bookmarks (articleId, bookmarkedAt)
                VALUES (?, ?)
                ON CONFLICT (articleId) DO NOTHING
                """,
                (article_id, bookmarked_at),
            )

    def remove(self, article_id: str) -> None:
        """Remove a bookmark if present."""
        with self.db.transaction("bookmarks") as conn:
            conn.execute("DELETE FROM bookmarks WHERE articleId = ?", (article_id,))

    def contains(self, article_id: str) -> bool:
        """Check if an article is bookmarked."""
        with self.db.read() as conn:
            row = conn.execute(
                "SELECT EXISTS(SELECT 1 FROM bookmarks WHERE articleId = ?) AS found",
                (article_id,),
            ).fetchone()
        return bool(row["found"])

    def get(self, article_id: str) -> Optional[Bookmark]:
        """Get the bookmark of an article."""
        with self.db.read() as conn:
            row = conn.execute(
                "SELECT * FROM bookmarks WHERE articleId = ?",
                (article_id,),
            ).fetchone()
        if row is None:
            return None
        return Bookmark(article_id=row["articleId"], bookmarked_at=row["bookmarkedAt"])

    def all_ids(self) -> FrozenSet[str]:
        """Get all bookmarked article ids."""
        with self.db.read() as conn:
            rows = conn.execute("SELECT articleId FROM bookmarks").fetchall()
        return frozenset(row["articleId"] for row in rows)

    def match_ids(self, prefix: str, limit: int = 10) -> List[str]:
        """
        Find ids of cached articles or bookmarks that start with ``prefix``.

        Returns:
            Up to ``limit`` distinct ids, sorted
        """
        with self.db.read() as conn:
            rows = conn.execute(
                """
                SELECT articleId FROM articles WHERE substr(articleId, 1, ?) = ?
                UNION
                SELECT articleId FROM bookmarks WHERE substr(articleId, 1, ?) = ?
                ORDER BY articleId
                LIMIT ?
                """,
                (len(prefix), prefix, len(prefix), prefix, limit),
            ).fetchall()
        return [row["articleId"] for row in rows]

    def count(self) -> int:
        with self.db.read() as conn:
            return conn.execute("SELECT COUNT(*) AS total FROM bookmarks").fetchone()["total"]

    def observe_ids(self) -> LiveQuery[FrozenSet[str]]:
        """Live bookmarked-id set. Call ``start()`` on the result."""
        return LiveQuery(self.db, ("bookmarks",), self.all_ids)

    def observe_contains(self, article_id: str) -> LiveQuery[bool]:
        """Live bookmark state of one article. Call ``start()`` on the result."""
        return LiveQuery(self.db, ("bookmarks",), lambda: self.contains(article_id))

    def bookmarked_articles_page(self, offset: int = 0, limit: int = 20) -> List[Article]:
        """
        Get bookmarked articles, most recently bookmarked first.

        Bookmarks whose article is not cached are left out.
        """
        with self.db.read() as conn:
            rows = conn.execute(
                """
                SELECT a.* FROM articles a
                INNER JOIN bookmarks b ON a.articleId = b.articleId
                ORDER BY b.bookmarkedAt DESC, b.rowid DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            ).fetchall()
        return [row_to_article(row) for row in rows]
