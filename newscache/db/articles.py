"""Article storage."""

import sqlite3
from typing import Iterable, List, Optional, Sequence

from ..models import Article
from .connection import Database


UPSERT_SQL = """
    INSERT INTO articles (
        articleId, category, title, author, publishedAt, publishedAtMillis,
        url, urlToImage, sourceName, fetchedAt
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT (articleId) DO UPDATE SET
        category = excluded.category,
        title = excluded.title,
        author = excluded.author,
        publishedAt = excluded.publishedAt,
        publishedAtMillis = excluded.publishedAtMillis,
        url = excluded.url,
        urlToImage = excluded.urlToImage,
        sourceName = excluded.sourceName,
        fetchedAt = excluded.fetchedAt
"""

SEARCH_CLAUSE = """
    (
        ? = '' OR
        icontains(title, ?) OR
        icontains(author, ?) OR
        icontains(sourceName, ?)
    )
"""


def row_to_article(row: sqlite3.Row) -> Article:
    """Map an ``articles`` row to the domain model."""
    return Article(
        article_id=row["articleId"],
        category=row["category"],
        title=row["title"],
        author=row["author"],
        published_at=row["publishedAt"],
        published_at_millis=row["publishedAtMillis"],
        url=row["url"],
        image_url=row["urlToImage"],
        source_name=row["sourceName"],
        fetched_at=row["fetchedAt"],
    )


def _article_params(article: Article) -> tuple:
    return (
        article.article_id,
        article.category,
        article.title,
        article.author,
        article.published_at,
        article.published_at_millis,
        article.url,
        article.image_url,
        article.source_name,
        article.fetched_at,
    )


class ArticleStore:
    """Persistent keyed table of cached articles.

    Every method opens its own transaction or joins the one already open
    on the calling thread, so a refresh can group an upsert and an
    eviction into one atomic write.
    """

    def __init__(self, db: Database) -> None:
        """Initialize article storage."""
        self.db = db

    def upsert(self, articles: Iterable[Article]) -> int:
        """
        Insert or replace articles by id.

        The whole row, category tag included, is overwritten by the most
        recent write.

        Returns:
            Number of rows written
        """
        params = [_article_params(article) for article in articles]
        if not params:
            return 0

        with self.db.transaction("articles") as conn:
            conn.executemany(UPSERT_SQL, params)
        return len(params)

    def query_page(
        self,
        category: str,
        search_query: str = "",
        offset: int = 0,
        limit: int = 20,
    ) -> List[Article]:
        """Get one page of a category, newest first, optionally filtered."""
        query = search_query or ""
        with self.db.read() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM articles
                WHERE category = ?
                AND {SEARCH_CLAUSE}
                ORDER BY publishedAtMillis DESC, rowid ASC
                LIMIT ? OFFSET ?
                """,
                (category, query, query, query, query, limit, offset),
            ).fetchall()
        return [row_to_article(row) for row in rows]

    def count(self, category: str, search_query: str = "") -> int:
        """Count rows of a category matching the search filter."""
        query = search_query or ""
        with self.db.read() as conn:
            row = conn.execute(
                f"""
                SELECT COUNT(*) AS total FROM articles
                WHERE category = ?
                AND {SEARCH_CLAUSE}
                """,
                (category, query, query, query, query),
            ).fetchone()
        return row["total"]

    def get(self, article_id: str) -> Optional[Article]:
        """Get a single article by id."""
        with self.db.read() as conn:
            row = conn.execute(
                "SELECT * FROM articles WHERE articleId = ?",
                (article_id,),
            ).fetchone()
        return row_to_article(row) if row else None

    def ids_to_keep(self, category: str, limit: int) -> List[str]:
        """Get the ``limit`` most recent article ids of a category."""
        with self.db.read() as conn:
            rows = conn.execute(
                """
                SELECT articleId FROM articles
                WHERE category = ?
                ORDER BY publishedAtMillis DESC, rowid ASC
                LIMIT ?
                """,
                (category, limit),
            ).fetchall()
        return [row["articleId"] for row in rows]

    def delete_except(self, category: str, keep_ids: Sequence[str]) -> int:
        """
        Delete rows of a category that are neither kept nor bookmarked.

        Returns:
            Number of rows deleted
        """
        keep = list(keep_ids)
        placeholders = ", ".join("?" for _ in keep)
        with self.db.transaction("articles") as conn:
            cur = conn.execute(
                f"""
                DELETE FROM articles
                WHERE category = ?
                AND articleId NOT IN ({placeholders})
                AND articleId NOT IN (SELECT articleId FROM bookmarks)
                """,
                (category, *keep),
            )
            return cur.rowcount
