"""Database initialization and schema management."""

import logging

from ..exceptions import StoreError
from .connection import Database

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
-- Articles table, one row per URL-derived article id
CREATE TABLE IF NOT EXISTS articles (
    articleId TEXT NOT NULL PRIMARY KEY,
    category TEXT NOT NULL,
    title TEXT NOT NULL,
    author TEXT NOT NULL,
    publishedAt TEXT NOT NULL,
    publishedAtMillis INTEGER NOT NULL,
    url TEXT NOT NULL,
    urlToImage TEXT,
    sourceName TEXT,
    fetchedAt INTEGER NOT NULL
);

-- Bookmarks table; may reference articles that are not cached yet
CREATE TABLE IF NOT EXISTS bookmarks (
    articleId TEXT NOT NULL PRIMARY KEY,
    bookmarkedAt INTEGER NOT NULL
);

-- Create indexes
CREATE INDEX IF NOT EXISTS index_articles_category ON articles(category);
CREATE INDEX IF NOT EXISTS index_articles_category_published
    ON articles(category, publishedAtMillis);
CREATE UNIQUE INDEX IF NOT EXISTS index_bookmarks_articleId ON bookmarks(articleId);
CREATE INDEX IF NOT EXISTS index_bookmarks_bookmarkedAt ON bookmarks(bookmarkedAt);

-- Deleting an article row removes its bookmark
CREATE TRIGGER IF NOT EXISTS articles_delete_bookmarks AFTER DELETE ON articles
BEGIN
    DELETE FROM bookmarks WHERE articleId = OLD.articleId;
END;
"""


def validate_connection(db: Database) -> bool:
    """Validate database connection."""
    try:
        with db.read() as conn:
            result = conn.execute("SELECT 1 AS ok").fetchone()
            return result is not None and result["ok"] == 1
    except StoreError as e:
        logger.error("Database connection failed: %s", e)
        return False


def init_database(db: Database) -> None:
    """Initialize database schema."""
    try:
        db.executescript(SCHEMA_SQL)
        logger.info("Database schema initialized at %s", db.path)
    except StoreError as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise
