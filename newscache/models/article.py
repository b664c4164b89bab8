"""Article models for cached rows and their presentation form."""

from typing import Optional

from pydantic import Field

from .base import CacheModel


class Article(CacheModel):
    """Cached article row."""

    article_id: str = Field(..., description="Stable id derived from the article URL")
    category: str = Field(..., description="Category the article was last fetched under")
    title: str = Field(..., description="Article title")
    author: str = Field(..., description="Article author")
    published_at: str = Field("", description="Publication timestamp as received (ISO-8601)")
    published_at_millis: int = Field(..., description="Publication time in epoch millis, used for ordering")
    url: str = Field("", description="Canonical article URL")
    image_url: Optional[str] = Field(None, description="Lead image URL")
    source_name: Optional[str] = Field(None, description="Publishing outlet")
    fetched_at: int = Field(..., description="Local insertion/update time in epoch millis")


class ArticleView(CacheModel):
    """Article as handed to presentation code, annotated with bookmark state."""

    id: str
    title: str
    author: Optional[str] = None
    published_date: int = Field(..., description="Publication time in epoch millis")
    image_url: Optional[str] = None
    article_url: str
    is_bookmarked: bool = False

    @classmethod
    def from_article(cls, article: Article, is_bookmarked: bool) -> "ArticleView":
        """Build the presentation form of a cached row."""
        return cls(
            id=article.article_id,
            title=article.title,
            author=article.author or "Unknown",
            published_date=article.published_at_millis,
            image_url=article.image_url or None,
            article_url=article.url,
            is_bookmarked=is_bookmarked,
        )
