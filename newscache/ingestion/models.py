"""Data models for the remote feed."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawArticle(BaseModel):
    """Article as returned by the feed endpoint. Every field may be missing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = Field(None, description="Article title")
    author: Optional[str] = Field(None, description="Article author")
    published_at: Optional[str] = Field(None, alias="publishedAt", description="ISO-8601 timestamp")
    url: Optional[str] = Field(None, description="Article URL")
    url_to_image: Optional[str] = Field(None, alias="urlToImage", description="Lead image URL")
    source_name: Optional[str] = Field(None, alias="sourceName", description="Publishing outlet")


class FeedResponse(BaseModel):
    """Body of ``GET /feed``."""

    model_config = ConfigDict(extra="ignore")

    category: Optional[str] = Field(None, description="Category echoed by the server")
    articles: List[RawArticle] = Field(default_factory=list, description="Returned articles")

    @field_validator("articles", mode="before")
    @classmethod
    def null_articles_to_empty(cls, v):
        return [] if v is None else v


class FeedResult(BaseModel):
    """Result of fetching a category feed."""

    category: str = Field(..., description="Requested category")
    success: bool = Field(..., description="Whether fetch was successful")
    articles: List[RawArticle] = Field(default_factory=list, description="Fetched raw articles")
    error: Optional[str] = Field(None, description="Error message if failed")
    item_count: int = Field(0, description="Number of articles fetched")
