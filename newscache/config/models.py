"""Configuration models."""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


DEFAULT_CATEGORIES = [
    "general",
    "business",
    "entertainment",
    "health",
    "science",
    "sports",
    "technology",
]


class DatabaseConfig(BaseModel):
    """SQLite database configuration."""

    path: str = Field("~/.local/share/newscache/news.db", description="SQLite database file")
    wal: bool = Field(True, description="Enable write-ahead logging for concurrent readers")


class FeedConfig(BaseModel):
    """Remote feed endpoint configuration."""

    base_url: str = Field("http://localhost:8000", description="Base URL of the feed API")
    timeout: float = Field(30.0, description="Request timeout in seconds", gt=0)
    api_key_env: Optional[str] = Field("NEWSCACHE_API_KEY", description="Environment variable for API key")
    api_key: Optional[str] = Field(None, description="API key (prefer api_key_env)")


class CacheConfig(BaseModel):
    """Cache retention configuration."""

    keep_limit: int = Field(100, description="Articles kept per category after eviction", ge=1, le=10000)


class PagingSettings(BaseModel):
    """Paginated view configuration."""

    page_size: int = Field(20, description="Rows loaded per page", ge=1, le=500)
    prefetch_distance: int = Field(10, description="Load next page this close to the end", ge=0)
    initial_load_size: Optional[int] = Field(None, description="Rows in the first load (default 3 pages)", ge=1)


class ConfigModel(BaseModel):
    """Main configuration model."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    paging: PagingSettings = Field(default_factory=PagingSettings)
    categories: List[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    default_category: str = Field("general", description="Category selected on start")

    @model_validator(mode="after")
    def validate_default_category(self) -> "ConfigModel":
        """Validate that the default category is one of the configured ones."""
        if not self.categories:
            raise ValueError("At least one category must be configured")
        if self.default_category not in self.categories:
            raise ValueError(
                f"default_category {self.default_category!r} is not in categories"
            )
        return self
