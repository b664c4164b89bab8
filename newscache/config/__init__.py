"""Configuration management for the news cache."""

from .loader import DEFAULT_CONFIG_PATH, Config, load_config, save_config
from .models import (
    DEFAULT_CATEGORIES,
    CacheConfig,
    ConfigModel,
    DatabaseConfig,
    FeedConfig,
    PagingSettings,
)

__all__ = [
    "Config",
    "ConfigModel",
    "CacheConfig",
    "DatabaseConfig",
    "FeedConfig",
    "PagingSettings",
    "DEFAULT_CATEGORIES",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "save_config",
]
