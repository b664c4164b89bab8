"""Coarse state published to presentation code."""

from typing import Optional

from pydantic import Field

from .base import CacheModel


class CacheState(CacheModel):
    """Selection and refresh state of the home feed."""

    selected_category: str = Field("general", description="Currently selected category")
    search_query: str = Field("", description="Current search filter")
    is_refreshing: bool = Field(False, description="A background refresh is in flight")
    error_message: Optional[str] = Field(None, description="Last refresh or store error, if any")
