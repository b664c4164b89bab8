"""Coordinators that drive the cache from presentation events."""

from .bookmarks import BookmarksCoordinator
from .events import (
    BookmarkToggled,
    CategorySelected,
    ErrorDismissed,
    RetryClicked,
    SearchQueryChanged,
)
from .home import CacheCoordinator

__all__ = [
    "BookmarksCoordinator",
    "BookmarkToggled",
    "CacheCoordinator",
    "CategorySelected",
    "ErrorDismissed",
    "RetryClicked",
    "SearchQueryChanged",
]
