"""Events sent from presentation code to the coordinators."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CategorySelected:
    category: str


@dataclass(frozen=True)
class SearchQueryChanged:
    search_query: str


@dataclass(frozen=True)
class BookmarkToggled:
    article_id: str


@dataclass(frozen=True)
class RetryClicked:
    pass


@dataclass(frozen=True)
class ErrorDismissed:
    pass
