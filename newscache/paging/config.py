"""Paging configuration."""

from dataclasses import dataclass
from typing import Optional

from ..config import PagingSettings


@dataclass(frozen=True)
class PagingConfig:
    """Window sizes for paginated views."""

    page_size: int = 20
    prefetch_distance: int = 10
    initial_load: Optional[int] = None

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError("page_size must be at least 1")
        if self.prefetch_distance < 0:
            raise ValueError("prefetch_distance must not be negative")

    @property
    def initial_load_size(self) -> int:
        """Rows fetched by the first load; three pages unless configured."""
        return self.initial_load or self.page_size * 3

    @classmethod
    def from_settings(cls, settings: PagingSettings) -> "PagingConfig":
        return cls(
            page_size=settings.page_size,
            prefetch_distance=settings.prefetch_distance,
            initial_load=settings.initial_load_size,
        )
