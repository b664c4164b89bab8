"""Local cache synchronization and pagination layer for a news reader."""

__version__ = "0.1.0"
