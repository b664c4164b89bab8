"""Background synchronization of the local cache with the remote feed."""

from .cancel import CancelToken
from .synchronizer import FeedSynchronizer, RefreshResult

__all__ = ["CancelToken", "FeedSynchronizer", "RefreshResult"]
