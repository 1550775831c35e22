"""Engine module exports."""

from archsync.engine.deletion import ChunkedDeleter
from archsync.engine.engine import SyncEngine
from archsync.engine.progress import NullSyncProgress, SyncProgress

__all__ = ["ChunkedDeleter", "NullSyncProgress", "SyncEngine", "SyncProgress"]
