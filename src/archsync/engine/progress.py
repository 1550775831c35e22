"""Progress reporting protocol for the sync engine.

The engine emits one ``SyncEvent`` at the point each operation completes or
fails; consumers (the server's event stream, the CLI's Rich display)
implement ``SyncProgress`` to forward or render them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from archsync.contracts.events import SyncEvent


class SyncProgress(ABC):
    """Observer interface for sync events."""

    @abstractmethod
    def emit(self, event: SyncEvent) -> None:
        """Deliver *event*; called in emission order from the engine's task."""
        ...  # pragma: no cover


class NullSyncProgress(SyncProgress):
    """No-op implementation used when nobody is listening."""

    def emit(self, event: SyncEvent) -> None:
        pass
