"""Exception hierarchy for archsync."""

from __future__ import annotations


class ArchSyncError(Exception):
    """Base exception for all archsync errors."""


class ConfigError(ArchSyncError):
    """Configuration loading or validation failure."""


class HierarchyValidationError(ArchSyncError):
    """Incoming hierarchy payload is malformed or empty."""


class ProviderError(ArchSyncError):
    """Base target-platform operation failure."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ProviderError):
    """Authentication/authorization failure."""


class ProviderConnectionError(ProviderError):
    """Target platform could not be reached at all."""


class MappingStoreError(ArchSyncError):
    """Mapping rule-set catalog could not be read."""


class HistoryStoreError(ArchSyncError):
    """Sync history persistence failure."""


class SyncError(ArchSyncError):
    """Engine-level synchronization failure."""


class OverwriteError(SyncError):
    """Deleting existing work items before creation failed."""

    def __init__(self, message: str, *, deleted: int = 0, total: int = 0) -> None:
        super().__init__(message)
        self.deleted = deleted
        self.total = total
