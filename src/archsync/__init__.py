"""Public API surface for archsync."""

__version__ = "0.1.0"

from archsync.config import load_config
from archsync.contracts.config import ArchSyncConfig, SourceConfig, TargetConfig
from archsync.contracts.events import SyncEvent, SyncEventType
from archsync.contracts.exceptions import (
    ArchSyncError,
    AuthenticationError,
    ConfigError,
    HierarchyValidationError,
    OverwriteError,
    ProviderConnectionError,
    ProviderError,
    SyncError,
)
from archsync.contracts.hierarchy import HierarchyNode, ItemType
from archsync.contracts.history import RunStatus, SyncRun, SyncRunDetails, SyncRunItem
from archsync.contracts.sync import SyncOutcome, SyncRequest, SyncSummary, WorkItemCheck
from archsync.contracts.target import WorkItemTarget
from archsync.engine.progress import SyncProgress
from archsync.hierarchy import build_hierarchy, load_hierarchy, parse_hierarchy
from archsync.sdk import ArchSync

__all__ = [
    "ArchSync",
    "ArchSyncConfig",
    "ArchSyncError",
    "AuthenticationError",
    "ConfigError",
    "HierarchyNode",
    "HierarchyValidationError",
    "ItemType",
    "OverwriteError",
    "ProviderConnectionError",
    "ProviderError",
    "RunStatus",
    "SourceConfig",
    "SyncError",
    "SyncEvent",
    "SyncEventType",
    "SyncOutcome",
    "SyncProgress",
    "SyncRequest",
    "SyncRun",
    "SyncRunDetails",
    "SyncRunItem",
    "SyncSummary",
    "TargetConfig",
    "WorkItemCheck",
    "WorkItemTarget",
    "__version__",
    "build_hierarchy",
    "load_config",
    "load_hierarchy",
    "parse_hierarchy",
]
