"""Contracts shared by every archsync layer."""

from archsync.contracts.config import ArchSyncConfig, SourceConfig, TargetConfig
from archsync.contracts.events import SyncEvent, SyncEventType
from archsync.contracts.exceptions import (
    ArchSyncError,
    AuthenticationError,
    ConfigError,
    HierarchyValidationError,
    HistoryStoreError,
    MappingStoreError,
    OverwriteError,
    ProviderConnectionError,
    ProviderError,
    SyncError,
)
from archsync.contracts.hierarchy import FieldBag, HierarchyNode, ItemType, NodeType
from archsync.contracts.history import (
    AuditAction,
    AuditEntry,
    AuditFilter,
    AuditStatistics,
    HistoryPage,
    ItemOutcome,
    RunFilter,
    RunStatus,
    SyncRun,
    SyncRunDetails,
    SyncRunItem,
    SyncStatistics,
)
from archsync.contracts.mapping import FieldMapping, MappingCatalog, MappingRuleSet, RuleSetKind
from archsync.contracts.patch import PatchOperation
from archsync.contracts.stores import HistoryStore, MappingStore
from archsync.contracts.sync import SyncOutcome, SyncRequest, SyncSummary, TypeSummary, WorkItemCheck
from archsync.contracts.target import CreatedItem, WorkItemTarget

__all__ = [
    "ArchSyncConfig",
    "ArchSyncError",
    "AuditAction",
    "AuditEntry",
    "AuditFilter",
    "AuditStatistics",
    "AuthenticationError",
    "ConfigError",
    "CreatedItem",
    "FieldBag",
    "FieldMapping",
    "HierarchyNode",
    "HierarchyValidationError",
    "HistoryPage",
    "HistoryStore",
    "HistoryStoreError",
    "ItemOutcome",
    "ItemType",
    "MappingCatalog",
    "MappingRuleSet",
    "MappingStore",
    "MappingStoreError",
    "NodeType",
    "OverwriteError",
    "PatchOperation",
    "ProviderConnectionError",
    "ProviderError",
    "RuleSetKind",
    "RunFilter",
    "RunStatus",
    "SourceConfig",
    "SyncError",
    "SyncEvent",
    "SyncEventType",
    "SyncOutcome",
    "SyncRequest",
    "SyncRun",
    "SyncRunDetails",
    "SyncRunItem",
    "SyncStatistics",
    "SyncSummary",
    "TargetConfig",
    "TypeSummary",
    "WorkItemCheck",
    "WorkItemTarget",
]
