"""Sync history contracts: run records, per-item records and audit entries."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Generic, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from archsync.contracts.hierarchy import ItemType


def _new_id() -> str:
    return uuid4().hex


def _now() -> datetime:
    return datetime.now(UTC)


class RunStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({RunStatus.COMPLETED, RunStatus.FAILED, RunStatus.CANCELLED})

_TRANSITIONS: dict[RunStatus, frozenset[RunStatus]] = {
    RunStatus.PENDING: frozenset({RunStatus.IN_PROGRESS, RunStatus.FAILED, RunStatus.CANCELLED}),
    RunStatus.IN_PROGRESS: frozenset({RunStatus.COMPLETED, RunStatus.FAILED, RunStatus.CANCELLED}),
    RunStatus.COMPLETED: frozenset(),
    RunStatus.FAILED: frozenset(),
    RunStatus.CANCELLED: frozenset(),
}


def can_transition(current: RunStatus, new: RunStatus) -> bool:
    return new in _TRANSITIONS[current]


class ItemOutcome(StrEnum):
    CREATED = "created"
    FAILED = "failed"
    SKIPPED = "skipped"


class AuditAction(StrEnum):
    SYNC_STARTED = "sync_started"
    SYNC_COMPLETED = "sync_completed"
    SYNC_FAILED = "sync_failed"
    SYNC_CANCELLED = "sync_cancelled"


# Counter fields a run record exposes for increments.
RUN_COUNTERS = (
    "items_created",
    "items_failed",
    "epics_created",
    "epics_failed",
    "features_created",
    "features_failed",
    "user_stories_created",
    "user_stories_failed",
    "deletion_count",
)

_TYPE_COUNTER_PREFIX = {
    ItemType.EPIC: "epics",
    ItemType.FEATURE: "features",
    ItemType.USER_STORY: "user_stories",
}


def outcome_counters(item_type: ItemType, outcome: ItemOutcome) -> dict[str, int]:
    """Counter increments for one created/failed item."""
    if outcome == ItemOutcome.SKIPPED:
        return {}
    suffix = outcome.value
    return {f"items_{suffix}": 1, f"{_TYPE_COUNTER_PREFIX[item_type]}_{suffix}": 1}


class SyncRun(BaseModel):
    id: str = Field(default_factory=_new_id)
    source_type: str = "ardoq"
    source_config_id: str | None = None
    target_type: str = "azure_devops"
    target_config_id: str | None = None
    project_name: str
    status: RunStatus = RunStatus.PENDING
    overwrite_mode: bool = False
    total_items: int = 0
    items_created: int = 0
    items_failed: int = 0
    epics_created: int = 0
    epics_failed: int = 0
    features_created: int = 0
    features_failed: int = 0
    user_stories_created: int = 0
    user_stories_failed: int = 0
    deletion_count: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int | None = None
    error_message: str | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class SyncRunItem(BaseModel):
    id: str = Field(default_factory=_new_id)
    run_id: str
    source_id: str
    name: str
    item_type: ItemType
    outcome: ItemOutcome
    target_id: str | None = None
    target_url: str | None = None
    error_message: str | None = None
    created_at: datetime = Field(default_factory=_now)


class AuditEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    action: AuditAction
    entity_type: str = "sync_run"
    entity_id: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_now)


class SyncRunDetails(BaseModel):
    """A run record together with its per-item outcomes."""

    run: SyncRun
    items: list[SyncRunItem] = Field(default_factory=list)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class _DateRange(BaseModel):
    """Inclusive ``created_at`` bounds; naive dates are read as UTC."""

    start_date: datetime | None = None
    end_date: datetime | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("start_date", "end_date")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    def in_range(self, created_at: datetime) -> bool:
        created_at = _as_utc(created_at)
        if self.start_date is not None and created_at < self.start_date:
            return False
        if self.end_date is not None and created_at > self.end_date:
            return False
        return True


class RunFilter(_DateRange):
    status: RunStatus | None = None
    source_type: str | None = None
    target_type: str | None = None
    project_name: str | None = None

    def matches(self, run: SyncRun) -> bool:
        if self.status is not None and run.status != self.status:
            return False
        if self.source_type and run.source_type != self.source_type:
            return False
        if self.target_type and run.target_type != self.target_type:
            return False
        # Project names match as a case-insensitive substring.
        if self.project_name and self.project_name.lower() not in run.project_name.lower():
            return False
        return self.in_range(run.created_at)


class AuditFilter(_DateRange):
    action: AuditAction | None = None
    entity_type: str | None = None
    entity_id: str | None = None

    def matches(self, entry: AuditEntry) -> bool:
        if self.action is not None and entry.action != self.action:
            return False
        if self.entity_type and entry.entity_type != self.entity_type:
            return False
        if self.entity_id and entry.entity_id != self.entity_id:
            return False
        return self.in_range(entry.created_at)


T = TypeVar("T")


class HistoryPage(BaseModel, Generic[T]):
    """One page of history records plus the total number of matches."""

    items: list[T] = Field(default_factory=list)
    total: int = 0
    limit: int = 50
    offset: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total

    @classmethod
    def from_records(cls, records: Sequence[T], *, limit: int, offset: int) -> HistoryPage[T]:
        return cls(items=list(records[offset : offset + limit]), total=len(records), limit=limit, offset=offset)

    def pagination(self) -> dict[str, Any]:
        return {"total": self.total, "limit": self.limit, "offset": self.offset, "has_more": self.has_more}


class SyncStatistics(BaseModel):
    total_syncs: int = 0
    completed_syncs: int = 0
    failed_syncs: int = 0
    cancelled_syncs: int = 0
    success_rate: float = 0.0
    average_duration_ms: int = 0
    total_items_created: int = 0
    total_items_failed: int = 0


class AuditStatistics(BaseModel):
    total_events: int = 0
    events_today: int = 0
    action_counts: dict[str, int] = Field(default_factory=dict)
