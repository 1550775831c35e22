"""Sync request, summary and outcome contracts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from archsync.contracts.history import RunStatus
from archsync.contracts.hierarchy import HierarchyNode, ItemType


class TypeSummary(BaseModel):
    total: int = 0
    created: int = 0
    failed: int = 0


class SyncSummary(BaseModel):
    """Aggregate outcome counts reported by ``sync:complete``.

    ``total`` counts attempted items only; ``skipped`` counts descendants of
    failed items, which are never attempted.
    """

    total: int = 0
    created: int = 0
    failed: int = 0
    skipped: int = 0
    epics: TypeSummary = Field(default_factory=TypeSummary)
    features: TypeSummary = Field(default_factory=TypeSummary)
    user_stories: TypeSummary = Field(default_factory=TypeSummary)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def for_type(self, item_type: ItemType) -> TypeSummary:
        if item_type == ItemType.EPIC:
            return self.epics
        if item_type == ItemType.FEATURE:
            return self.features
        return self.user_stories

    def record(self, item_type: ItemType, *, created: bool) -> None:
        bucket = self.for_type(item_type)
        bucket.total += 1
        self.total += 1
        if created:
            bucket.created += 1
            self.created += 1
        else:
            bucket.failed += 1
            self.failed += 1


class SyncRequest(BaseModel):
    """One sync invocation: target project, hierarchy roots and options."""

    project: str = Field(min_length=1)
    hierarchy: list[HierarchyNode]
    overwrite: bool = False
    mapping_config_id: str | None = None
    process_template_name: str | None = None
    target_config_id: str | None = None
    source_config_id: str | None = None

    model_config = {"frozen": True}


class SyncOutcome(BaseModel):
    run_id: str | None
    status: RunStatus
    summary: SyncSummary
    total_items: int
    deleted: int = 0
    error_message: str | None = None


class WorkItemCheck(BaseModel):
    """Existing work items in a project, as reported by the check operation."""

    has_work_items: bool
    count: int
    work_item_ids: list[int] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
