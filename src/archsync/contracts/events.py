"""Progress event contracts streamed to callers while a sync runs."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from archsync.contracts.hierarchy import ItemType
from archsync.contracts.sync import SyncSummary
from archsync.utils import utc_timestamp


class SyncEventType(StrEnum):
    OVERWRITE_STARTED = "overwrite:started"
    OVERWRITE_DELETING = "overwrite:deleting"
    OVERWRITE_PROGRESS = "overwrite:progress"
    OVERWRITE_DELETED = "overwrite:deleted"
    OVERWRITE_NO_ITEMS = "overwrite:no-items"
    OVERWRITE_ERROR = "overwrite:error"
    EPIC_CREATED = "epic:created"
    EPIC_FAILED = "epic:failed"
    FEATURE_CREATED = "feature:created"
    FEATURE_FAILED = "feature:failed"
    USER_STORY_CREATED = "userstory:created"
    USER_STORY_FAILED = "userstory:failed"
    SYNC_COMPLETE = "sync:complete"
    SYNC_ERROR = "sync:error"

    @property
    def is_terminal(self) -> bool:
        return self in (SyncEventType.SYNC_COMPLETE, SyncEventType.SYNC_ERROR)

    @classmethod
    def created(cls, item_type: ItemType) -> SyncEventType:
        return cls(f"{item_type.event_prefix}:created")

    @classmethod
    def failed(cls, item_type: ItemType) -> SyncEventType:
        return cls(f"{item_type.event_prefix}:failed")


class EventPayload(BaseModel):
    timestamp: str = Field(default_factory=utc_timestamp)

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class MessagePayload(EventPayload):
    message: str


class CountPayload(EventPayload):
    message: str
    count: int


class DeletionProgressPayload(EventPayload):
    message: str
    deleted: int
    total: int
    current_chunk: int
    total_chunks: int


class OverwriteErrorPayload(EventPayload):
    error: str
    message: str


class ItemCreatedPayload(EventPayload):
    source_id: str = Field(alias="ardoqId")
    name: str
    target_id: int | str = Field(alias="azureDevOpsId")
    target_url: str = Field(alias="azureDevOpsUrl")

    @field_validator("target_id", mode="before")
    @classmethod
    def _numeric_work_item_id(cls, value: Any) -> Any:
        # Azure DevOps work item ids are numeric on the wire.
        if isinstance(value, str) and value.isdigit():
            return int(value)
        return value


class ItemFailedPayload(EventPayload):
    source_id: str = Field(alias="ardoqId")
    name: str
    error: str


class SyncCompletePayload(EventPayload):
    summary: SyncSummary


class SyncErrorPayload(EventPayload):
    error: str


class SyncEvent(BaseModel):
    """A typed event plus its payload."""

    type: SyncEventType
    payload: EventPayload

    model_config = {"frozen": True}

    @property
    def data(self) -> dict[str, Any]:
        return self.payload.model_dump(mode="json", by_alias=True)

    def to_wire(self) -> dict[str, Any]:
        return {"type": self.type.value, "data": self.data}
