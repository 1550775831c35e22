"""Sync orchestrator: walks a hierarchy and creates work items parent-before-child."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from archsync.contracts.events import (
    EventPayload,
    ItemCreatedPayload,
    ItemFailedPayload,
    MessagePayload,
    SyncCompletePayload,
    SyncErrorPayload,
    SyncEvent,
    SyncEventType,
)
from archsync.contracts.exceptions import OverwriteError, ProviderConnectionError, SyncError
from archsync.contracts.hierarchy import HierarchyNode, ItemType
from archsync.contracts.history import (
    AuditAction,
    ItemOutcome,
    RunStatus,
    SyncRun,
    can_transition,
    outcome_counters,
)
from archsync.contracts.mapping import MappingRuleSet
from archsync.contracts.sync import SyncOutcome, SyncRequest, SyncSummary
from archsync.contracts.target import CreatedItem, WorkItemTarget
from archsync.engine.deletion import DEFAULT_BATCH_SIZE, ChunkedDeleter
from archsync.engine.progress import NullSyncProgress, SyncProgress
from archsync.engine.utils import child_item_type, count_items, find_epics, iter_descendants, processable_children
from archsync.history.recorder import HistoryRecorder
from archsync.mapping.resolver import MappingResolver
from archsync.mapping.transformer import FieldTransformer
from archsync.utils import utc_now

logger = logging.getLogger(__name__)

_TERMINAL_AUDIT = {
    RunStatus.COMPLETED: AuditAction.SYNC_COMPLETED,
    RunStatus.FAILED: AuditAction.SYNC_FAILED,
    RunStatus.CANCELLED: AuditAction.SYNC_CANCELLED,
}


@dataclass
class _RunState:
    run_id: str | None
    project: str
    started: float
    status: RunStatus = RunStatus.PENDING
    deleted: int = 0
    summary: SyncSummary = field(default_factory=SyncSummary)


class SyncEngine:
    """Runs one sync request end to end.

    Lifecycle: ``pending`` (run record created) -> ``in_progress`` (before any
    deletion or creation) -> ``completed`` | ``failed`` | ``cancelled``.
    Per-item errors are recorded and the walk continues; the
    failed item's descendants are recorded as skipped and never attempted.
    Connectivity loss and overwrite failures fail the run.
    """

    def __init__(
        self,
        target: WorkItemTarget,
        resolver: MappingResolver,
        transformer: FieldTransformer,
        recorder: HistoryRecorder | None = None,
        *,
        progress: SyncProgress | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        permanent_delete: bool = True,
    ) -> None:
        self._target = target
        self._resolver = resolver
        self._transformer = transformer
        self._recorder = recorder or HistoryRecorder()
        self._progress: SyncProgress = progress or NullSyncProgress()
        self._deleter = ChunkedDeleter(
            target,
            progress=self._progress,
            recorder=self._recorder,
            batch_size=batch_size,
            permanent=permanent_delete,
        )

    async def sync(self, request: SyncRequest) -> SyncOutcome:
        total_items = count_items(request.hierarchy)
        run = SyncRun(
            source_config_id=request.source_config_id,
            target_config_id=request.target_config_id,
            project_name=request.project,
            overwrite_mode=request.overwrite,
            total_items=total_items,
        )
        run_id = await self._recorder.create_run(run)
        state = _RunState(run_id=run_id, project=request.project, started=time.monotonic())
        await self._recorder.audit(
            AuditAction.SYNC_STARTED,
            run_id,
            {"project": request.project, "overwrite": request.overwrite, "totalItems": total_items},
        )
        logger.info("Sync %s started for project %s (%d items)", run_id, request.project, total_items)

        try:
            await self._transition(state, RunStatus.IN_PROGRESS, started_at=utc_now())
            if request.overwrite:
                state.deleted = await self._overwrite(state)
            rule_set = await self._resolver.resolve(
                request.mapping_config_id,
                request.process_template_name,
                request.project,
            )
            for epic in find_epics(request.hierarchy):
                await self._process(epic, ItemType.EPIC, None, rule_set, state)
        except asyncio.CancelledError:
            await self._finalize(state, RunStatus.CANCELLED, error="Sync cancelled")
            raise
        except Exception as exc:
            error = str(exc) or exc.__class__.__name__
            logger.error("Sync %s failed: %s", run_id, error, exc_info=not isinstance(exc, OverwriteError))
            await self._finalize(state, RunStatus.FAILED, error=error)
            self._emit(SyncEventType.SYNC_ERROR, SyncErrorPayload(error=error))
            return self._outcome(state, total_items, error)

        await self._finalize(state, RunStatus.COMPLETED)
        self._emit(SyncEventType.SYNC_COMPLETE, SyncCompletePayload(summary=state.summary.model_copy(deep=True)))
        logger.info(
            "Sync %s completed: %d created, %d failed, %d skipped",
            run_id,
            state.summary.created,
            state.summary.failed,
            state.summary.skipped,
        )
        return self._outcome(state, total_items, None)

    async def _overwrite(self, state: _RunState) -> int:
        self._emit(
            SyncEventType.OVERWRITE_STARTED,
            MessagePayload(message="Overwrite mode enabled. Checking for existing work items..."),
        )
        try:
            ids = await self._target.query_item_ids(state.project)
        except Exception as exc:
            self._deleter.report_failure(exc)
            raise OverwriteError(f"Querying existing work items failed: {exc}") from exc
        return await self._deleter.delete(state.project, ids, run_id=state.run_id)

    async def _process(
        self,
        node: HierarchyNode,
        item_type: ItemType,
        parent_id: str | None,
        rule_set: MappingRuleSet,
        state: _RunState,
    ) -> None:
        try:
            patch = self._transformer.apply(node, item_type, rule_set, parent_id)
            created = await self._target.create_item(state.project, item_type, patch)
        except (ProviderConnectionError, asyncio.CancelledError):
            raise
        except Exception as exc:
            await self._record_failure(node, item_type, exc, state)
            return

        await self._record_success(node, item_type, created, state)
        child_type = child_item_type(item_type)
        if child_type is None:
            return
        for child in processable_children(node, item_type):
            await self._process(child, child_type, created.id, rule_set, state)

    async def _record_success(
        self,
        node: HierarchyNode,
        item_type: ItemType,
        created: CreatedItem,
        state: _RunState,
    ) -> None:
        state.summary.record(item_type, created=True)
        self._emit(
            SyncEventType.created(item_type),
            ItemCreatedPayload(source_id=node.id, name=node.name, target_id=created.id, target_url=created.url),
        )
        await self._recorder.record_item(
            state.run_id, node=node, item_type=item_type, outcome=ItemOutcome.CREATED, created=created
        )
        await self._recorder.increment_counters(state.run_id, outcome_counters(item_type, ItemOutcome.CREATED))

    async def _record_failure(
        self,
        node: HierarchyNode,
        item_type: ItemType,
        error: Exception,
        state: _RunState,
    ) -> None:
        message = str(error) or error.__class__.__name__
        logger.warning("Creating %s %s (%s) failed: %s", item_type.value, node.id, node.name, message)
        state.summary.record(item_type, created=False)
        self._emit(
            SyncEventType.failed(item_type),
            ItemFailedPayload(source_id=node.id, name=node.name, error=message),
        )
        await self._recorder.record_item(
            state.run_id, node=node, item_type=item_type, outcome=ItemOutcome.FAILED, error=message
        )
        await self._recorder.increment_counters(state.run_id, outcome_counters(item_type, ItemOutcome.FAILED))

        for descendant, descendant_type in iter_descendants(node, item_type):
            state.summary.skipped += 1
            await self._recorder.record_item(
                state.run_id,
                node=descendant,
                item_type=descendant_type,
                outcome=ItemOutcome.SKIPPED,
                error=f"Parent {item_type.value} {node.id} was not created",
            )

    async def _transition(self, state: _RunState, status: RunStatus, **changes: Any) -> None:
        if not can_transition(state.status, status):
            raise SyncError(f"Invalid sync run transition: {state.status.value} -> {status.value}")
        state.status = status
        await self._recorder.update_run(state.run_id, status=status, **changes)

    async def _finalize(self, state: _RunState, status: RunStatus, *, error: str | None = None) -> None:
        duration_ms = int((time.monotonic() - state.started) * 1000)
        changes: dict[str, Any] = {"completed_at": utc_now(), "duration_ms": duration_ms}
        if error is not None:
            changes["error_message"] = error
        await self._transition(state, status, **changes)
        await self._recorder.audit(
            _TERMINAL_AUDIT[status],
            state.run_id,
            {
                "project": state.project,
                "durationMs": duration_ms,
                "deleted": state.deleted,
                "summary": state.summary.model_dump(by_alias=True),
                "error": error,
            },
        )

    def _emit(self, event_type: SyncEventType, payload: EventPayload) -> None:
        self._progress.emit(SyncEvent(type=event_type, payload=payload))

    def _outcome(self, state: _RunState, total_items: int, error: str | None) -> SyncOutcome:
        return SyncOutcome(
            run_id=state.run_id,
            status=state.status,
            summary=state.summary.model_copy(deep=True),
            total_items=total_items,
            deleted=state.deleted,
            error_message=error,
        )
