"""Best-effort sync history writes."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from archsync.contracts.hierarchy import HierarchyNode, ItemType
from archsync.contracts.history import AuditAction, AuditEntry, ItemOutcome, SyncRun, SyncRunItem
from archsync.contracts.stores import HistoryStore
from archsync.contracts.target import CreatedItem

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HistoryRecorder:
    """Wraps a ``HistoryStore`` so that no write can fail a sync.

    Every failure is logged with the operation, run id, item id and error,
    then discarded. Writes for a run whose record could not be created
    (``run_id is None``) are skipped.
    """

    def __init__(self, store: HistoryStore | None = None) -> None:
        self._store = store

    @property
    def enabled(self) -> bool:
        return self._store is not None

    async def _guard(
        self,
        operation: str,
        call: Callable[[HistoryStore], Awaitable[T]],
        *,
        run_id: str | None = None,
        item_id: str | None = None,
    ) -> T | None:
        if self._store is None:
            return None
        try:
            return await call(self._store)
        except Exception as exc:
            logger.error(
                "History %s failed (run_id=%s, item_id=%s): %s",
                operation,
                run_id,
                item_id,
                exc,
                exc_info=True,
            )
            return None

    async def create_run(self, run: SyncRun) -> str | None:
        created = await self._guard("create_run", lambda store: store.create_run(run), run_id=run.id)
        return created.id if created is not None else None

    async def update_run(self, run_id: str | None, **changes: Any) -> None:
        if run_id is None:
            logger.debug("Skipping run update without a run record: %s", sorted(changes))
            return
        await self._guard("update_run", lambda store: store.update_run(run_id, changes), run_id=run_id)

    async def increment_counters(self, run_id: str | None, increments: dict[str, int]) -> None:
        if run_id is None or not increments:
            return
        await self._guard(
            "increment_counters",
            lambda store: store.increment_run_counters(run_id, increments),
            run_id=run_id,
        )

    async def record_item(
        self,
        run_id: str | None,
        *,
        node: HierarchyNode,
        item_type: ItemType,
        outcome: ItemOutcome,
        created: CreatedItem | None = None,
        error: str | None = None,
    ) -> None:
        if run_id is None:
            return
        item = SyncRunItem(
            run_id=run_id,
            source_id=node.id,
            name=node.name,
            item_type=item_type,
            outcome=outcome,
            target_id=created.id if created is not None else None,
            target_url=created.url if created is not None else None,
            error_message=error,
        )
        await self._guard("record_item", lambda store: store.create_item(item), run_id=run_id, item_id=node.id)

    async def audit(self, action: AuditAction, run_id: str | None, details: dict[str, Any] | None = None) -> None:
        entry = AuditEntry(action=action, entity_id=run_id, details=details or {})
        await self._guard("audit", lambda store: store.create_audit_entry(entry), run_id=run_id)
