"""Persistence contracts for mapping rule sets and sync history."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from archsync.contracts.exceptions import HistoryStoreError
from archsync.contracts.history import AuditEntry, AuditFilter, RunFilter, SyncRun, SyncRunItem
from archsync.contracts.mapping import MappingRuleSet


class MappingStore(ABC):
    @abstractmethod
    async def get_rule_set(self, rule_set_id: str) -> MappingRuleSet | None: ...

    @abstractmethod
    async def get_project_default(self, project_id: str) -> MappingRuleSet | None: ...

    @abstractmethod
    async def get_template(self, process_template_name: str) -> MappingRuleSet | None: ...


class HistoryStore(ABC):
    """Single-row reads and writes keyed by run id or item id."""

    @abstractmethod
    async def create_run(self, run: SyncRun) -> SyncRun: ...

    @abstractmethod
    async def get_run(self, run_id: str) -> SyncRun | None: ...

    @abstractmethod
    async def update_run(self, run_id: str, changes: dict[str, Any]) -> SyncRun: ...

    @abstractmethod
    async def list_runs(self, filters: RunFilter | None = None) -> list[SyncRun]:
        """Every matching run, newest first."""
        ...

    @abstractmethod
    async def create_item(self, item: SyncRunItem) -> SyncRunItem: ...

    @abstractmethod
    async def list_items(self, run_id: str) -> list[SyncRunItem]: ...

    @abstractmethod
    async def create_audit_entry(self, entry: AuditEntry) -> AuditEntry: ...

    @abstractmethod
    async def list_audit_entries(self, filters: AuditFilter | None = None) -> list[AuditEntry]:
        """Every matching entry in write order."""
        ...

    async def increment_run_counters(self, run_id: str, increments: dict[str, int]) -> SyncRun:
        """Read the current counters, add, and write back.

        Not atomic: two writers incrementing the same run can lose updates.
        """
        run = await self.get_run(run_id)
        if run is None:
            raise HistoryStoreError(f"Sync run not found: {run_id}")
        changes = {name: getattr(run, name) + delta for name, delta in increments.items()}
        return await self.update_run(run_id, changes)
