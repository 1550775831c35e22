"""Sync history stores: in-memory and JSON files on disk."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from archsync.contracts.exceptions import HistoryStoreError
from archsync.contracts.history import AuditEntry, AuditFilter, RunFilter, SyncRun, SyncRunItem
from archsync.contracts.stores import HistoryStore
from archsync.utils import utc_now

_ITEMS_ADAPTER = TypeAdapter(list[SyncRunItem])


def _apply_changes(run: SyncRun, changes: dict[str, Any]) -> SyncRun:
    unknown = set(changes) - set(SyncRun.model_fields)
    if unknown:
        raise HistoryStoreError(f"Unknown sync run fields: {', '.join(sorted(unknown))}")
    return run.model_copy(update={**changes, "updated_at": utc_now()})


def _newest_first(runs: Iterable[SyncRun], filters: RunFilter | None) -> list[SyncRun]:
    matching = [run for run in runs if filters is None or filters.matches(run)]
    return sorted(matching, key=lambda run: run.created_at, reverse=True)


def _matching_entries(entries: Iterable[AuditEntry], filters: AuditFilter | None) -> list[AuditEntry]:
    return [entry for entry in entries if filters is None or filters.matches(entry)]


class InMemoryHistoryStore(HistoryStore):
    """Process-local history; lost on restart."""

    def __init__(self) -> None:
        self.runs: dict[str, SyncRun] = {}
        self.items: dict[str, list[SyncRunItem]] = {}
        self.audit_entries: list[AuditEntry] = []

    async def create_run(self, run: SyncRun) -> SyncRun:
        self.runs[run.id] = run
        return run

    async def get_run(self, run_id: str) -> SyncRun | None:
        return self.runs.get(run_id)

    async def update_run(self, run_id: str, changes: dict[str, Any]) -> SyncRun:
        run = self.runs.get(run_id)
        if run is None:
            raise HistoryStoreError(f"Sync run not found: {run_id}")
        updated = _apply_changes(run, changes)
        self.runs[run_id] = updated
        return updated

    async def list_runs(self, filters: RunFilter | None = None) -> list[SyncRun]:
        return _newest_first(self.runs.values(), filters)

    async def create_item(self, item: SyncRunItem) -> SyncRunItem:
        self.items.setdefault(item.run_id, []).append(item)
        return item

    async def list_items(self, run_id: str) -> list[SyncRunItem]:
        return list(self.items.get(run_id, []))

    async def create_audit_entry(self, entry: AuditEntry) -> AuditEntry:
        self.audit_entries.append(entry)
        return entry

    async def list_audit_entries(self, filters: AuditFilter | None = None) -> list[AuditEntry]:
        return _matching_entries(self.audit_entries, filters)


class JsonFileHistoryStore(HistoryStore):
    """History persisted under *root*.

    Layout: ``runs/<run_id>.json``, ``items/<run_id>.json`` (list) and
    ``audit.jsonl``. File I/O runs in worker threads.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)
        self._audit_lock = asyncio.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def _run_path(self, run_id: str) -> Path:
        return self._root / "runs" / f"{run_id}.json"

    def _items_path(self, run_id: str) -> Path:
        return self._root / "items" / f"{run_id}.json"

    def _audit_path(self) -> Path:
        return self._root / "audit.jsonl"

    @staticmethod
    def _write(path: Path, payload: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(path.suffix + ".tmp")
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise HistoryStoreError(f"failed writing history file: {path}") from exc

    @staticmethod
    def _read(path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise HistoryStoreError(f"failed reading history file: {path}") from exc

    async def _save_model(self, path: Path, model: BaseModel) -> None:
        await asyncio.to_thread(self._write, path, model.model_dump_json(indent=2))

    async def _load_run(self, path: Path) -> SyncRun | None:
        raw = await asyncio.to_thread(self._read, path)
        if raw is None:
            return None
        try:
            return SyncRun.model_validate_json(raw)
        except ValidationError as exc:
            raise HistoryStoreError(f"invalid sync run file: {path}") from exc

    async def create_run(self, run: SyncRun) -> SyncRun:
        await self._save_model(self._run_path(run.id), run)
        return run

    async def get_run(self, run_id: str) -> SyncRun | None:
        return await self._load_run(self._run_path(run_id))

    async def update_run(self, run_id: str, changes: dict[str, Any]) -> SyncRun:
        run = await self.get_run(run_id)
        if run is None:
            raise HistoryStoreError(f"Sync run not found: {run_id}")
        updated = _apply_changes(run, changes)
        await self._save_model(self._run_path(run_id), updated)
        return updated

    async def list_runs(self, filters: RunFilter | None = None) -> list[SyncRun]:
        paths = await asyncio.to_thread(lambda: sorted((self._root / "runs").glob("*.json")))
        runs = [run for path in paths if (run := await self._load_run(path)) is not None]
        return _newest_first(runs, filters)

    async def create_item(self, item: SyncRunItem) -> SyncRunItem:
        items = await self.list_items(item.run_id)
        items.append(item)
        payload = _ITEMS_ADAPTER.dump_json(items, indent=2).decode("utf-8")
        await asyncio.to_thread(self._write, self._items_path(item.run_id), payload)
        return item

    async def list_items(self, run_id: str) -> list[SyncRunItem]:
        path = self._items_path(run_id)
        raw = await asyncio.to_thread(self._read, path)
        if raw is None:
            return []
        try:
            return _ITEMS_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            raise HistoryStoreError(f"invalid sync items file: {path}") from exc

    async def create_audit_entry(self, entry: AuditEntry) -> AuditEntry:
        path = self._audit_path()

        def append() -> None:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with path.open("a", encoding="utf-8") as handle:
                    handle.write(entry.model_dump_json() + "\n")
            except OSError as exc:
                raise HistoryStoreError(f"failed writing audit log: {path}") from exc

        async with self._audit_lock:
            await asyncio.to_thread(append)
        return entry

    async def list_audit_entries(self, filters: AuditFilter | None = None) -> list[AuditEntry]:
        raw = await asyncio.to_thread(self._read, self._audit_path())
        if raw is None:
            return []
        try:
            entries = [AuditEntry.model_validate(json.loads(line)) for line in raw.splitlines() if line.strip()]
        except (json.JSONDecodeError, ValidationError) as exc:
            raise HistoryStoreError(f"invalid audit log: {self._audit_path()}") from exc
        return _matching_entries(entries, filters)
