"""SDK composition root for archsync."""

from __future__ import annotations

import logging

from archsync.auth import create_token_resolver
from archsync.contracts.config import ArchSyncConfig, TargetConfig
from archsync.contracts.exceptions import ConfigError
from archsync.contracts.hierarchy import ItemType
from archsync.contracts.history import (
    AuditEntry,
    AuditFilter,
    AuditStatistics,
    HistoryPage,
    ItemOutcome,
    RunFilter,
    SyncRun,
    SyncRunDetails,
    SyncRunItem,
    SyncStatistics,
)
from archsync.contracts.stores import HistoryStore, MappingStore
from archsync.contracts.sync import SyncOutcome, SyncRequest, WorkItemCheck
from archsync.contracts.target import WorkItemTarget
from archsync.engine import SyncEngine
from archsync.engine.progress import SyncProgress
from archsync.history import HistoryRecorder, InMemoryHistoryStore, JsonFileHistoryStore
from archsync.history.stats import summarize_audit, summarize_runs
from archsync.mapping import CatalogMappingStore, FieldTransformer, MappingResolver
from archsync.targets.factory import create_target

logger = logging.getLogger(__name__)


class ArchSync:
    """archsync SDK public API.

    History and mapping stores live as long as the SDK instance; a fresh
    target, resolver and engine are built for every sync.
    """

    def __init__(
        self,
        *,
        config: ArchSyncConfig,
        history_store: HistoryStore | None = None,
        mapping_store: MappingStore | None = None,
        target: WorkItemTarget | None = None,
        progress: SyncProgress | None = None,
        dry_run: bool = False,
    ) -> None:
        self._config = config
        self._history_store = history_store
        self._mapping_store = mapping_store
        self._target = target
        self._progress = progress
        self._dry_run = dry_run

    @classmethod
    def from_config(
        cls,
        config: ArchSyncConfig,
        *,
        progress: SyncProgress | None = None,
        dry_run: bool = False,
    ) -> ArchSync:
        history_store: HistoryStore
        if config.history_path is not None:
            history_store = JsonFileHistoryStore(config.history_path)
        else:
            history_store = InMemoryHistoryStore()
        mapping_store = (
            CatalogMappingStore.from_path(config.mapping_catalog_path)
            if config.mapping_catalog_path is not None
            else None
        )
        return cls(
            config=config,
            history_store=history_store,
            mapping_store=mapping_store,
            progress=progress,
            dry_run=dry_run,
        )

    @property
    def config(self) -> ArchSyncConfig:
        return self._config

    def target_config(self, target_config_id: str | None = None) -> TargetConfig:
        """Raises ``ConfigError`` for an unknown id."""
        return self._config.active_target(target_config_id)

    async def sync(self, request: SyncRequest, *, progress: SyncProgress | None = None) -> SyncOutcome:
        target_config = self.target_config(request.target_config_id)
        source_config = self._config.active_source(request.source_config_id)
        request = request.model_copy(
            update={
                "target_config_id": target_config.id,
                "source_config_id": source_config.id if source_config is not None else None,
            }
        )

        target = await self._resolve_target(target_config)
        async with target:
            engine = SyncEngine(
                target,
                MappingResolver(self._mapping_store, target),
                FieldTransformer(work_item_url=target.work_item_url),
                HistoryRecorder(self._history_store),
                progress=progress or self._progress,
                batch_size=self._config.batch_size,
                permanent_delete=self._config.permanent_delete,
            )
            return await engine.sync(request)

    async def check(self, project: str, *, target_config_id: str | None = None) -> WorkItemCheck:
        """Report the work items that already exist in *project*."""
        target = await self._resolve_target(self.target_config(target_config_id))
        async with target:
            ids = await target.query_item_ids(project)
        return WorkItemCheck(has_work_items=bool(ids), count=len(ids), work_item_ids=ids)

    async def list_runs(
        self, *, limit: int = 50, offset: int = 0, filters: RunFilter | None = None
    ) -> HistoryPage[SyncRun]:
        """Newest-first page of recorded runs matching *filters*."""
        runs = await self._history_store.list_runs(filters) if self._history_store is not None else []
        return HistoryPage[SyncRun].from_records(runs, limit=limit, offset=offset)

    async def get_run(self, run_id: str) -> SyncRunDetails | None:
        if self._history_store is None:
            return None
        run = await self._history_store.get_run(run_id)
        if run is None:
            return None
        return SyncRunDetails(run=run, items=await self._history_store.list_items(run_id))

    async def list_run_items(
        self,
        run_id: str,
        *,
        limit: int = 100,
        offset: int = 0,
        outcome: ItemOutcome | None = None,
        item_type: ItemType | None = None,
    ) -> HistoryPage[SyncRunItem] | None:
        """Per-item records of one run in processing order; ``None`` for an unknown run."""
        if self._history_store is None or await self._history_store.get_run(run_id) is None:
            return None
        items = [
            item
            for item in await self._history_store.list_items(run_id)
            if (outcome is None or item.outcome == outcome) and (item_type is None or item.item_type == item_type)
        ]
        return HistoryPage[SyncRunItem].from_records(items, limit=limit, offset=offset)

    async def run_statistics(self, filters: RunFilter | None = None) -> SyncStatistics:
        if self._history_store is None:
            return SyncStatistics()
        return summarize_runs(await self._history_store.list_runs(filters))

    async def list_audit_entries(
        self, *, limit: int = 50, offset: int = 0, filters: AuditFilter | None = None
    ) -> HistoryPage[AuditEntry]:
        """Newest-first page of audit entries matching *filters*."""
        if self._history_store is None:
            return HistoryPage[AuditEntry](limit=limit, offset=offset)
        entries = await self._history_store.list_audit_entries(filters)
        entries.sort(key=lambda entry: entry.created_at, reverse=True)
        return HistoryPage[AuditEntry].from_records(entries, limit=limit, offset=offset)

    async def audit_statistics(self, filters: AuditFilter | None = None) -> AuditStatistics:
        if self._history_store is None:
            return AuditStatistics()
        return summarize_audit(await self._history_store.list_audit_entries(filters))

    async def _resolve_target(self, target_config: TargetConfig) -> WorkItemTarget:
        if self._target is not None:
            return self._target
        if self._dry_run:
            logger.debug("Using dry-run target for %s", target_config.organization)
            return create_target("dry-run", organization=target_config.organization)

        token = await create_token_resolver(target_config).resolve()
        try:
            return create_target(
                "azure_devops",
                organization=target_config.organization,
                token=token,
                base_url=target_config.base_url,
                max_retries=self._config.max_retries,
                timeout=self._config.request_timeout,
            )
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
