"""FastAPI application: streaming work-item sync plus history reads."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from archsync.contracts.exceptions import (
    AuthenticationError,
    ConfigError,
    HierarchyValidationError,
    HistoryStoreError,
    ProviderError,
)
from archsync.contracts.hierarchy import ItemType
from archsync.contracts.history import AuditAction, AuditFilter, HistoryPage, ItemOutcome, RunFilter, RunStatus
from archsync.contracts.sync import SyncRequest
from archsync.hierarchy import parse_hierarchy
from archsync.sdk import ArchSync
from archsync.server.streaming import SSE_HEADERS, EventStream, feed_stream

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sync"])


class CreateWorkItemsRequest(BaseModel):
    epics: list[dict[str, Any]] | None = None
    mapping_config_id: str | None = Field(default=None, alias="mappingConfigId")

    model_config = ConfigDict(populate_by_name=True)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _sdk(request: Request) -> ArchSync:
    return request.app.state.sdk


def _spawn(request: Request, coro: Any) -> asyncio.Task[None]:
    tasks: set[asyncio.Task[None]] = request.app.state.tasks
    task = asyncio.create_task(coro)
    tasks.add(task)
    task.add_done_callback(tasks.discard)
    return task


@router.post("/azure-devops/projects/{project}/workitems")
async def create_work_items(
    project: str,
    request: Request,
    body: CreateWorkItemsRequest | None = None,
    config_id: str | None = Query(default=None, alias="configId"),
    source_config_id: str | None = Query(default=None, alias="sourceConfigId"),
    overwrite: bool = Query(default=False),
):
    """Sync a hierarchy into *project*, streaming progress as server-sent events.

    Validation and config lookup failures are answered with JSON before the
    stream opens. Once streaming, the run continues even if the client goes away.
    """
    sdk = _sdk(request)
    if not project.strip():
        return _error(400, "Project parameter is required and must be a non-empty string")
    if body is None or not body.epics:
        return _error(400, "epics array is required and must not be empty")
    try:
        hierarchy = parse_hierarchy(body.epics)
    except HierarchyValidationError as exc:
        return _error(400, str(exc))
    try:
        target_config = sdk.target_config(config_id)
        sdk.config.active_source(source_config_id)
    except ConfigError as exc:
        return _error(404, str(exc))

    sync_request = SyncRequest(
        project=project,
        hierarchy=hierarchy,
        overwrite=overwrite,
        mapping_config_id=body.mapping_config_id,
        target_config_id=target_config.id,
        source_config_id=source_config_id,
    )
    logger.info("Streaming sync of %d root nodes into %s (overwrite=%s)", len(hierarchy), project, overwrite)

    stream = EventStream()
    _spawn(request, feed_stream(stream, sdk.sync(sync_request, progress=stream)))
    return StreamingResponse(stream.frames(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.get("/azure-devops/projects/{project}/workitems/check")
async def check_work_items(
    project: str,
    request: Request,
    config_id: str | None = Query(default=None, alias="configId"),
):
    """Report whether *project* already contains work items."""
    try:
        result = await _sdk(request).check(project, target_config_id=config_id)
    except ConfigError as exc:
        return _error(404, str(exc))
    except AuthenticationError as exc:
        return _error(401, str(exc))
    except ProviderError as exc:
        logger.error("Work item check for %s failed: %s", project, exc)
        return _error(502, str(exc))
    return {"success": True, "data": result.model_dump(mode="json", by_alias=True)}


def _page(page: HistoryPage[Any]) -> dict[str, Any]:
    return {
        "success": True,
        "data": [record.model_dump(mode="json") for record in page.items],
        "pagination": page.pagination(),
    }


@router.get("/sync-history")
async def list_sync_runs(
    request: Request,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    status: RunStatus | None = Query(default=None),
    source_type: str | None = Query(default=None),
    target_type: str | None = Query(default=None),
    project_name: str | None = Query(default=None),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
):
    filters = RunFilter(
        status=status,
        source_type=source_type,
        target_type=target_type,
        project_name=project_name,
        start_date=start_date,
        end_date=end_date,
    )
    return _page(await _sdk(request).list_runs(limit=limit, offset=offset, filters=filters))


@router.get("/sync-history/stats")
async def sync_run_statistics(
    request: Request,
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
):
    stats = await _sdk(request).run_statistics(RunFilter(start_date=start_date, end_date=end_date))
    return {"success": True, "data": stats.model_dump(mode="json")}


@router.get("/sync-history/{run_id}")
async def get_sync_run(run_id: str, request: Request):
    details = await _sdk(request).get_run(run_id)
    if details is None:
        return _error(404, f"Sync run not found: {run_id}")
    return {"success": True, "data": details.model_dump(mode="json")}


@router.get("/sync-history/{run_id}/items")
async def list_sync_run_items(
    run_id: str,
    request: Request,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    status: ItemOutcome | None = Query(default=None),
    item_type: ItemType | None = Query(default=None),
):
    page = await _sdk(request).list_run_items(run_id, limit=limit, offset=offset, outcome=status, item_type=item_type)
    if page is None:
        return _error(404, f"Sync run not found: {run_id}")
    return _page(page)


@router.get("/audit-logs")
async def list_audit_logs(
    request: Request,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    action: AuditAction | None = Query(default=None, alias="action_type"),
    entity_type: str | None = Query(default=None),
    entity_id: str | None = Query(default=None),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
):
    filters = AuditFilter(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        start_date=start_date,
        end_date=end_date,
    )
    return _page(await _sdk(request).list_audit_entries(limit=limit, offset=offset, filters=filters))


@router.get("/audit-logs/stats")
async def audit_log_statistics(
    request: Request,
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
):
    stats = await _sdk(request).audit_statistics(AuditFilter(start_date=start_date, end_date=end_date))
    return {"success": True, "data": stats.model_dump(mode="json")}


async def _history_unavailable(request: Request, exc: Exception) -> JSONResponse:
    logger.error("History read failed: %s", exc)
    return _error(500, str(exc))


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    pending = list(app.state.tasks)
    if pending:
        logger.info("Waiting for %d running sync(s) to finish", len(pending))
        await asyncio.gather(*pending, return_exceptions=True)


def create_app(sdk: ArchSync) -> FastAPI:
    app = FastAPI(title="archsync", lifespan=_lifespan)
    app.state.sdk = sdk
    app.state.tasks = set()
    app.add_exception_handler(HistoryStoreError, _history_unavailable)
    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
