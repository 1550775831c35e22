from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from archsync.contracts.config import ArchSyncConfig
from archsync.contracts.exceptions import HistoryStoreError
from archsync.contracts.hierarchy import ItemType
from archsync.contracts.history import (
    AuditAction,
    AuditEntry,
    ItemOutcome,
    RunFilter,
    RunStatus,
    SyncRun,
    SyncRunItem,
)
from archsync.history.store import InMemoryHistoryStore
from archsync.sdk import ArchSync
from archsync.server import create_app


def _at(day: int, hour: int = 10, minute: int = 0) -> datetime:
    return datetime(2024, 5, day, hour, minute, tzinfo=UTC)


def _run(run_id: str, project: str, status: RunStatus, day: int, **counters: int) -> SyncRun:
    return SyncRun(id=run_id, project_name=project, status=status, created_at=_at(day), updated_at=_at(day), **counters)


def _item(source_id: str, item_type: ItemType, outcome: ItemOutcome) -> SyncRunItem:
    return SyncRunItem(run_id="run-a", source_id=source_id, name=source_id, item_type=item_type, outcome=outcome)


@pytest.fixture
def store() -> InMemoryHistoryStore:
    store = InMemoryHistoryStore()
    for run in (
        _run("run-a", "Contoso", RunStatus.COMPLETED, 1, duration_ms=1000, items_created=4),
        _run("run-b", "Fabrikam", RunStatus.FAILED, 2, items_created=1, items_failed=1),
        _run("run-c", "contoso-east", RunStatus.COMPLETED, 3, duration_ms=3000, items_created=2),
    ):
        store.runs[run.id] = run
    store.items["run-a"] = [
        _item("e1", ItemType.EPIC, ItemOutcome.CREATED),
        _item("f1", ItemType.FEATURE, ItemOutcome.FAILED),
        _item("s1", ItemType.USER_STORY, ItemOutcome.SKIPPED),
    ]
    store.audit_entries = [
        AuditEntry(id="a1", action=AuditAction.SYNC_STARTED, entity_id="run-a", created_at=_at(1)),
        AuditEntry(id="a2", action=AuditAction.SYNC_COMPLETED, entity_id="run-a", created_at=_at(1, minute=1)),
        AuditEntry(id="a3", action=AuditAction.SYNC_FAILED, entity_id="run-b", created_at=_at(2)),
        AuditEntry(id="a4", action=AuditAction.SYNC_CANCELLED, entity_id="run-c"),
    ]
    return store


@pytest.fixture
def client(config: ArchSyncConfig, store: InMemoryHistoryStore) -> Iterator[TestClient]:
    with TestClient(create_app(ArchSync(config=config, history_store=store))) as test_client:
        yield test_client


def _ids(response_body: dict) -> list[str]:
    return [record["id"] for record in response_body["data"]]


class TestListRuns:
    def test_newest_first_with_pagination(self, client: TestClient) -> None:
        body = client.get("/api/sync-history", params={"limit": 2}).json()

        assert body["success"] is True
        assert _ids(body) == ["run-c", "run-b"]
        assert body["pagination"] == {"total": 3, "limit": 2, "offset": 0, "has_more": True}

    @pytest.mark.parametrize(
        ("params", "expected"),
        [
            ({"project_name": "CONTOSO"}, ["run-c", "run-a"]),
            ({"status": "failed"}, ["run-b"]),
            ({"start_date": "2024-05-02T00:00:00Z"}, ["run-c", "run-b"]),
            ({"end_date": "2024-05-01T23:59:59Z"}, ["run-a"]),
            ({"source_type": "ardoq", "target_type": "azure_devops"}, ["run-c", "run-b", "run-a"]),
            ({"target_type": "jira"}, []),
        ],
    )
    def test_filters(self, client: TestClient, params: dict[str, str], expected: list[str]) -> None:
        body = client.get("/api/sync-history", params=params).json()

        assert _ids(body) == expected
        assert body["pagination"]["total"] == len(expected)

    def test_unknown_status_is_rejected(self, client: TestClient) -> None:
        assert client.get("/api/sync-history", params={"status": "bogus"}).status_code == 422

    @pytest.mark.parametrize("params", [{"limit": 0}, {"limit": 500}, {"offset": -1}])
    def test_paging_bounds(self, client: TestClient, params: dict[str, int]) -> None:
        assert client.get("/api/sync-history", params=params).status_code == 422


class TestRunDetails:
    def test_run_with_items(self, client: TestClient) -> None:
        body = client.get("/api/sync-history/run-a").json()

        assert body["data"]["run"]["status"] == "completed"
        assert [item["source_id"] for item in body["data"]["items"]] == ["e1", "f1", "s1"]

    def test_unknown_run(self, client: TestClient) -> None:
        response = client.get("/api/sync-history/missing")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Sync run not found: missing"}

    @pytest.mark.parametrize(
        ("params", "expected"),
        [
            ({}, ["e1", "f1", "s1"]),
            ({"status": "skipped"}, ["s1"]),
            ({"item_type": "feature"}, ["f1"]),
            ({"limit": 1, "offset": 1}, ["f1"]),
        ],
    )
    def test_items(self, client: TestClient, params: dict[str, object], expected: list[str]) -> None:
        body = client.get("/api/sync-history/run-a/items", params=params).json()

        assert [item["source_id"] for item in body["data"]] == expected

    def test_items_pagination(self, client: TestClient) -> None:
        body = client.get("/api/sync-history/run-a/items", params={"limit": 2}).json()

        assert body["pagination"] == {"total": 3, "limit": 2, "offset": 0, "has_more": True}

    def test_items_of_unknown_run(self, client: TestClient) -> None:
        assert client.get("/api/sync-history/missing/items").status_code == 404


class TestRunStatistics:
    def test_all_runs(self, client: TestClient) -> None:
        body = client.get("/api/sync-history/stats").json()

        assert body == {
            "success": True,
            "data": {
                "total_syncs": 3,
                "completed_syncs": 2,
                "failed_syncs": 1,
                "cancelled_syncs": 0,
                "success_rate": 66.67,
                "average_duration_ms": 2000,
                "total_items_created": 7,
                "total_items_failed": 1,
            },
        }

    def test_date_window(self, client: TestClient) -> None:
        data = client.get("/api/sync-history/stats", params={"start_date": "2024-05-02T00:00:00Z"}).json()["data"]

        assert data["total_syncs"] == 2
        assert data["success_rate"] == 50.0
        assert data["average_duration_ms"] == 3000

    def test_no_runs(self, config: ArchSyncConfig) -> None:
        with TestClient(create_app(ArchSync(config=config, history_store=InMemoryHistoryStore()))) as test_client:
            data = test_client.get("/api/sync-history/stats").json()["data"]

        assert data["total_syncs"] == 0
        assert data["success_rate"] == 0.0
        assert data["average_duration_ms"] == 0


class TestAuditLogs:
    def test_newest_first(self, client: TestClient) -> None:
        body = client.get("/api/audit-logs").json()

        assert _ids(body) == ["a4", "a3", "a2", "a1"]
        assert body["pagination"] == {"total": 4, "limit": 50, "offset": 0, "has_more": False}
        assert body["data"][0]["action"] == "sync_cancelled"

    @pytest.mark.parametrize(
        ("params", "expected"),
        [
            ({"action_type": "sync_started"}, ["a1"]),
            ({"entity_id": "run-a"}, ["a2", "a1"]),
            ({"entity_type": "config"}, []),
            ({"start_date": "2024-05-01T10:00:30Z", "end_date": "2024-05-02T23:00:00Z"}, ["a3", "a2"]),
        ],
    )
    def test_filters(self, client: TestClient, params: dict[str, str], expected: list[str]) -> None:
        assert _ids(client.get("/api/audit-logs", params=params).json()) == expected

    def test_statistics(self, client: TestClient) -> None:
        data = client.get("/api/audit-logs/stats").json()["data"]

        assert data["total_events"] == 4
        assert data["events_today"] == 1
        assert data["action_counts"] == {
            "sync_started": 1,
            "sync_completed": 1,
            "sync_failed": 1,
            "sync_cancelled": 1,
        }

    def test_statistics_window(self, client: TestClient) -> None:
        data = client.get("/api/audit-logs/stats", params={"end_date": "2024-05-01T23:59:59Z"}).json()["data"]

        assert data["total_events"] == 2
        assert data["action_counts"] == {"sync_started": 1, "sync_completed": 1}


class _UnreadableStore(InMemoryHistoryStore):
    async def list_runs(self, filters: RunFilter | None = None) -> list[SyncRun]:
        raise HistoryStoreError("invalid sync run file: runs/x.json")


def test_store_read_failure_is_a_server_error(config: ArchSyncConfig) -> None:
    with TestClient(create_app(ArchSync(config=config, history_store=_UnreadableStore()))) as test_client:
        response = test_client.get("/api/sync-history")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "invalid sync run file: runs/x.json"}
