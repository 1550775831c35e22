from __future__ import annotations

from datetime import UTC, datetime

from archsync.contracts.history import AuditAction, AuditEntry, RunStatus, SyncRun
from archsync.history.stats import summarize_audit, summarize_runs


def _run(status: RunStatus, duration_ms: int | None = None, created: int = 0, failed: int = 0) -> SyncRun:
    return SyncRun(
        project_name="Contoso", status=status, duration_ms=duration_ms, items_created=created, items_failed=failed
    )


def test_summarize_runs() -> None:
    stats = summarize_runs(
        [
            _run(RunStatus.COMPLETED, 1000, created=3),
            _run(RunStatus.COMPLETED, 2000, created=1, failed=1),
            _run(RunStatus.CANCELLED),
            _run(RunStatus.IN_PROGRESS),
        ]
    )

    assert stats.total_syncs == 4
    assert (stats.completed_syncs, stats.failed_syncs, stats.cancelled_syncs) == (2, 0, 1)
    assert stats.success_rate == 50.0
    assert stats.average_duration_ms == 1500
    assert (stats.total_items_created, stats.total_items_failed) == (4, 1)


def test_summarize_no_runs() -> None:
    stats = summarize_runs([])

    assert stats.total_syncs == 0
    assert stats.success_rate == 0.0
    assert stats.average_duration_ms == 0


def test_summarize_audit_counts_today_in_utc() -> None:
    now = datetime(2024, 5, 2, 9, 0, tzinfo=UTC)
    entries = [
        AuditEntry(action=AuditAction.SYNC_STARTED, created_at=datetime(2024, 5, 2, 0, 0, tzinfo=UTC)),
        AuditEntry(action=AuditAction.SYNC_COMPLETED, created_at=datetime(2024, 5, 2, 0, 1, tzinfo=UTC)),
        AuditEntry(action=AuditAction.SYNC_STARTED, created_at=datetime(2024, 5, 1, 23, 59, tzinfo=UTC)),
    ]

    stats = summarize_audit(entries, now=now)

    assert stats.total_events == 3
    assert stats.events_today == 2
    assert stats.action_counts == {"sync_started": 2, "sync_completed": 1}
