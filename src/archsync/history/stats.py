"""Aggregate statistics over stored sync runs and audit entries."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, date, datetime

from archsync.contracts.history import AuditEntry, AuditStatistics, RunStatus, SyncRun, SyncStatistics
from archsync.utils import utc_now


def _utc_date(value: datetime) -> date:
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(UTC).date()


def summarize_runs(runs: Iterable[SyncRun]) -> SyncStatistics:
    """Success rate is a percentage of all runs; average duration covers completed runs only."""
    runs = list(runs)
    statuses = Counter(run.status for run in runs)
    completed = [run for run in runs if run.status == RunStatus.COMPLETED]
    success_rate = statuses[RunStatus.COMPLETED] / len(runs) * 100 if runs else 0.0
    average_duration = sum(run.duration_ms or 0 for run in completed) / len(completed) if completed else 0
    return SyncStatistics(
        total_syncs=len(runs),
        completed_syncs=statuses[RunStatus.COMPLETED],
        failed_syncs=statuses[RunStatus.FAILED],
        cancelled_syncs=statuses[RunStatus.CANCELLED],
        success_rate=round(success_rate, 2),
        average_duration_ms=round(average_duration),
        total_items_created=sum(run.items_created for run in runs),
        total_items_failed=sum(run.items_failed for run in runs),
    )


def summarize_audit(entries: Iterable[AuditEntry], *, now: datetime | None = None) -> AuditStatistics:
    """``events_today`` counts entries on the current UTC calendar day."""
    entries = list(entries)
    today = _utc_date(now or utc_now())
    return AuditStatistics(
        total_events=len(entries),
        events_today=sum(1 for entry in entries if _utc_date(entry.created_at) == today),
        action_counts=dict(Counter(entry.action.value for entry in entries)),
    )
