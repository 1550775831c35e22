from __future__ import annotations

from archsync import RunStatus, SyncOutcome, SyncSummary, WorkItemCheck
from archsync.cli import _format_check_summary, _format_summary
from archsync.cli.common import format_count, format_type_breakdown
from archsync.contracts.hierarchy import ItemType


def _summary(created: list[ItemType], failed: list[ItemType], skipped: int = 0) -> SyncSummary:
    summary = SyncSummary(skipped=skipped)
    for item_type in created:
        summary.record(item_type, created=True)
    for item_type in failed:
        summary.record(item_type, created=False)
    return summary


def test_format_count() -> None:
    assert format_count(1, "epic", "epics") == "1 epic"
    assert format_count(0, "epic", "epics") == "0 epics"


def test_format_type_breakdown() -> None:
    assert format_type_breakdown(epics=1, features=0, user_stories=2) == "1 epic, 2 user stories"
    assert format_type_breakdown(epics=0, features=0, user_stories=0) == "none"


def test_apply_summary_lists_every_outcome() -> None:
    outcome = SyncOutcome(
        run_id="run-1",
        status=RunStatus.COMPLETED,
        summary=_summary([ItemType.EPIC, ItemType.FEATURE], [ItemType.FEATURE], skipped=2),
        total_items=5,
        deleted=12,
    )

    text = _format_summary(outcome, project="Contoso", dry_run=False)

    assert "archsync - sync complete (apply)" in text
    assert "  Run ID:    run-1" in text
    assert "  Project:   Contoso" in text
    assert "  Items:     5 total (1 epic, 2 features)" in text
    assert "  Deleted:   12 existing items" in text
    assert "  Created:   2 (1 epic, 1 feature)" in text
    assert "  Failed:    1 (1 feature)" in text
    assert "  Skipped:   2 (parent not created)" in text
    assert "[dry-run]" not in text


def test_failed_dry_run_summary() -> None:
    outcome = SyncOutcome(
        run_id=None,
        status=RunStatus.FAILED,
        summary=_summary([ItemType.EPIC], []),
        total_items=4,
        error_message="connection refused",
    )

    text = _format_summary(outcome, project="Contoso", dry_run=True)

    assert "archsync - sync failed (dry-run)" in text
    assert "  Run ID:    not recorded" in text
    assert "  Error:     connection refused" in text
    assert "  [dry-run] No changes were made" in text
    assert "Deleted:" not in text
    assert "Failed:" not in text


class TestCheckSummary:
    def test_empty_project(self) -> None:
        result = WorkItemCheck(has_work_items=False, count=0)

        assert _format_check_summary(result, project="Contoso") == "Project Contoso has no work items"

    def test_single_item(self) -> None:
        result = WorkItemCheck(has_work_items=True, count=1, work_item_ids=[7])

        assert _format_check_summary(result, project="Contoso") == "Project Contoso has 1 work item: 7"

    def test_long_lists_are_truncated(self) -> None:
        ids = list(range(1, 26))
        result = WorkItemCheck(has_work_items=True, count=len(ids), work_item_ids=ids)

        text = _format_check_summary(result, project="Contoso")

        assert text.startswith("Project Contoso has 25 work items: 1, 2, 3")
        assert text.endswith("19, 20, ... (5 more)")
