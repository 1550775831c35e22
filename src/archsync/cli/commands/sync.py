"""Sync command formatting."""

from __future__ import annotations

import argparse

from archsync import RunStatus, SyncOutcome, SyncRequest
from archsync.cli.common import format_count, format_type_breakdown
from archsync.cli.progress.rich import RichSyncProgress
from archsync.engine.utils import count_items


def format_sync_summary(outcome: SyncOutcome, *, project: str, dry_run: bool) -> str:
    mode = "dry-run" if dry_run else "apply"
    heading = "sync complete" if outcome.status == RunStatus.COMPLETED else f"sync {outcome.status.value}"
    summary = outcome.summary

    lines = [
        "",
        f"archsync - {heading} ({mode})",
        "",
        f"  Run ID:    {outcome.run_id or 'not recorded'}",
        f"  Project:   {project}",
        "",
        "  Items:     {} total ({})".format(
            outcome.total_items,
            format_type_breakdown(
                epics=summary.epics.total,
                features=summary.features.total,
                user_stories=summary.user_stories.total,
            ),
        ),
    ]

    if outcome.deleted:
        lines.append(f"  Deleted:   {format_count(outcome.deleted, 'existing item', 'existing items')}")
    if summary.created:
        created_breakdown = format_type_breakdown(
            epics=summary.epics.created,
            features=summary.features.created,
            user_stories=summary.user_stories.created,
        )
        lines.append(f"  Created:   {summary.created} ({created_breakdown})")
    if summary.failed:
        failed_breakdown = format_type_breakdown(
            epics=summary.epics.failed,
            features=summary.features.failed,
            user_stories=summary.user_stories.failed,
        )
        lines.append(f"  Failed:    {summary.failed} ({failed_breakdown})")
    if summary.skipped:
        lines.append(f"  Skipped:   {summary.skipped} (parent not created)")
    if outcome.error_message:
        lines.append(f"  Error:     {outcome.error_message}")

    if dry_run:
        lines.append("")
        lines.append("  [dry-run] No changes were made")

    lines.append("")
    return "\n".join(lines)


async def run_sync(args: argparse.Namespace) -> SyncOutcome:
    import archsync.cli as cli

    config = cli.load_config(args.config)
    hierarchy = cli.load_hierarchy(args.hierarchy)
    request = SyncRequest(
        project=args.project,
        hierarchy=hierarchy,
        overwrite=args.overwrite,
        mapping_config_id=args.mapping_config,
        process_template_name=args.process_template,
        target_config_id=args.target_config,
        source_config_id=args.source_config,
    )

    if not args.verbose:
        with RichSyncProgress(total_items=count_items(hierarchy)) as progress:
            sdk = cli.ArchSync.from_config(config, progress=progress, dry_run=args.dry_run)
            outcome = await sdk.sync(request)
    else:
        sdk = cli.ArchSync.from_config(config, dry_run=args.dry_run)
        outcome = await sdk.sync(request)

    print(cli._format_summary(outcome, project=args.project, dry_run=args.dry_run))
    return outcome


__all__ = ["format_sync_summary", "run_sync"]
