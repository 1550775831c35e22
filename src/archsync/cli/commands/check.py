"""Check command: report existing work items in a project."""

from __future__ import annotations

import argparse

from archsync import WorkItemCheck

_MAX_LISTED_IDS = 20


def format_check_summary(result: WorkItemCheck, *, project: str) -> str:
    if not result.has_work_items:
        return f"Project {project} has no work items"
    listed = ", ".join(str(item_id) for item_id in result.work_item_ids[:_MAX_LISTED_IDS])
    if result.count > _MAX_LISTED_IDS:
        listed += f", ... ({result.count - _MAX_LISTED_IDS} more)"
    noun = "work item" if result.count == 1 else "work items"
    return f"Project {project} has {result.count} {noun}: {listed}"


async def run_check(args: argparse.Namespace) -> WorkItemCheck:
    import archsync.cli as cli

    config = cli.load_config(args.config)
    sdk = cli.ArchSync.from_config(config)
    result = await sdk.check(args.project, target_config_id=args.target_config)
    print(format_check_summary(result, project=args.project))
    return result


__all__ = ["format_check_summary", "run_check"]
