"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("archsync")
    except PackageNotFoundError:
        return "0.0.0"


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default="./archsync.json", help="Path to archsync.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="archsync")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP sync server")
    _add_common(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")

    sync_parser = subparsers.add_parser("sync", help="Sync a hierarchy file into an Azure DevOps project")
    _add_common(sync_parser)
    sync_parser.add_argument("--project", required=True, help="Azure DevOps project name")
    sync_parser.add_argument("--hierarchy", required=True, help="Path to the hierarchy JSON file")
    sync_parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Delete every existing work item in the project before creating",
    )
    sync_parser.add_argument("--mapping-config", default=None, help="Mapping rule set id to use")
    sync_parser.add_argument("--process-template", default=None, help="Process template name for mapping lookup")
    sync_parser.add_argument("--target-config", default=None, help="Target configuration id")
    sync_parser.add_argument("--source-config", default=None, help="Source configuration id recorded on the run")
    sync_parser.add_argument("--dry-run", action="store_true", help="Preview mode; no network calls")

    check_parser = subparsers.add_parser("check", help="Report existing work items in a project")
    _add_common(check_parser)
    check_parser.add_argument("--project", required=True, help="Azure DevOps project name")
    check_parser.add_argument("--target-config", default=None, help="Target configuration id")

    return parser


__all__ = ["build_parser"]
