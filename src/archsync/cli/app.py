"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from archsync import (
    AuthenticationError,
    ConfigError,
    HierarchyValidationError,
    ProviderError,
    RunStatus,
    SyncError,
)


def main(argv: list[str] | None = None) -> int:
    import archsync.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        if args.command == "serve":
            cli._run_serve(args)
        elif args.command == "sync":
            outcome = cli.asyncio.run(cli._run_sync(args))
            if outcome.status == RunStatus.FAILED:
                return 5
        elif args.command == "check":
            cli.asyncio.run(cli._run_check(args))
        return 0
    except (ConfigError, HierarchyValidationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except (AuthenticationError, ProviderError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except SyncError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
