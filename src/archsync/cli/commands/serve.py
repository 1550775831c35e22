"""Serve command: run the HTTP sync server under uvicorn."""

from __future__ import annotations

import argparse

import uvicorn

from archsync.server import create_app


def run_serve(args: argparse.Namespace) -> None:
    import archsync.cli as cli

    config = cli.load_config(args.config)
    app = create_app(cli.ArchSync.from_config(config))
    uvicorn.run(app, host=args.host, port=args.port, log_level="debug" if args.verbose else "info")


__all__ = ["run_serve"]
