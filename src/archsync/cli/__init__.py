"""Command-line interface for archsync."""

from __future__ import annotations

import asyncio as asyncio
import logging as logging

from archsync import ArchSync as ArchSync
from archsync import load_config as load_config
from archsync import load_hierarchy as load_hierarchy
from archsync.cli.app import main as main
from archsync.cli.commands import check as check_command
from archsync.cli.commands import serve as serve_command
from archsync.cli.commands import sync as sync_command
from archsync.cli.parser import build_parser as build_parser

_format_summary = sync_command.format_sync_summary
_format_check_summary = check_command.format_check_summary

_run_sync = sync_command.run_sync
_run_check = check_command.run_check
_run_serve = serve_command.run_serve
