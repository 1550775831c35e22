"""HTTP server exports."""

from archsync.server.app import create_app
from archsync.server.streaming import EventStream, format_sse

__all__ = ["EventStream", "create_app", "format_sse"]
