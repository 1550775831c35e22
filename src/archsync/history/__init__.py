"""Sync history module exports."""

from archsync.history.recorder import HistoryRecorder
from archsync.history.store import InMemoryHistoryStore, JsonFileHistoryStore

__all__ = ["HistoryRecorder", "InMemoryHistoryStore", "JsonFileHistoryStore"]
