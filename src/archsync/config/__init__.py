"""Config module exports."""

from archsync.config.loader import load_config

__all__ = ["load_config"]
