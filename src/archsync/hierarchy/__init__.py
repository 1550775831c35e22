"""Hierarchy loading exports."""

from archsync.hierarchy.loader import build_hierarchy, load_hierarchy, parse_hierarchy

__all__ = ["build_hierarchy", "load_hierarchy", "parse_hierarchy"]
