"""Shared CLI formatting helpers."""

from __future__ import annotations


def format_count(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def format_type_breakdown(*, epics: int, features: int, user_stories: int) -> str:
    parts: list[str] = []
    if epics:
        parts.append(format_count(epics, "epic", "epics"))
    if features:
        parts.append(format_count(features, "feature", "features"))
    if user_stories:
        parts.append(format_count(user_stories, "user story", "user stories"))
    return ", ".join(parts) if parts else "none"
