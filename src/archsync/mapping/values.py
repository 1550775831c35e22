"""Value conversions applied per target-field semantic."""

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from archsync.contracts.hierarchy import ItemType
from archsync.utils import isoformat_ms

logger = logging.getLogger(__name__)

PRIORITY_FIELD = "Microsoft.VSTS.Common.Priority"
TAGS_FIELD = "System.Tags"
RISK_FIELD = "Custom.Risk"
IDENTITY_FIELDS = frozenset({"System.ChangedBy", "System.AssignedTo"})
MULTI_VALUE_FIELDS = frozenset({TAGS_FIELD})

DEFAULT_PRIORITY = 3

_PRIORITY_KEYWORDS = (
    ("critical", 1),
    ("high", 2),
    ("medium", 3),
    ("med", 3),
    ("low", 4),
)
_RISK_LABELS = {1: "High", 2: "Medium", 3: "Low"}
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class ValueKind(StrEnum):
    PRIORITY = "priority"
    TAGS = "tags"
    DATE = "date"
    IDENTITY = "identity"
    RISK = "risk"
    JSON = "json"
    STRING = "string"
    DEFAULT = "default"


def classify_target_field(target_field: str, item_type: ItemType, hint: str | None = None) -> ValueKind:
    """Pick the conversion for *target_field*; a known *hint* wins."""
    if hint:
        try:
            return ValueKind(hint.strip().lower())
        except ValueError:
            logger.debug("Ignoring unknown transform hint %r for %s", hint, target_field)
    if target_field == PRIORITY_FIELD:
        return ValueKind.PRIORITY
    if target_field in MULTI_VALUE_FIELDS:
        return ValueKind.TAGS
    if "Date" in target_field:
        return ValueKind.DATE
    if target_field in IDENTITY_FIELDS:
        return ValueKind.IDENTITY
    if target_field == RISK_FIELD and item_type == ItemType.USER_STORY:
        return ValueKind.RISK
    return ValueKind.DEFAULT


def transform_value(value: Any, target_field: str, item_type: ItemType, hint: str | None = None) -> Any:
    kind = classify_target_field(target_field, item_type, hint)
    if kind == ValueKind.PRIORITY:
        return convert_priority(value)
    if kind == ValueKind.TAGS:
        return convert_tags(value)
    if kind == ValueKind.DATE:
        return convert_date(value)
    if kind == ValueKind.IDENTITY or kind == ValueKind.STRING:
        return value if isinstance(value, str) else str(value)
    if kind == ValueKind.RISK:
        return convert_risk(value)
    if kind == ValueKind.JSON:
        return value if isinstance(value, str) else _to_json(value)
    return convert_default(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def convert_priority(value: Any) -> int | float:
    """Map a priority to the 1 (highest) .. 4 scale; unknown values become 3.

    In-range numbers pass through unchanged.
    """
    if _is_number(value) and 1 <= value <= 4:
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "2", "3", "4"}:
            return int(lowered)
        for keyword, priority in _PRIORITY_KEYWORDS:
            if keyword in lowered:
                return priority
        match = _LEADING_INT.match(value)
        if match is not None and 1 <= int(match.group(1)) <= 4:
            return int(match.group(1))
    logger.warning("Unable to convert priority value %r, using default %d", value, DEFAULT_PRIORITY)
    return DEFAULT_PRIORITY


def convert_tags(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(tag) for tag in value if tag is not None)
    if isinstance(value, str):
        return value
    return str(value)


def convert_date(value: Any) -> str:
    """Normalize to an ISO-8601 UTC timestamp; unparseable strings pass through."""
    if isinstance(value, datetime):
        return isoformat_ms(value)
    if isinstance(value, date):
        return isoformat_ms(datetime(value.year, value.month, value.day, tzinfo=UTC))
    if isinstance(value, str):
        try:
            return isoformat_ms(datetime.fromisoformat(value.strip()))
        except ValueError:
            return value
    if _is_number(value):
        try:
            return isoformat_ms(datetime.fromtimestamp(value / 1000, tz=UTC))
        except (OverflowError, OSError, ValueError):
            return str(value)
    return str(value)


def convert_risk(value: Any) -> str:
    if _is_number(value) and value in _RISK_LABELS:
        return _RISK_LABELS[int(value)]
    return str(value)


def convert_default(value: Any) -> Any:
    if isinstance(value, (dict, list, tuple)):
        return _to_json(value)
    return value


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), default=str)
