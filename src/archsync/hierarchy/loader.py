"""Hierarchy parsing: nested node trees and flat component lists."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from archsync.contracts.exceptions import HierarchyValidationError
from archsync.contracts.hierarchy import HierarchyNode, NodeType, parse_node_type

_NODES_ADAPTER = TypeAdapter(list[HierarchyNode])

# Declared type -> type its parent component must have.
_PARENT_TYPES: dict[NodeType, NodeType] = {
    NodeType.INITIATIVE: NodeType.DOMAIN,
    NodeType.EPIC: NodeType.INITIATIVE,
    NodeType.FEATURE: NodeType.EPIC,
    NodeType.USER_STORY: NodeType.FEATURE,
}
_BUILD_ORDER = (NodeType.INITIATIVE, NodeType.EPIC, NodeType.FEATURE, NodeType.USER_STORY)


def parse_hierarchy(payload: Any) -> list[HierarchyNode]:
    """Validate a nested list of hierarchy roots; empty input is rejected."""
    if not isinstance(payload, list) or not payload:
        raise HierarchyValidationError("Hierarchy must be a non-empty list of nodes")
    try:
        return _NODES_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise HierarchyValidationError(f"invalid hierarchy: {exc}") from exc


def build_hierarchy(
    components: Sequence[Mapping[str, Any]],
    root_workspace_id: str | None = None,
) -> list[HierarchyNode]:
    """Nest a flat component list (each with a ``parent`` id) under its Domains.

    Domains without a parent, or whose parent is *root_workspace_id*, become
    roots. Every other component must sit under the type above it.
    """
    by_id: dict[str, dict[str, Any]] = {}
    for component in components:
        component_id = component.get("_id", component.get("id"))
        if component_id is None:
            raise HierarchyValidationError("component without an '_id'")
        by_id[str(component_id)] = {**component, "children": []}

    roots = [
        node
        for node in by_id.values()
        if parse_node_type(node.get("type")) == NodeType.DOMAIN
        and (not node.get("parent") or node.get("parent") == root_workspace_id)
    ]

    for node_type in _BUILD_ORDER:
        for node in by_id.values():
            if parse_node_type(node.get("type")) != node_type:
                continue
            parent = by_id.get(str(node.get("parent")))
            parent_type = parse_node_type(parent.get("type")) if parent is not None else None
            if parent is None or parent_type != _PARENT_TYPES[node_type]:
                raise HierarchyValidationError(
                    f"{node_type.value} {node.get('_id', node.get('id'))} cannot have parent "
                    f"{parent_type.value if parent_type else None}"
                )
            parent["children"].append(node)

    return parse_hierarchy(roots)


def load_hierarchy(path: str | Path) -> list[HierarchyNode]:
    """Load a hierarchy file.

    Accepts a list of roots, ``{"epics": [...]}`` or a flat
    ``{"components": [...], "rootWorkspaceId": ...}`` export.
    """
    hierarchy_path = Path(path).expanduser().resolve()
    try:
        payload: Any = json.loads(hierarchy_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise HierarchyValidationError(f"failed reading hierarchy file: {hierarchy_path}") from exc
    except json.JSONDecodeError as exc:
        raise HierarchyValidationError(f"invalid JSON in hierarchy file: {hierarchy_path}") from exc

    if isinstance(payload, dict) and "components" in payload:
        return build_hierarchy(payload["components"], payload.get("rootWorkspaceId"))
    if isinstance(payload, dict):
        payload = payload.get("epics")
    return parse_hierarchy(payload)
