"""Hierarchy walk helpers shared by the engine and its callers."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TypeVar

from archsync.contracts.hierarchy import HierarchyNode, ItemType

T = TypeVar("T")

_CHILD_TYPE = {
    ItemType.EPIC: ItemType.FEATURE,
    ItemType.FEATURE: ItemType.USER_STORY,
}


def child_item_type(item_type: ItemType) -> ItemType | None:
    return _CHILD_TYPE.get(item_type)


def find_epics(nodes: Sequence[HierarchyNode]) -> list[HierarchyNode]:
    """Epics in depth-first order; non-work-item nodes are traversed transparently."""
    epics: list[HierarchyNode] = []
    for node in nodes:
        item_type = node.item_type
        if item_type == ItemType.EPIC:
            epics.append(node)
        elif item_type is None:
            epics.extend(find_epics(node.children))
    return epics


def processable_children(node: HierarchyNode, item_type: ItemType) -> list[HierarchyNode]:
    """Children of *node* that are created under it (Features of an Epic, Stories of a Feature)."""
    child_type = _CHILD_TYPE.get(item_type)
    if child_type is None:
        return []
    return [child for child in node.children if child.item_type == child_type]


def iter_descendants(node: HierarchyNode, item_type: ItemType) -> Iterator[tuple[HierarchyNode, ItemType]]:
    child_type = _CHILD_TYPE.get(item_type)
    if child_type is None:
        return
    for child in processable_children(node, item_type):
        yield child, child_type
        yield from iter_descendants(child, child_type)


def iter_processable(nodes: Sequence[HierarchyNode]) -> Iterator[tuple[HierarchyNode, ItemType]]:
    """Every node the engine would attempt if nothing failed, parent before child."""
    for epic in find_epics(nodes):
        yield epic, ItemType.EPIC
        yield from iter_descendants(epic, ItemType.EPIC)


def count_items(nodes: Sequence[HierarchyNode]) -> int:
    return sum(1 for _ in iter_processable(nodes))


def chunked(values: Sequence[T], size: int) -> list[list[T]]:
    if size < 1:
        raise ValueError("chunk size must be positive")
    return [list(values[index : index + size]) for index in range(0, len(values), size)]
