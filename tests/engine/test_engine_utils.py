from __future__ import annotations

import pytest

from archsync.contracts.hierarchy import HierarchyNode, ItemType
from archsync.engine.utils import chunked, count_items, find_epics, iter_processable


def test_iter_processable_is_parent_before_child(hierarchy) -> None:
    order = [(node.id, item_type) for node, item_type in iter_processable(hierarchy)]

    assert order == [
        ("e1", ItemType.EPIC),
        ("f1", ItemType.FEATURE),
        ("s1", ItemType.USER_STORY),
        ("f2", ItemType.FEATURE),
    ]


def test_count_items(hierarchy) -> None:
    assert count_items(hierarchy) == 4


def test_find_epics_ignores_epics_below_other_work_items() -> None:
    nodes = [
        HierarchyNode.model_validate(
            {
                "_id": "f0",
                "name": "Orphan feature",
                "type": "Feature",
                "children": [{"_id": "e9", "name": "Nested epic", "type": "Epic"}],
            }
        ),
        HierarchyNode.model_validate({"_id": "e1", "name": "Root epic", "type": "epic"}),
    ]

    assert [epic.id for epic in find_epics(nodes)] == ["e1"]


@pytest.mark.parametrize(
    ("values", "size", "expected"),
    [
        ([], 20, []),
        ([1, 2, 3], 2, [[1, 2], [3]]),
        ([1, 2], 5, [[1, 2]]),
    ],
)
def test_chunked(values, size, expected) -> None:
    assert chunked(values, size) == expected
