from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from archsync.contracts.exceptions import HierarchyValidationError
from archsync.hierarchy import build_hierarchy, load_hierarchy, parse_hierarchy
from tests.fakes.hierarchy import epic_tree


def _components() -> list[dict[str, Any]]:
    return [
        {"_id": "s1", "name": "Pay with card", "type": "User Story", "parent": "f1"},
        {"_id": "f1", "name": "Card checkout", "type": "Feature", "parent": "e1"},
        {"_id": "e1", "name": "Payments", "type": "Epic", "parent": "i1"},
        {"_id": "i1", "name": "Digital", "type": "Initiative", "parent": "d1"},
        {"_id": "d1", "name": "Commerce", "type": "Domain", "parent": "ws-root"},
    ]


class TestParseHierarchy:
    def test_nested_nodes(self) -> None:
        [root] = parse_hierarchy(epic_tree())

        assert root.id == "e1"
        assert [child.id for child in root.children] == ["f1", "f2"]
        assert root.children[0].children[0].fields == {"acceptanceCriteria": "Card is charged"}

    @pytest.mark.parametrize("payload", [[], None, {"_id": "e1"}])
    def test_empty_or_not_a_list(self, payload: Any) -> None:
        with pytest.raises(HierarchyValidationError, match="non-empty list"):
            parse_hierarchy(payload)

    def test_node_without_id(self) -> None:
        with pytest.raises(HierarchyValidationError, match="invalid hierarchy"):
            parse_hierarchy([{"name": "anonymous", "type": "Epic"}])


class TestBuildHierarchy:
    def test_nests_components_under_domains(self) -> None:
        [domain] = build_hierarchy(_components(), "ws-root")

        initiative = domain.children[0]
        epic = initiative.children[0]
        feature = epic.children[0]
        assert (domain.id, initiative.id, epic.id, feature.id) == ("d1", "i1", "e1", "f1")
        assert feature.children[0].id == "s1"

    def test_domain_under_other_parent_is_not_a_root(self) -> None:
        components = [{"_id": "d1", "type": "Domain", "parent": "elsewhere"}]

        with pytest.raises(HierarchyValidationError, match="non-empty list"):
            build_hierarchy(components, "ws-root")

    def test_wrong_parent_type(self) -> None:
        components = [
            {"_id": "d1", "type": "Domain"},
            {"_id": "e1", "type": "Epic", "parent": "d1"},
        ]

        with pytest.raises(HierarchyValidationError, match="Epic e1 cannot have parent Domain"):
            build_hierarchy(components)

    def test_missing_parent(self) -> None:
        components = [{"_id": "d1", "type": "Domain"}, {"_id": "f9", "type": "Feature", "parent": "gone"}]

        with pytest.raises(HierarchyValidationError, match="Feature f9 cannot have parent None"):
            build_hierarchy(components)

    def test_component_without_id(self) -> None:
        with pytest.raises(HierarchyValidationError, match="without an '_id'"):
            build_hierarchy([{"type": "Domain"}])


class TestLoadHierarchy:
    def test_list_file(self, hierarchy_file: Path) -> None:
        assert [node.id for node in load_hierarchy(hierarchy_file)] == ["e1"]

    def test_epics_wrapper(self, tmp_path: Path) -> None:
        path = tmp_path / "request.json"
        path.write_text(json.dumps({"epics": epic_tree()}), encoding="utf-8")

        assert [node.id for node in load_hierarchy(path)] == ["e1"]

    def test_component_export(self, tmp_path: Path) -> None:
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"components": _components(), "rootWorkspaceId": "ws-root"}), encoding="utf-8")

        assert [node.id for node in load_hierarchy(path)] == ["d1"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(HierarchyValidationError, match="failed reading hierarchy file"):
            load_hierarchy(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(HierarchyValidationError, match="invalid JSON"):
            load_hierarchy(path)

    def test_object_without_epics(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"nodes": []}), encoding="utf-8")

        with pytest.raises(HierarchyValidationError, match="non-empty list"):
            load_hierarchy(path)
