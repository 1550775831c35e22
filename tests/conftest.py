"""Shared test fixtures for archsync tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from archsync.contracts.config import ArchSyncConfig, TargetConfig
from archsync.contracts.hierarchy import HierarchyNode
from tests.fakes.hierarchy import epic_tree


@pytest.fixture
def hierarchy() -> list[HierarchyNode]:
    return [HierarchyNode.model_validate(node) for node in epic_tree()]


@pytest.fixture
def config() -> ArchSyncConfig:
    return ArchSyncConfig(
        targets=[
            TargetConfig(id="primary", name="Primary", organization="contoso", auth="token", token="pat-123"),
            TargetConfig(id="secondary", organization="fabrikam", auth="token", token="pat-456"),
        ]
    )


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "archsync.json"
    path.write_text(
        json.dumps(
            {
                "targets": [{"id": "primary", "organization": "contoso", "auth": "token", "token": "pat-123"}],
                "history_path": "history",
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def hierarchy_file(tmp_path: Path) -> Path:
    path = tmp_path / "hierarchy.json"
    path.write_text(json.dumps(epic_tree()), encoding="utf-8")
    return path
