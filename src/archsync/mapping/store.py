"""Rule-set catalog backed mapping store."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from archsync.contracts.exceptions import MappingStoreError
from archsync.contracts.mapping import MappingCatalog, MappingRuleSet
from archsync.contracts.stores import MappingStore


def load_mapping_catalog(path: str | Path) -> MappingCatalog:
    """Load project and process-template rule sets from a JSON file."""
    catalog_path = Path(path).expanduser().resolve()
    try:
        raw_payload: Any = json.loads(catalog_path.read_text(encoding="utf-8"))
        return MappingCatalog.model_validate(raw_payload)
    except OSError as exc:
        raise MappingStoreError(f"failed reading mapping catalog: {catalog_path}") from exc
    except json.JSONDecodeError as exc:
        raise MappingStoreError(f"invalid JSON in mapping catalog: {catalog_path}") from exc
    except ValidationError as exc:
        raise MappingStoreError(f"invalid mapping catalog: {exc}") from exc


class CatalogMappingStore(MappingStore):
    """Serves rule sets from a catalog, optionally re-read from disk on every lookup."""

    def __init__(self, catalog: MappingCatalog | None = None, *, path: Path | None = None) -> None:
        self._catalog = catalog or MappingCatalog()
        self._path = path

    @classmethod
    def from_path(cls, path: str | Path) -> CatalogMappingStore:
        return cls(path=Path(path))

    async def _current(self) -> MappingCatalog:
        if self._path is not None:
            return await asyncio.to_thread(load_mapping_catalog, self._path)
        return self._catalog

    async def get_rule_set(self, rule_set_id: str) -> MappingRuleSet | None:
        catalog = await self._current()
        for rule_set in [*catalog.configs, *catalog.templates]:
            if rule_set.id == rule_set_id:
                return rule_set
        return None

    async def get_project_default(self, project_id: str) -> MappingRuleSet | None:
        for rule_set in (await self._current()).configs:
            if rule_set.project_id == project_id and rule_set.is_default:
                return rule_set
        return None

    async def get_template(self, process_template_name: str) -> MappingRuleSet | None:
        wanted = process_template_name.strip().lower()
        for rule_set in (await self._current()).templates:
            if (rule_set.process_template_name or "").strip().lower() == wanted:
                return rule_set
        return None
