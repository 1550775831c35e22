"""In-memory dry-run target."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType

from archsync.contracts.exceptions import ProviderError
from archsync.contracts.hierarchy import ItemType
from archsync.contracts.patch import TITLE_FIELD, PatchOperation
from archsync.contracts.target import CreatedItem, WorkItemTarget


@dataclass(frozen=True)
class DryRunOperation:
    """Deterministic dry-run operation log entry."""

    sequence: int
    name: str
    item_id: str | None
    payload: dict[str, str]


class DryRunTarget(WorkItemTarget):
    """Target that hands out sequential ids without network calls.

    *existing_ids* seeds the work items an overwrite run would find.
    """

    def __init__(self, *, organization: str = "dry-run", existing_ids: list[int] | None = None) -> None:
        self._organization = organization
        self._existing: dict[str, list[int]] = {}
        self._seed = list(existing_ids or [])
        self._counter = max(self._seed, default=0)
        self._operations: list[DryRunOperation] = []

    @property
    def operations(self) -> tuple[DryRunOperation, ...]:
        return tuple(self._operations)

    def _record_operation(self, name: str, item_id: str | None, payload: dict[str, str]) -> None:
        self._operations.append(
            DryRunOperation(sequence=len(self._operations) + 1, name=name, item_id=item_id, payload=payload)
        )

    def _project_ids(self, project: str) -> list[int]:
        return self._existing.setdefault(project, list(self._seed))

    async def __aenter__(self) -> DryRunTarget:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None

    def work_item_url(self, item_id: str) -> str:
        return f"dry-run://{self._organization}/workitems/{item_id}"

    async def create_item(self, project: str, item_type: ItemType, patch: list[PatchOperation]) -> CreatedItem:
        if not patch or patch[0].field_name != TITLE_FIELD:
            raise ProviderError("Patch must start with the work item title")
        self._counter += 1
        item_id = str(self._counter)
        self._project_ids(project).append(self._counter)
        parent = next((op.value["url"].rsplit("/", 1)[-1] for op in patch if op.is_relation), "")
        self._record_operation(
            "create_item",
            item_id,
            {
                "project": project,
                "item_type": item_type.work_item_type,
                "title": str(patch[0].value),
                "parent_id": parent,
            },
        )
        return CreatedItem(id=item_id, url=self.work_item_url(item_id))

    async def query_item_ids(self, project: str) -> list[int]:
        ids = list(self._project_ids(project))
        self._record_operation("query_item_ids", None, {"project": project, "count": str(len(ids))})
        return ids

    async def delete_items(self, project: str, ids: list[int], *, permanent: bool = True) -> None:
        remaining = self._project_ids(project)
        doomed = set(ids)
        remaining[:] = [item_id for item_id in remaining if item_id not in doomed]
        self._record_operation(
            "delete_items",
            None,
            {"project": project, "ids": ",".join(str(item_id) for item_id in ids), "permanent": str(permanent).lower()},
        )

    async def get_process_template_name(self, project: str) -> str | None:
        return None
