"""Work-item target contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from pydantic import BaseModel

from archsync.contracts.hierarchy import ItemType
from archsync.contracts.patch import PatchOperation


class CreatedItem(BaseModel):
    id: str
    url: str

    model_config = {"frozen": True}


class WorkItemTarget(ABC):
    """Target platform that work items are created in.

    Per-item failures raise ``ProviderError``; losing the connection to the
    platform raises ``ProviderConnectionError``.
    """

    @abstractmethod
    async def __aenter__(self) -> WorkItemTarget: ...

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...

    @abstractmethod
    async def create_item(self, project: str, item_type: ItemType, patch: list[PatchOperation]) -> CreatedItem: ...

    @abstractmethod
    async def delete_items(self, project: str, ids: list[int], *, permanent: bool = True) -> None: ...

    @abstractmethod
    async def query_item_ids(self, project: str) -> list[int]: ...

    @abstractmethod
    async def get_process_template_name(self, project: str) -> str | None: ...

    @abstractmethod
    def work_item_url(self, item_id: str) -> str:
        """API url of a work item, used as the target of parent links."""
