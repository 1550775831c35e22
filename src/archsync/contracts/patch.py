"""JSON-patch operations sent to the target when creating a work item."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel

TITLE_FIELD = "System.Title"
PARENT_LINK_REL = "System.LinkTypes.Hierarchy-Reverse"


class PatchOperation(BaseModel):
    op: Literal["add"] = "add"
    path: str
    value: Any

    model_config = {"frozen": True}

    @classmethod
    def field(cls, name: str, value: Any) -> PatchOperation:
        return cls(path=f"/fields/{name}", value=value)

    @classmethod
    def parent_link(cls, parent_url: str) -> PatchOperation:
        return cls(path="/relations/-", value={"rel": PARENT_LINK_REL, "url": parent_url})

    @property
    def field_name(self) -> str | None:
        if self.path.startswith("/fields/"):
            return self.path.removeprefix("/fields/")
        return None

    @property
    def is_relation(self) -> bool:
        return self.path == "/relations/-"


def patch_document(operations: list[PatchOperation]) -> list[dict[str, Any]]:
    return [operation.model_dump() for operation in operations]
