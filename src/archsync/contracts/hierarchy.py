"""Hierarchy contracts: source nodes and their field bags."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, model_validator

_NODE_KEYS = frozenset({"_id", "id", "name", "type", "children", "fields"})


class NodeType(StrEnum):
    DOMAIN = "Domain"
    INITIATIVE = "Initiative"
    EPIC = "Epic"
    FEATURE = "Feature"
    USER_STORY = "User Story"


class ItemType(StrEnum):
    """Node types that become work items in the target."""

    EPIC = "epic"
    FEATURE = "feature"
    USER_STORY = "user_story"

    @property
    def work_item_type(self) -> str:
        return _WORK_ITEM_TYPES[self]

    @property
    def event_prefix(self) -> str:
        return _EVENT_PREFIXES[self]


_WORK_ITEM_TYPES = {
    ItemType.EPIC: "Epic",
    ItemType.FEATURE: "Feature",
    ItemType.USER_STORY: "User Story",
}

_EVENT_PREFIXES = {
    ItemType.EPIC: "epic",
    ItemType.FEATURE: "feature",
    ItemType.USER_STORY: "userstory",
}

_NODE_TYPE_ALIASES = {
    "domain": NodeType.DOMAIN,
    "initiative": NodeType.INITIATIVE,
    "epic": NodeType.EPIC,
    "feature": NodeType.FEATURE,
    "userstory": NodeType.USER_STORY,
}

_ITEM_TYPES = {
    NodeType.EPIC: ItemType.EPIC,
    NodeType.FEATURE: ItemType.FEATURE,
    NodeType.USER_STORY: ItemType.USER_STORY,
}


def parse_node_type(raw: str | None) -> NodeType | None:
    """Normalize a declared type (``User Story``, ``UserStory``, ``user_story``...)."""
    if not raw:
        return None
    key = raw.replace(" ", "").replace("_", "").replace("-", "").lower()
    return _NODE_TYPE_ALIASES.get(key)


def parse_item_type(raw: str | None) -> ItemType | None:
    node_type = parse_node_type(raw)
    if node_type is None:
        return None
    return _ITEM_TYPES.get(node_type)


def is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


class FieldBag(Mapping[str, Any]):
    """Read-only key/value view over a node's open-ended fields."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FieldBag({self._data!r})"

    def get_path(self, path: str) -> Any:
        """Dot-notation lookup; ``None`` when any segment is missing."""
        current: Any = self._data
        for segment in path.split("."):
            if not isinstance(current, Mapping) or segment not in current:
                return None
            current = current[segment]
        return current

    def get_ci(self, key: str) -> Any:
        """Case-insensitive top-level lookup returning the first non-empty value."""
        if not is_empty(self._data.get(key)):
            return self._data[key]
        lowered = key.lower()
        for candidate, value in self._data.items():
            if candidate.lower() == lowered and not is_empty(value):
                return value
        return None

    def first_of(self, keys: tuple[str, ...] | list[str]) -> Any:
        """First non-empty value among exact *keys*."""
        for key in keys:
            value = self._data.get(key)
            if not is_empty(value):
                return value
        return None

    def bag(self, key: str) -> FieldBag:
        """Nested bag for *key*; empty when absent or not an object."""
        value = self._data.get(key)
        if isinstance(value, Mapping):
            return FieldBag(value)
        return FieldBag()


class HierarchyNode(BaseModel):
    """Read-only snapshot of one source artifact and its children.

    Any key of the incoming object other than id/name/type/children is
    collected into ``fields``.
    """

    id: str = Field(alias="_id")
    name: str = ""
    type: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)
    children: list[HierarchyNode] = Field(default_factory=list)

    model_config = {"frozen": True, "populate_by_name": True}

    @model_validator(mode="before")
    @classmethod
    def collect_fields(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        node_id = data.get("_id", data.get("id"))
        if node_id is None or str(node_id).strip() == "":
            raise ValueError("hierarchy node requires an '_id'")
        fields = dict(data.get("fields") or {})
        fields.update({key: value for key, value in data.items() if key not in _NODE_KEYS})
        return {
            "_id": str(node_id),
            "name": str(data.get("name") or ""),
            "type": str(data.get("type") or ""),
            "fields": fields,
            "children": data.get("children") or [],
        }

    @property
    def node_type(self) -> NodeType | None:
        return parse_node_type(self.type)

    @property
    def item_type(self) -> ItemType | None:
        return parse_item_type(self.type)

    def field_bag(self) -> FieldBag:
        return FieldBag({**self.fields, "_id": self.id, "id": self.id, "name": self.name, "type": self.type})
