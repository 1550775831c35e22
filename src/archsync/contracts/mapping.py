"""Field-mapping rule contracts."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from archsync.contracts.hierarchy import ItemType, parse_item_type


class RuleSetKind(StrEnum):
    PROJECT = "project"
    TEMPLATE = "template"
    BUILTIN = "builtin"


class FieldMapping(BaseModel):
    """One ``source_field -> target_field`` rule for an item type."""

    source_field: str = Field(alias="ardoqField", min_length=1)
    target_field: str = Field(alias="azureDevOpsField", min_length=1)
    item_type: ItemType = Field(alias="workItemType")
    transform: str | None = Field(default=None, alias="transformFunction")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("item_type", mode="before")
    @classmethod
    def normalize_item_type(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, ItemType):
            return parse_item_type(value) or value
        return value


class MappingRuleSet(BaseModel):
    """Ordered rules, either project-specific, per process template, or built in."""

    id: str
    name: str
    kind: RuleSetKind = RuleSetKind.PROJECT
    mappings: tuple[FieldMapping, ...] = ()
    project_id: str | None = None
    is_default: bool = False
    process_template_name: str | None = None
    description: str | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    @model_validator(mode="after")
    def validate_kind(self) -> MappingRuleSet:
        if self.kind == RuleSetKind.TEMPLATE and not self.process_template_name:
            raise ValueError("template rule sets require processTemplateName")
        return self

    def rules_for(self, item_type: ItemType) -> list[FieldMapping]:
        return [rule for rule in self.mappings if rule.item_type == item_type]


class MappingCatalog(BaseModel):
    """Persisted project rule sets and process-template rule sets."""

    configs: list[MappingRuleSet] = Field(default_factory=list)
    templates: list[MappingRuleSet] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def tag_kinds(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        tagged = dict(data)
        for key, kind in (("configs", RuleSetKind.PROJECT), ("templates", RuleSetKind.TEMPLATE)):
            tagged[key] = [
                {**entry, "kind": kind.value} if isinstance(entry, dict) else entry for entry in tagged.get(key) or []
            ]
        return tagged
