"""Turn one hierarchy node plus a rule set into a work-item patch."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from archsync.contracts.hierarchy import FieldBag, HierarchyNode, ItemType, is_empty
from archsync.contracts.mapping import MappingRuleSet
from archsync.contracts.patch import TITLE_FIELD, PatchOperation
from archsync.mapping.values import MULTI_VALUE_FIELDS, transform_value

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"

# Extended-field keys probed for features, in order.
_FEATURE_CUSTOM_FIELDS: dict[str, tuple[str, ...]] = {
    "description": ("context_description", "description", "Description"),
    "purpose": ("purpose", "Purpose"),
    "input": ("input", "Input"),
    "output": ("output_definition_of_done", "output", "Output", "definitionOfDone"),
    "approach": ("approach", "Approach"),
    "priority": ("priority", "Priority"),
}

_META_FIELDS: dict[str, tuple[str, ...]] = {
    "lastUpdatedBy": ("lastModifiedBy", "lastModifiedByName", "lastModifiedByEmail"),
    "lastUpdatedDate": ("lastUpdated",),
}

_ABBREVIATIONS: dict[str, tuple[str, ...]] = {
    "description": ("desc", "Description", "DESCRIPTION"),
    "acceptanceCriteria": ("acceptance", "criteria", "AcceptanceCriteria"),
    "lastUpdatedBy": ("updatedBy", "lastUpdatedBy", "changedBy"),
    "lastUpdatedDate": ("updatedDate", "lastUpdatedDate", "changedDate"),
}

_FEATURE_BASE_FIELDS = ("description", "Description", "context", "Context", "desc", "Desc")
_FEATURE_SECTIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Purpose", ("purpose", "Purpose")),
    ("Input", ("input", "Input")),
    (
        "Output (Definition of Done)",
        ("output_definition_of_done", "output", "Output", "definitionOfDone", "DefinitionOfDone"),
    ),
    ("Approach", ("approach", "Approach")),
)


def name_variations(field_name: str) -> list[str]:
    candidates = [field_name]
    if field_name:
        candidates.append(field_name[0].upper() + field_name[1:])
    candidates.extend([field_name.lower(), field_name.upper()])
    candidates.extend(_ABBREVIATIONS.get(field_name, ()))
    return list(dict.fromkeys(candidates))


def _first_ci(bag: FieldBag, keys: tuple[str, ...] | list[str]) -> Any:
    for key in keys:
        value = bag.get_ci(key)
        if not is_empty(value):
            return value
    return None


def build_feature_description(bag: FieldBag) -> str:
    """Base description, a blank line, then one labelled line per non-empty section."""
    custom = bag.bag("customFields")
    base = custom.first_of(("context_description", "description"))
    if is_empty(base):
        base = _first_ci(bag, _FEATURE_BASE_FIELDS)

    parts = [] if is_empty(base) else [str(base)]
    sections: list[str] = []
    for label, keys in _FEATURE_SECTIONS:
        value = custom.first_of(keys)
        if is_empty(value):
            value = _first_ci(bag, keys)
        if not is_empty(value):
            sections.append(f"{label}: {value}")

    if sections:
        if parts:
            parts.append("")
        parts.extend(sections)
    return "\n".join(parts)


def resolve_source_value(bag: FieldBag, source_field: str, item_type: ItemType) -> Any:
    """Find the value for *source_field*; ``None`` when nothing non-empty resolves."""
    if item_type == ItemType.FEATURE and source_field == "description":
        description = build_feature_description(bag)
        return description or None

    value = bag.get_path(source_field)
    if not is_empty(value):
        return value

    custom = bag.bag("customFields")
    if item_type == ItemType.FEATURE and source_field in _FEATURE_CUSTOM_FIELDS:
        value = custom.first_of(_FEATURE_CUSTOM_FIELDS[source_field])
        if not is_empty(value):
            return value
    if source_field == "priority":
        value = custom.first_of(("priority",))
        if not is_empty(value):
            return value

    if source_field in _META_FIELDS:
        value = bag.bag("_meta").first_of(_META_FIELDS[source_field])
        if not is_empty(value):
            return value

    value = bag.get_ci(source_field)
    if not is_empty(value):
        return value

    variations = name_variations(source_field)
    value = bag.first_of(variations)
    if not is_empty(value):
        return value
    return _first_ci(bag, variations)


class FieldTransformer:
    """Applies a rule set to a node, producing the ordered creation patch.

    The patch always starts with the title. Single-value fields follow in
    rule order, then multi-value fields (concatenated across rules), then the
    parent link when a parent id is given.
    """

    def __init__(self, *, work_item_url: Callable[[str], str]) -> None:
        self._work_item_url = work_item_url

    def apply(
        self,
        node: HierarchyNode,
        item_type: ItemType,
        rule_set: MappingRuleSet,
        parent_id: str | None = None,
    ) -> list[PatchOperation]:
        bag = node.field_bag()
        single_values: dict[str, Any] = {}
        multi_values: dict[str, list[str]] = {}

        for rule in rule_set.rules_for(item_type):
            if rule.target_field == TITLE_FIELD:
                logger.debug("Ignoring rule %s -> %s; title comes from the node name", rule.source_field, TITLE_FIELD)
                continue
            try:
                value = resolve_source_value(bag, rule.source_field, item_type)
                if value is None:
                    continue
                transformed = transform_value(value, rule.target_field, item_type, rule.transform)
            except Exception:
                logger.warning(
                    "Failed to map field %s to %s for node %s",
                    rule.source_field,
                    rule.target_field,
                    node.id,
                    exc_info=True,
                )
                continue
            if transformed is None:
                continue

            if rule.target_field in MULTI_VALUE_FIELDS:
                text = str(transformed).strip()
                if text:
                    multi_values.setdefault(rule.target_field, []).append(text)
            else:
                single_values[rule.target_field] = transformed

        operations = [PatchOperation.field(TITLE_FIELD, node.name or UNTITLED)]
        operations.extend(PatchOperation.field(name, value) for name, value in single_values.items())
        operations.extend(PatchOperation.field(name, ", ".join(values)) for name, values in multi_values.items())
        if parent_id is not None:
            operations.append(PatchOperation.parent_link(self._work_item_url(parent_id)))
        return operations
