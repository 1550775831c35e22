"""Built-in rule set used when no stored rule set applies."""

from __future__ import annotations

from archsync.contracts.hierarchy import ItemType
from archsync.contracts.mapping import FieldMapping, MappingRuleSet, RuleSetKind

BUILTIN_RULE_SET_ID = "builtin-default"

_DEFAULT_RULES: dict[ItemType, tuple[tuple[str, str], ...]] = {
    ItemType.EPIC: (
        ("description", "System.Description"),
        ("priority", "Microsoft.VSTS.Common.Priority"),
        ("tags", "System.Tags"),
        ("componentKey", "System.Tags"),
        ("lastUpdatedBy", "System.ChangedBy"),
        ("lastUpdatedDate", "System.ChangedDate"),
    ),
    ItemType.FEATURE: (
        ("description", "System.Description"),
        ("tags", "System.Tags"),
        ("componentKey", "System.Tags"),
        ("priority", "Microsoft.VSTS.Common.Priority"),
    ),
    ItemType.USER_STORY: (
        ("description", "System.Description"),
        ("acceptanceCriteria", "Microsoft.VSTS.Common.AcceptanceCriteria"),
        ("priority", "Microsoft.VSTS.Common.Priority"),
        ("classification", "Microsoft.VSTS.Common.Category"),
        ("risk", "Custom.Risk"),
        ("tags", "System.Tags"),
        ("componentKey", "System.Tags"),
    ),
}


def builtin_rule_set() -> MappingRuleSet:
    mappings = tuple(
        FieldMapping(source_field=source, target_field=target, item_type=item_type)
        for item_type, rules in _DEFAULT_RULES.items()
        for source, target in rules
    )
    return MappingRuleSet(
        id=BUILTIN_RULE_SET_ID,
        name="Built-in defaults",
        kind=RuleSetKind.BUILTIN,
        mappings=mappings,
    )
