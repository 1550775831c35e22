"""Pick the rule set a sync run uses."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from archsync.contracts.mapping import MappingRuleSet
from archsync.contracts.stores import MappingStore
from archsync.contracts.target import WorkItemTarget
from archsync.mapping.defaults import builtin_rule_set

logger = logging.getLogger(__name__)


class MappingResolver:
    """Resolves rule sets through explicit id, project default, process template, then built-ins.

    Lookups never raise: a failing store or target call is logged and the
    next tier is tried. The built-in tier always answers.
    """

    def __init__(self, store: MappingStore | None = None, target: WorkItemTarget | None = None) -> None:
        self._store = store
        self._target = target

    async def resolve(
        self,
        explicit_id: str | None = None,
        process_template_name: str | None = None,
        project_id: str = "",
    ) -> MappingRuleSet:
        if self._store is not None:
            if explicit_id:
                rule_set = await self._lookup("rule set", self._store.get_rule_set, explicit_id)
                if rule_set is not None:
                    logger.info("Using mapping rule set %s (%s)", rule_set.id, rule_set.name)
                    return rule_set
                logger.warning("Mapping rule set %s not found, falling back", explicit_id)

            if project_id:
                rule_set = await self._lookup("project default", self._store.get_project_default, project_id)
                if rule_set is not None:
                    logger.info("Using default rule set %s for project %s", rule_set.id, project_id)
                    return rule_set

            template_name = process_template_name or await self._process_template_name(project_id)
            if template_name:
                rule_set = await self._lookup("template", self._store.get_template, template_name)
                if rule_set is not None:
                    logger.info("Using template rule set %s for process %s", rule_set.id, template_name)
                    return rule_set

        logger.info("Using built-in field mappings")
        return builtin_rule_set()

    async def _lookup(
        self,
        tier: str,
        fetch: Callable[[str], Awaitable[MappingRuleSet | None]],
        key: str,
    ) -> MappingRuleSet | None:
        try:
            return await fetch(key)
        except Exception:
            logger.warning("Mapping %s lookup failed for %r", tier, key, exc_info=True)
            return None

    async def _process_template_name(self, project_id: str) -> str | None:
        if self._target is None or not project_id:
            return None
        try:
            return await self._target.get_process_template_name(project_id)
        except Exception:
            logger.warning("Could not read process template for project %s", project_id, exc_info=True)
            return None
