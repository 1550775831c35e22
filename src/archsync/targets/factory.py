"""Factory for creating target instances.

Decouples target selection from target implementation. The SDK uses this
factory to instantiate targets by name, without importing concrete targets.
"""

from __future__ import annotations

from typing import Any

from archsync.contracts.target import WorkItemTarget
from archsync.targets.azure_devops import AzureDevOpsTarget
from archsync.targets.dry_run import DryRunTarget

# Registry mapping target names to their classes
_REGISTRY: dict[str, type[WorkItemTarget]] = {
    "azure_devops": AzureDevOpsTarget,
    "dry-run": DryRunTarget,
}


def register(name: str, target_cls: type[WorkItemTarget]) -> None:
    """Register a target class by name."""
    _REGISTRY[name] = target_cls


def create_target(name: str, **kwargs: Any) -> WorkItemTarget:
    """Create a target instance by name.

    The returned target is an async context manager::

        async with create_target("azure_devops", organization="contoso", token=pat) as target:
            ids = await target.query_item_ids("Project")

    Raises:
        ValueError: If the target name is not registered.
    """
    if name not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY.keys())) or "(none registered)"
        raise ValueError(f"Unknown target: {name!r}. Available: {available}")
    return _REGISTRY[name](**kwargs)
