"""Work-item target implementations."""

from archsync.targets.dry_run import DryRunOperation, DryRunTarget
from archsync.targets.factory import create_target, register

__all__ = ["DryRunOperation", "DryRunTarget", "create_target", "register"]
