"""Token resolver implementations."""

from archsync.auth.resolvers.env import EnvTokenResolver
from archsync.auth.resolvers.static import StaticTokenResolver

__all__ = ["EnvTokenResolver", "StaticTokenResolver"]
