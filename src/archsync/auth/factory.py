"""Token resolver factory."""

from __future__ import annotations

from archsync.auth.base import TokenResolver
from archsync.auth.resolvers.env import EnvTokenResolver
from archsync.auth.resolvers.static import StaticTokenResolver
from archsync.contracts.config import TargetConfig
from archsync.contracts.exceptions import ConfigError


def create_token_resolver(config: TargetConfig) -> TokenResolver:
    if config.auth == "env":
        return EnvTokenResolver(env_var=config.token_env)
    if config.auth == "token":
        return StaticTokenResolver(token=config.token or "")
    raise ConfigError(f"Unknown auth mode: {config.auth}")
