"""Auth module public exports."""

from archsync.auth.base import TokenResolver
from archsync.auth.factory import create_token_resolver

__all__ = ["TokenResolver", "create_token_resolver"]
