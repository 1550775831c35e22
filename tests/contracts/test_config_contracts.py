from __future__ import annotations

import pytest
from pydantic import ValidationError

from archsync.contracts.config import ArchSyncConfig, SourceConfig, TargetConfig
from archsync.contracts.exceptions import ConfigError


class TestTargetAuth:
    def test_token_auth_requires_token(self) -> None:
        with pytest.raises(ValidationError, match="requires a non-empty token"):
            TargetConfig(id="t", organization="contoso", auth="token", token="  ")

    def test_env_auth_rejects_inline_token(self) -> None:
        with pytest.raises(ValidationError, match="token must be unset"):
            TargetConfig(id="t", organization="contoso", token="pat")

    def test_unknown_auth_mode(self) -> None:
        with pytest.raises(ValidationError, match="auth must be one of"):
            TargetConfig(id="t", organization="contoso", auth="oauth")

    def test_env_defaults(self) -> None:
        target = TargetConfig(id="t", organization="contoso")

        assert target.auth == "env"
        assert target.token_env == "AZURE_DEVOPS_PAT_TOKEN"
        assert target.base_url == "https://dev.azure.com"


def test_duplicate_target_ids_rejected() -> None:
    with pytest.raises(ValidationError, match="target ids must be unique"):
        ArchSyncConfig(targets=[TargetConfig(id="t", organization="a"), TargetConfig(id="t", organization="b")])


def test_at_least_one_target_required() -> None:
    with pytest.raises(ValidationError):
        ArchSyncConfig(targets=[])


class TestActiveSelection:
    def test_explicit_id(self, config: ArchSyncConfig) -> None:
        assert config.active_target("secondary").organization == "fabrikam"

    def test_unknown_id_raises_config_error(self, config: ArchSyncConfig) -> None:
        with pytest.raises(ConfigError, match="Unknown target configuration: nope"):
            config.active_target("nope")

    def test_active_flag_beats_order(self) -> None:
        config = ArchSyncConfig(
            targets=[
                TargetConfig(id="first", organization="a"),
                TargetConfig(id="second", organization="b", is_active=True),
            ]
        )

        assert config.active_target().id == "second"

    def test_first_target_by_default(self, config: ArchSyncConfig) -> None:
        assert config.active_target().id == "primary"

    def test_sources_are_optional(self, config: ArchSyncConfig) -> None:
        assert config.active_source() is None
        with pytest.raises(ConfigError, match="Unknown source configuration"):
            config.active_source("ardoq")

    def test_source_lookup(self) -> None:
        config = ArchSyncConfig(
            targets=[TargetConfig(id="t", organization="a")],
            sources=[SourceConfig(id="ws-1"), SourceConfig(id="ws-2", is_active=True)],
        )

        assert config.active_source().id == "ws-2"
        assert config.active_source("ws-1").id == "ws-1"
