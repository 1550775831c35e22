"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from archsync.contracts.exceptions import ConfigError


class TargetConfig(BaseModel):
    """Azure DevOps organization connection."""

    id: str
    name: str = ""
    organization: str = Field(min_length=1)
    base_url: str = "https://dev.azure.com"
    auth: str = "env"
    token: str | None = None
    token_env: str = "AZURE_DEVOPS_PAT_TOKEN"
    is_active: bool = False

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_auth_token(self) -> TargetConfig:
        token = (self.token or "").strip()
        if self.auth == "token":
            if not token:
                raise ValueError("token auth requires a non-empty token")
            return self
        if token:
            raise ValueError("token must be unset when auth is not 'token'")
        if self.auth != "env":
            raise ValueError("auth must be one of: env, token")
        return self


class SourceConfig(BaseModel):
    """Ardoq workspace the hierarchy was exported from; recorded on each run."""

    id: str
    name: str = ""
    base_url: str | None = None
    is_active: bool = False

    model_config = {"frozen": True}


class ArchSyncConfig(BaseModel):
    targets: list[TargetConfig] = Field(min_length=1)
    sources: list[SourceConfig] = Field(default_factory=list)
    mapping_catalog_path: Path | None = None
    history_path: Path | None = None
    batch_size: int = Field(default=20, ge=1, le=200)
    max_retries: int = Field(default=0, ge=0, le=5)
    request_timeout: float = Field(default=30.0, gt=0)
    permanent_delete: bool = True

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_unique_ids(self) -> ArchSyncConfig:
        target_ids = [target.id for target in self.targets]
        if len(set(target_ids)) != len(target_ids):
            raise ValueError("target ids must be unique")
        source_ids = [source.id for source in self.sources]
        if len(set(source_ids)) != len(source_ids):
            raise ValueError("source ids must be unique")
        return self

    def active_target(self, target_id: str | None = None) -> TargetConfig:
        """Target by id, else the active one, else the first configured."""
        if target_id is not None:
            for target in self.targets:
                if target.id == target_id:
                    return target
            raise ConfigError(f"Unknown target configuration: {target_id}")
        for target in self.targets:
            if target.is_active:
                return target
        return self.targets[0]

    def active_source(self, source_id: str | None = None) -> SourceConfig | None:
        if source_id is not None:
            for source in self.sources:
                if source.id == source_id:
                    return source
            raise ConfigError(f"Unknown source configuration: {source_id}")
        for source in self.sources:
            if source.is_active:
                return source
        return self.sources[0] if self.sources else None
