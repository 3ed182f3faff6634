"""Configuration models and loading for prthread."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ConfigError(ValueError):
    """Raised when startup configuration is missing or invalid."""


class ProjectRoute(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    channel_id: str = Field(alias="ChannelId", min_length=1)


class SlackConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    token_env: str = "SLACK_ACCESS_TOKEN"
    timeout_seconds: float = Field(default=10.0, gt=0)


class ServerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host: str = "0.0.0.0"
    port: int = 80
    create_path: str = "/azuredevops/create"
    update_path: str = "/azuredevops/updates"


class EventConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    created_event_type: str = "git.pullrequest.created"
    updated_event_type: str = "git.pullrequest.updated"
    active_status: str = "active"
    terminal_status: str = "completed"


class PrthreadConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    # The legacy config.json key is accepted as an alias.
    projects: dict[str, ProjectRoute] = Field(default_factory=dict, alias="AutomaticPrMessages")
    slack: SlackConfig = Field(default_factory=SlackConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    events: EventConfig = Field(default_factory=EventConfig)

    def channel_for_project(self, project_name: str) -> str | None:
        route = self.projects.get(project_name)
        return route.channel_id if route else None


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file does not exist: {path}")
    text = path.read_text()
    try:
        data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not parse config at {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {path} must decode to a mapping")
    return data


def load_effective_config(
    config_path: str | Path | None = None,
    runtime_override: dict[str, Any] | None = None,
) -> PrthreadConfig:
    """Load config with precedence runtime > config file > defaults.

    ``.json`` files are parsed as JSON so the legacy ``config.json`` layout loads
    unchanged; anything else is read as YAML.
    """
    merged: dict[str, Any] = {}
    if config_path is not None:
        merged = _deep_merge(merged, _load_config_file(Path(config_path)))
    if runtime_override:
        merged = _deep_merge(merged, runtime_override)

    try:
        return PrthreadConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def resolve_slack_token(config: PrthreadConfig, env: Mapping[str, str] | None = None) -> str:
    source = os.environ if env is None else env
    token = (source.get(config.slack.token_env) or "").strip()
    if not token:
        raise ConfigError(f"Missing Slack token: set {config.slack.token_env}")
    return token
