from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from cmdhooks.exception import ConfigError
from cmdhooks.registry import HookRegistry
from cmdhooks.script import ScriptHook
from cmdhooks.types import DEFAULT_PRIORITY, HookEventType, HookFilter
from cmdhooks.utils.logging import logger


class ScriptHookConfig(BaseModel):
    """Declarative definition of a script hook."""

    id: str | None = Field(default=None, description="Hook id, unique across all events")
    event: HookEventType = Field(description="Event the hook subscribes to")
    command: str = Field(min_length=1, description="Shell command to execute")
    priority: int = Field(default=DEFAULT_PRIORITY, description="Lower runs earlier")
    filter: HookFilter | None = Field(default=None, description="Command filter")
    timeout: int = Field(default=30000, ge=100, le=600000, description="Timeout in milliseconds")
    description: str | None = Field(default=None, description="Hook description")
    env: dict[str, str] = Field(default_factory=dict, description="Extra environment variables")

    def to_handler(self) -> ScriptHook:
        if self.id is None:
            raise ConfigError(f"Hook for {self.event.value} has no id: {self.command}")
        return ScriptHook(
            id=self.id,
            event=self.event,
            command=self.command,
            priority=self.priority,
            filter=self.filter,
            timeout=self.timeout,
            env=dict(self.env),
            description=self.description,
        )


class HooksConfig(BaseModel):
    """Hooks configuration container."""

    hooks: list[ScriptHookConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_hooks(self) -> HooksConfig:
        """Auto-assign ids to unnamed hooks and reject duplicates."""
        per_event: dict[HookEventType, int] = {}
        for hook in self.hooks:
            index = per_event.get(hook.event, 0)
            per_event[hook.event] = index + 1
            if hook.id is None:
                hook.id = f"{hook.event.value}-{index}"

        seen: set[str] = set()
        for hook in self.hooks:
            if hook.id in seen:
                raise ValueError(f"Duplicate hook id '{hook.id}'")
            seen.add(hook.id)  # type: ignore[arg-type]
        return self


def load_hooks_config(path: Path) -> HooksConfig:
    """Load a hooks configuration from a YAML file."""
    if not path.is_file():
        raise ConfigError(f"Hooks config file not found: {path}")

    try:
        raw: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read hooks config {path}: {e}") from e

    if raw is None:
        return HooksConfig()
    if not isinstance(raw, dict):
        raise ConfigError(f"Hooks config {path} must be a mapping with a 'hooks' list")

    try:
        config = HooksConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid hooks config {path}: {e}") from e

    logger.debug("Loaded {count} hooks from {path}", count=len(config.hooks), path=path)
    return config


def register_hooks(registry: HookRegistry, config: HooksConfig) -> list[ScriptHook]:
    """Register a `ScriptHook` for every configured entry."""
    handlers = [hook.to_handler() for hook in config.hooks]
    for handler in handlers:
        registry.register(handler)
    return handlers
