"""Contract types shared by every hook handler and the pipeline core."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PRIORITY = 100


class HookEventType(str, Enum):
    """Lifecycle moments a handler can subscribe to."""

    PRE_COMMAND = "pre-command"
    POST_COMMAND = "post-command"
    ON_ERROR = "on-error"
    ON_DEPLOY = "on-deploy"


class HookAction(str, Enum):
    """Tag of a handler verdict."""

    CONTINUE = "continue"
    BLOCK = "block"
    MODIFY = "modify"


@dataclass(frozen=True, slots=True, kw_only=True)
class HookContext:
    """Input passed to every handler for one pipeline run."""

    event: HookEventType
    command: str
    args: tuple[str, ...] = ()
    cwd: Path = field(default_factory=Path.cwd)
    framework_root: Path | None = None
    error: BaseException | None = None
    data: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "event", HookEventType(self.event))
        object.__setattr__(self, "args", tuple(self.args))

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view, used when handing the context to external processes."""
        return {
            "event": self.event.value,
            "command": self.command,
            "args": list(self.args),
            "cwd": str(self.cwd),
            "framework_root": str(self.framework_root) if self.framework_root else None,
            "error": str(self.error) if self.error is not None else None,
            "data": self.data,
        }


@dataclass(frozen=True, slots=True)
class Continue:
    """No objection, no side data."""

    error: BaseException | None = field(default=None, kw_only=True)

    @property
    def action(self) -> HookAction:
        return HookAction.CONTINUE


@dataclass(frozen=True, slots=True)
class Block:
    """Veto: stops the run and reports `message` to the caller."""

    message: str
    error: BaseException | None = field(default=None, kw_only=True)

    @property
    def action(self) -> HookAction:
        return HookAction.BLOCK


@dataclass(frozen=True, slots=True)
class Modify:
    """Non-blocking contribution merged into the run's modifications."""

    data: Mapping[str, Any]
    error: BaseException | None = field(default=None, kw_only=True)

    @property
    def action(self) -> HookAction:
        return HookAction.MODIFY


HookResult = Continue | Block | Modify


class HookFilter(BaseModel):
    """Restricts a handler to a subset of commands.

    `commands` is an inclusion list (empty means every command) and `exclude`
    always wins over it.
    """

    model_config = ConfigDict(frozen=True)

    commands: tuple[str, ...] = Field(default=(), description="Commands to run for")
    exclude: tuple[str, ...] = Field(default=(), description="Commands to skip")

    def matches(self, command: str) -> bool:
        if command in self.exclude:
            return False
        return not self.commands or command in self.commands


@runtime_checkable
class HookHandler(Protocol):
    """The contract every extension implements."""

    id: str
    event: HookEventType
    priority: int
    filter: HookFilter | None  # may be absent; matches every command

    async def execute(self, context: HookContext) -> HookResult: ...


HookCallable = Callable[[HookContext], Awaitable[HookResult] | HookResult]


@dataclass(slots=True, kw_only=True)
class FunctionHook:
    """Adapts a plain (sync or async) function to the handler contract."""

    id: str
    event: HookEventType
    func: HookCallable
    priority: int = DEFAULT_PRIORITY
    filter: HookFilter | None = None

    async def execute(self, context: HookContext) -> HookResult:
        result = self.func(context)
        if inspect.isawaitable(result):
            result = await result
        return result


def hook(
    event: HookEventType | str,
    *,
    hook_id: str | None = None,
    priority: int = DEFAULT_PRIORITY,
    commands: tuple[str, ...] | list[str] = (),
    exclude: tuple[str, ...] | list[str] = (),
) -> Callable[[HookCallable], FunctionHook]:
    """Decorator turning a function into a `FunctionHook`.

    The function name is used as the id unless one is given.
    """

    hook_filter = None
    if commands or exclude:
        hook_filter = HookFilter(commands=tuple(commands), exclude=tuple(exclude))

    def decorator(func: HookCallable) -> FunctionHook:
        return FunctionHook(
            id=hook_id or func.__name__.replace("_", "-"),
            event=HookEventType(event),
            func=func,
            priority=priority,
            filter=hook_filter,
        )

    return decorator


@dataclass(frozen=True, slots=True)
class HookFailure:
    """A handler invocation that raised instead of returning a verdict."""

    hook: str
    error: Exception


@dataclass(slots=True)
class ExecutionResult:
    """Aggregated outcome of one pipeline run."""

    blocked: bool = False
    blocking_hook: str | None = None
    message: str | None = None
    modifications: dict[str, Any] = field(default_factory=dict)
    errors: list[HookFailure] = field(default_factory=list)
    executed: list[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "blocked": self.blocked,
            "blocking_hook": self.blocking_hook,
            "message": self.message,
            "modifications": self.modifications,
            "errors": [{"hook": f.hook, "error": str(f.error)} for f in self.errors],
            "executed": self.executed,
            "duration_ms": self.duration_ms,
        }
