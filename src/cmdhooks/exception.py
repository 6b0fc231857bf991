from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cmdhooks.types import ExecutionResult


class CmdHooksError(Exception):
    """Base exception class for cmdhooks."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class DuplicateHookError(CmdHooksError, ValueError):
    """A handler id is already registered."""

    def __init__(self, hook_id: str):
        self.hook_id = hook_id
        super().__init__(f"Hook {hook_id} is already registered")


class InvalidHookError(CmdHooksError, ValueError):
    """Handler does not satisfy the hook contract."""

    pass


class HookTimeoutError(CmdHooksError, TimeoutError):
    """Handler did not finish in time."""

    pass


class ScriptHookError(CmdHooksError, RuntimeError):
    """External script hook failed."""

    pass


class ConfigError(CmdHooksError, ValueError):
    """Configuration error."""

    pass


class CommandBlockedError(CmdHooksError):
    """A pre-command hook vetoed the command."""

    def __init__(self, command: str, result: ExecutionResult):
        self.command = command
        self.result = result
        self.hook = result.blocking_hook
        super().__init__(result.message or f"Command {command} blocked by hook {self.hook}")
