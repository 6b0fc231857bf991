"""Hook execution pipeline for command line tools.

Extensions register handlers for lifecycle events (pre-command, post-command,
on-error, on-deploy); the executor runs the matching handlers in priority order
and aggregates their verdicts into one result.
"""

from loguru import logger

from cmdhooks.dispatch import CommandDispatcher
from cmdhooks.exception import (
    CmdHooksError,
    CommandBlockedError,
    ConfigError,
    DuplicateHookError,
    HookTimeoutError,
    InvalidHookError,
    ScriptHookError,
)
from cmdhooks.executor import HookExecutor
from cmdhooks.registry import HookRegistry
from cmdhooks.types import (
    Block,
    Continue,
    ExecutionResult,
    FunctionHook,
    HookAction,
    HookContext,
    HookEventType,
    HookFailure,
    HookFilter,
    HookHandler,
    HookResult,
    Modify,
    hook,
)

__all__ = [
    # Contract
    "HookEventType",
    "HookAction",
    "HookContext",
    "HookFilter",
    "HookHandler",
    "HookResult",
    "Continue",
    "Block",
    "Modify",
    "FunctionHook",
    "hook",
    # Registry
    "HookRegistry",
    # Executor
    "HookExecutor",
    "ExecutionResult",
    "HookFailure",
    # Dispatch
    "CommandDispatcher",
    # Errors
    "CmdHooksError",
    "DuplicateHookError",
    "InvalidHookError",
    "HookTimeoutError",
    "ScriptHookError",
    "ConfigError",
    "CommandBlockedError",
]

# Library logs stay silent until the host (or the CLI) enables them
logger.disable("cmdhooks")
