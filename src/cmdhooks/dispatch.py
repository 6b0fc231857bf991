from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Any

from cmdhooks.exception import CommandBlockedError
from cmdhooks.executor import HookExecutor
from cmdhooks.types import ExecutionResult, HookContext, HookEventType
from cmdhooks.utils.logging import logger

CommandFunc = Callable[[HookContext, dict[str, Any]], Awaitable[Any] | Any]


class CommandDispatcher:
    """Wraps command execution with the pre-command, post-command and on-error hooks."""

    def __init__(
        self,
        executor: HookExecutor,
        *,
        cwd: Path | None = None,
        framework_root: Path | None = None,
    ) -> None:
        self.executor = executor
        self.cwd = cwd or Path.cwd()
        self.framework_root = framework_root

    def make_context(
        self,
        event: HookEventType | str,
        command: str,
        args: Sequence[str] = (),
        *,
        data: Any = None,
        error: BaseException | None = None,
    ) -> HookContext:
        return HookContext(
            event=HookEventType(event),
            command=command,
            args=tuple(args),
            cwd=self.cwd,
            framework_root=self.framework_root,
            error=error,
            data=data,
        )

    async def emit(
        self,
        event: HookEventType | str,
        command: str,
        args: Sequence[str] = (),
        *,
        data: Any = None,
        error: BaseException | None = None,
    ) -> ExecutionResult:
        """Fire one pipeline run and surface handler failures in the log."""
        context = self.make_context(event, command, args, data=data, error=error)
        result = await self.executor.execute(context.event, context)
        for failure in result.errors:
            logger.warning(
                "Hook {hook} failed during {event} for {command}: {error}",
                hook=failure.hook,
                event=context.event.value,
                command=command,
                error=failure.error,
            )
        return result

    async def dispatch(
        self,
        command: str,
        args: Sequence[str],
        func: CommandFunc,
    ) -> Any:
        """Run `func` for `command` between its lifecycle hooks.

        `func` receives the pre-command context and the accumulated
        modifications. Raises `CommandBlockedError` if a pre-command hook
        blocks; errors raised by `func` are re-raised after the on-error hooks.
        """
        pre = await self.emit(HookEventType.PRE_COMMAND, command, args)
        if pre.blocked:
            raise CommandBlockedError(command, pre)

        context = self.make_context(HookEventType.PRE_COMMAND, command, args)
        try:
            value = func(context, dict(pre.modifications))
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            await self.emit(HookEventType.ON_ERROR, command, args, error=e)
            raise

        await self.emit(HookEventType.POST_COMMAND, command, args, data=value)
        return value

    async def deploy(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        data: Any = None,
    ) -> ExecutionResult:
        """Fire the on-deploy hooks for a deployment-style action."""
        return await self.emit(HookEventType.ON_DEPLOY, command, args, data=data)
