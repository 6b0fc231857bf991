"""Executor running one ordered walk of the handlers registered for an event."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping

from cmdhooks.exception import HookTimeoutError
from cmdhooks.registry import HookRegistry, coerce_event
from cmdhooks.types import (
    Block,
    Continue,
    ExecutionResult,
    HookContext,
    HookEventType,
    HookFailure,
    HookHandler,
    HookResult,
    Modify,
)
from cmdhooks.utils.logging import logger


class HookExecutor:
    """Runs the pipeline for one event/context pair.

    Handlers are awaited strictly one at a time in ascending priority order.
    A `Block` verdict stops the walk; a raising handler is recorded in
    `errors` and the walk goes on.
    """

    def __init__(self, registry: HookRegistry, *, timeout: float | None = None):
        self.registry = registry
        # Seconds allowed per handler; None waits forever.
        self.timeout = timeout

    async def execute(
        self,
        event: HookEventType | str,
        context: HookContext,
    ) -> ExecutionResult:
        """Execute every handler matching `event` and `context.command`.

        Args:
            event: Event kind being fired
            context: Invocation context handed to each handler

        Returns:
            ExecutionResult aggregating the verdicts
        """
        event = coerce_event(event)
        # Worklist is fixed for the whole run.
        handlers = self.registry.get_handlers(event, context.command)
        result = ExecutionResult()
        if not handlers:
            return result

        logger.debug(
            "Executing {count} hooks for {event} ({command})",
            count=len(handlers),
            event=event.value,
            command=context.command,
        )
        start_time = time.monotonic()

        for handler in handlers:
            result.executed.append(handler.id)
            try:
                verdict = await self._invoke(handler, context)
            except Exception as e:
                logger.opt(exception=e).warning(
                    "Hook {id} failed: {error}", id=handler.id, error=e
                )
                result.errors.append(HookFailure(hook=handler.id, error=e))
                continue

            match verdict:
                case Continue():
                    pass
                case Block(message=message):
                    result.blocked = True
                    result.blocking_hook = handler.id
                    result.message = message
                    logger.info(
                        "Hook {id} blocked {event} for {command}: {message}",
                        id=handler.id,
                        event=event.value,
                        command=context.command,
                        message=message,
                    )
                    break
                case Modify(data=data):
                    result.modifications.update(data)

        result.duration_ms = int((time.monotonic() - start_time) * 1000)
        logger.debug(
            "Finished {event}: executed={executed} blocked={blocked} errors={errors}",
            event=event.value,
            executed=result.executed,
            blocked=result.blocked,
            errors=len(result.errors),
        )
        return result

    async def execute_context(self, context: HookContext) -> ExecutionResult:
        """Execute the pipeline for the event carried by `context`."""
        return await self.execute(context.event, context)

    async def _invoke(self, handler: HookHandler, context: HookContext) -> HookResult:
        if self.timeout is None:
            verdict = await handler.execute(context)
        else:
            try:
                async with asyncio.timeout(self.timeout) as deadline:
                    verdict = await handler.execute(context)
            except TimeoutError as e:
                # Raised by the handler itself
                if not deadline.expired():
                    raise
                raise HookTimeoutError(
                    f"Hook {handler.id} timed out after {self.timeout}s"
                ) from e

        if not isinstance(verdict, Continue | Block | Modify):
            raise TypeError(f"Hook {handler.id} returned {verdict!r}, expected a hook result")
        if isinstance(verdict, Modify) and not isinstance(verdict.data, Mapping):
            raise TypeError(
                f"Hook {handler.id} returned modify with {type(verdict.data).__name__} data, "
                "expected a mapping"
            )
        return verdict
