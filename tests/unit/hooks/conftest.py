from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from cmdhooks.executor import HookExecutor
from cmdhooks.registry import HookRegistry
from cmdhooks.types import (
    Continue,
    FunctionHook,
    HookContext,
    HookEventType,
    HookFilter,
    HookResult,
)


@pytest.fixture
def registry() -> HookRegistry:
    return HookRegistry()


@pytest.fixture
def executor(registry: HookRegistry) -> HookExecutor:
    return HookExecutor(registry)


@pytest.fixture
def context() -> HookContext:
    return HookContext(
        event=HookEventType.PRE_COMMAND,
        command="use",
        args=("sdlc",),
        cwd=Path("/test"),
        framework_root=Path("/framework"),
    )


@pytest.fixture
def make_hook() -> Callable[..., FunctionHook]:
    """Factory for handlers that record their id into `calls` before returning."""

    def factory(
        hook_id: str,
        *,
        priority: int = 100,
        event: HookEventType = HookEventType.PRE_COMMAND,
        result: HookResult | None = None,
        calls: list[str] | None = None,
        error: Exception | None = None,
        hook_filter: HookFilter | None = None,
    ) -> FunctionHook:
        async def run(ctx: HookContext) -> HookResult:
            if calls is not None:
                calls.append(hook_id)
            if error is not None:
                raise error
            return result or Continue()

        return FunctionHook(
            id=hook_id, event=event, func=run, priority=priority, filter=hook_filter
        )

    return factory
