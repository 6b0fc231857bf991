"""Rich rendering of registered hooks and pipeline results."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from cmdhooks.registry import handler_filter
from cmdhooks.types import ExecutionResult, HookFilter, HookHandler


def format_filter(hook_filter: HookFilter | None) -> str:
    if hook_filter is None:
        return "*"
    parts: list[str] = []
    if hook_filter.commands:
        parts.append(", ".join(hook_filter.commands))
    if hook_filter.exclude:
        parts.append("not " + ", ".join(hook_filter.exclude))
    return "; ".join(parts) or "*"


def build_hooks_table(handlers: Sequence[HookHandler]) -> Table:
    """Table of handlers, in the order given."""
    table = Table(border_style="dim", padding=(0, 1))
    table.add_column("Id", style="bold cyan")
    table.add_column("Event")
    table.add_column("Priority", justify="right")
    table.add_column("Commands")

    for handler in handlers:
        table.add_row(
            handler.id,
            str(getattr(handler.event, "value", handler.event)),
            str(handler.priority),
            format_filter(handler_filter(handler)),
        )
    return table


def build_result_display(result: ExecutionResult) -> RenderableType:
    lines: list[Text] = []
    if result.blocked:
        lines.append(Text(f"Blocked by {result.blocking_hook}: {result.message}", style="bold red"))
    else:
        lines.append(Text("Completed", style="green"))

    executed = ", ".join(result.executed) if result.executed else "(none)"
    lines.append(Text(f"Executed: {executed} ({result.duration_ms}ms)"))

    if result.modifications:
        lines.append(Text("Modifications:"))
        for key, value in result.modifications.items():
            lines.append(Text(f"  {key} = {value!r}"))

    for failure in result.errors:
        lines.append(Text(f"Error in {failure.hook}: {failure.error}", style="yellow"))

    return Group(*lines)
