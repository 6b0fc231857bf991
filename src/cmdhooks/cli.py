"""Command line interface for inspecting and running hook pipelines."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click
from rich.console import Console

from cmdhooks.config import load_hooks_config, register_hooks
from cmdhooks.exception import CmdHooksError
from cmdhooks.executor import HookExecutor
from cmdhooks.registry import HookRegistry
from cmdhooks.types import HookContext, HookEventType

_LOG_LEVEL_OPTION = "--log-level"

EVENT_CHOICE = click.Choice([event.value for event in HookEventType])

console = Console()


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(package_name="cmdhooks")
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Log debug information. Default: no.",
)
@click.option(
    "--log-level",
    "-L",
    "log_level_override",
    multiple=True,
    help=(
        "Override log level per module. Use `module=LEVEL` to target a specific module "
        "(e.g. `-L cmdhooks.executor=DEBUG`) or just `LEVEL` to change the default level."
    ),
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write logs to this file instead of stderr.",
)
def main(debug: bool, log_level_override: tuple[str, ...], log_file: Path | None):
    """Inspect and run command hook pipelines."""
    from cmdhooks.utils.logging import configure_logging

    try:
        configure_logging(
            log_file,
            level="TRACE" if debug else "WARNING",
            module_levels=_parse_log_levels(log_level_override),
        )
    except ValueError as exc:
        raise click.BadOptionUsage(_LOG_LEVEL_OPTION, str(exc)) from exc


def _load_registry(config_path: Path) -> HookRegistry:
    registry = HookRegistry()
    try:
        register_hooks(registry, load_hooks_config(config_path))
    except CmdHooksError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    return registry


@main.command("validate")
@click.argument("config_path", type=click.Path(path_type=Path))
def validate_cmd(config_path: Path):
    """Validate a hooks configuration file.

    Exit codes:
        0: Valid config
        1: Validation errors found
    """
    registry = _load_registry(config_path)
    click.echo(f"Valid config: {config_path} ({len(registry)} hook(s))")


@main.command("list")
@click.argument("config_path", type=click.Path(path_type=Path))
@click.option("--event", "-e", type=EVENT_CHOICE, default=None, help="Filter by event")
def list_cmd(config_path: Path, event: str | None):
    """List configured hooks in execution order."""
    from cmdhooks.display import build_hooks_table

    registry = _load_registry(config_path)
    if event is not None:
        handlers = registry.get_handlers(event)
    else:
        handlers = [h for kind in HookEventType for h in registry.get_handlers(kind)]

    if not handlers:
        click.echo("No hooks found.")
        return
    console.print(build_hooks_table(handlers))


@main.command("run")
@click.argument("config_path", type=click.Path(path_type=Path))
@click.argument("event", type=EVENT_CHOICE)
@click.argument("command")
@click.argument("args", nargs=-1)
@click.option(
    "--cwd",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Working directory passed to hooks. Default: current directory.",
)
@click.option(
    "--framework-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Framework root passed to hooks.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Per-hook timeout in seconds. Default: none.",
)
@click.option("--json", "-j", "output_json", is_flag=True, help="Output as JSON")
def run_cmd(
    config_path: Path,
    event: str,
    command: str,
    args: tuple[str, ...],
    cwd: Path | None,
    framework_root: Path | None,
    timeout: float | None,
    output_json: bool,
):
    """Run the hook pipeline for EVENT as if COMMAND was invoked.

    Exit codes:
        0: Pipeline completed
        1: A hook blocked the command (or the config is invalid)
    """
    from cmdhooks.display import build_result_display

    registry = _load_registry(config_path)
    executor = HookExecutor(registry, timeout=timeout)
    context = HookContext(
        event=HookEventType(event),
        command=command,
        args=args,
        cwd=(cwd or Path.cwd()).absolute(),
        framework_root=framework_root,
    )
    result = asyncio.run(executor.execute(context.event, context))

    if output_json:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        console.print(build_result_display(result))

    if result.blocked:
        sys.exit(1)


def _parse_log_levels(values: tuple[str, ...]) -> dict[str, str]:
    """`LEVEL` sets the default level, `module=LEVEL` one module; later values win."""
    levels: dict[str, str] = {}
    for raw in values:
        module, sep, level = raw.rpartition("=")
        module, level = module.strip(), level.strip()
        if (sep and not module) or not level:
            raise click.BadOptionUsage(
                _LOG_LEVEL_OPTION, f"Expected LEVEL or module=LEVEL, got '{raw}'"
            )
        levels[module] = level
    return levels


if __name__ == "__main__":
    main()
