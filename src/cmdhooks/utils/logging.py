from __future__ import annotations

import sys
from collections.abc import Mapping
from pathlib import Path
from typing import IO

from loguru import logger

PACKAGE = "cmdhooks"
ROOT_MODULE = ""


def configure_logging(
    sink: Path | IO[str] | None = None,
    *,
    level: str,
    module_levels: Mapping[str, str] | None = None,
    rotation: str = "06:00",
    retention: str = "10 days",
) -> None:
    """Replace the loguru sinks with one sink and turn on cmdhooks logging.

    `module_levels` maps dotted module names (`cmdhooks.executor`) to level
    names; `""` sets the default. A `Path` sink gets a rotating log file,
    anything else (stderr by default) is used as a stream.
    """
    levels = {ROOT_MODULE: _level_name(level)}
    for module, name in (module_levels or {}).items():
        levels[module.strip().rstrip(".")] = _level_name(name)

    logger.remove()
    logger.enable(PACKAGE)
    if isinstance(sink, Path):
        sink.parent.mkdir(parents=True, exist_ok=True)
        logger.add(sink, level="TRACE", filter=levels, rotation=rotation, retention=retention)
    else:
        logger.add(sink or sys.stderr, level="TRACE", filter=levels)
    logger.debug("Configured log levels: {levels}", levels=levels)


def _level_name(name: str) -> str:
    normalized = name.strip().upper()
    try:
        return logger.level(normalized).name
    except ValueError as exc:
        raise ValueError(f"Invalid log level '{name}'") from exc
