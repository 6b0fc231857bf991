"""Hook handler backed by an external shell command."""

from __future__ import annotations

import asyncio
import contextlib
import json
import os
import signal
from dataclasses import dataclass, field
from typing import Any

from cmdhooks.exception import HookTimeoutError, ScriptHookError
from cmdhooks.types import (
    DEFAULT_PRIORITY,
    Block,
    Continue,
    HookAction,
    HookContext,
    HookEventType,
    HookFilter,
    HookResult,
    Modify,
)
from cmdhooks.utils.logging import logger

BLOCK_EXIT_CODE = 2

_POSIX = os.name == "posix"


def _kill_process_tree(proc: asyncio.subprocess.Process) -> None:
    """Kill the shell and everything it started (its own session on POSIX)."""
    if _POSIX:
        with contextlib.suppress(ProcessLookupError):
            os.killpg(proc.pid, signal.SIGKILL)
    else:
        proc.kill()


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of command execution."""

    exit_code: int
    stdout: str
    stderr: str


@dataclass(slots=True, kw_only=True)
class ScriptHook:
    """Runs `command` through the shell and turns its output into a verdict.

    The context is written to stdin as JSON. Exit code semantics:
    - 0: parse stdout JSON for `action`, `message` and `data`
    - 2: block, stderr as message
    - other: the hook failed
    """

    id: str
    event: HookEventType
    command: str
    priority: int = DEFAULT_PRIORITY
    filter: HookFilter | None = None
    timeout: int = 30000  # milliseconds
    env: dict[str, str] = field(default_factory=dict)
    description: str | None = None

    async def execute(self, context: HookContext) -> HookResult:
        env = os.environ.copy()
        env.update(self.env)
        env["CMDHOOKS_EVENT"] = context.event.value
        env["CMDHOOKS_COMMAND"] = context.command
        env["CMDHOOKS_CWD"] = str(context.cwd)
        env["CMDHOOKS_HOOK_ID"] = self.id
        if context.framework_root is not None:
            env["CMDHOOKS_FRAMEWORK_ROOT"] = str(context.framework_root)

        input_data = json.dumps(context.to_dict(), default=str)

        proc = await asyncio.create_subprocess_shell(
            self.command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
            cwd=str(context.cwd),
            start_new_session=_POSIX,
        )

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(input=input_data.encode()),
                timeout=self.timeout / 1000,
            )
        except TimeoutError as e:
            _kill_process_tree(proc)
            await proc.wait()
            raise HookTimeoutError(f"Hook {self.id} timed out after {self.timeout}ms") from e
        except asyncio.CancelledError:
            # Executor deadline or caller cancellation
            _kill_process_tree(proc)
            raise

        return self.parse_result(
            CommandResult(
                exit_code=proc.returncode or 0,
                stdout=stdout.decode(errors="replace"),
                stderr=stderr.decode(errors="replace"),
            )
        )

    def parse_result(self, result: CommandResult) -> HookResult:
        """Parse command execution result."""
        stderr = result.stderr.strip()

        if result.exit_code == BLOCK_EXIT_CODE:
            return Block(stderr or f"Blocked by hook {self.id}")

        if result.exit_code != 0:
            raise ScriptHookError(
                f"Hook {self.id} exited with code {result.exit_code}"
                + (f": {stderr}" if stderr else "")
            )

        stdout = result.stdout.strip()
        if not stdout:
            return Continue()
        try:
            output: Any = json.loads(stdout)
        except json.JSONDecodeError:
            # Plain text output carries no verdict
            logger.debug("Hook {id} printed non-JSON output, continuing", id=self.id)
            return Continue()
        if not isinstance(output, dict):
            raise ScriptHookError(f"Hook {self.id} printed {type(output).__name__}, expected object")

        return self._verdict_from_output(output)

    def _verdict_from_output(self, output: dict[str, Any]) -> HookResult:
        raw_action = output.get("action", HookAction.CONTINUE.value)
        try:
            action = HookAction(raw_action)
        except ValueError as e:
            raise ScriptHookError(f"Hook {self.id} returned invalid action '{raw_action}'") from e

        match action:
            case HookAction.CONTINUE:
                return Continue()
            case HookAction.BLOCK:
                return Block(str(output.get("message") or f"Blocked by hook {self.id}"))
            case HookAction.MODIFY:
                data = output.get("data")
                if not isinstance(data, dict):
                    raise ScriptHookError(f"Hook {self.id} returned modify without object data")
                return Modify(data)
