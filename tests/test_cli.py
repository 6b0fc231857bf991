from __future__ import annotations

import json
import sys

import pytest
from click.testing import CliRunner
from loguru import logger

from cmdhooks.cli import main

CONFIG = """
hooks:
  - id: tracer
    event: pre-command
    priority: 50
    command: 'echo ''{"action": "modify", "data": {"traced": true}}'''
  - id: guard
    event: pre-command
    priority: 100
    command: 'echo "$CMDHOOKS_COMMAND is not allowed" >&2; exit 2'
    filter:
      commands: [deploy]
  - id: notify
    event: on-deploy
    command: 'true'
"""


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "hooks.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger.remove()
    logger.disable("cmdhooks")


class TestValidate:
    def test_valid(self, runner, config_path):
        result = runner.invoke(main, ["validate", str(config_path)])
        assert result.exit_code == 0
        assert "3 hook(s)" in result.output

    def test_invalid(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("hooks:\n  - event: nope\n    command: x\n", encoding="utf-8")
        result = runner.invoke(main, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Invalid hooks config" in result.output

    def test_missing(self, runner, tmp_path):
        result = runner.invoke(main, ["validate", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestList:
    def test_lists_all(self, runner, config_path):
        result = runner.invoke(main, ["list", str(config_path)])
        assert result.exit_code == 0
        for hook_id in ("tracer", "guard", "notify"):
            assert hook_id in result.output

    def test_filter_by_event(self, runner, config_path):
        result = runner.invoke(main, ["list", str(config_path), "--event", "on-deploy"])
        assert result.exit_code == 0
        assert "notify" in result.output
        assert "tracer" not in result.output

    def test_empty(self, runner, tmp_path):
        path = tmp_path / "hooks.yaml"
        path.write_text("hooks: []\n", encoding="utf-8")
        result = runner.invoke(main, ["list", str(path)])
        assert result.exit_code == 0
        assert "No hooks found." in result.output


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell required")
class TestRun:
    def test_completed_json(self, runner, config_path, tmp_path):
        result = runner.invoke(
            main,
            ["run", str(config_path), "pre-command", "use", "sdlc", "--cwd", str(tmp_path), "-j"],
        )
        assert result.exit_code == 0
        output = json.loads(result.stdout)
        assert output["blocked"] is False
        assert output["executed"] == ["tracer"]
        assert output["modifications"] == {"traced": True}

    def test_blocked(self, runner, config_path, tmp_path):
        result = runner.invoke(
            main,
            ["run", str(config_path), "pre-command", "deploy", "--cwd", str(tmp_path), "--json"],
        )
        assert result.exit_code == 1
        output = json.loads(result.stdout)
        assert output["blocked"] is True
        assert output["blocking_hook"] == "guard"
        assert output["message"] == "deploy is not allowed"

    def test_rich_output(self, runner, config_path, tmp_path):
        result = runner.invoke(
            main, ["run", str(config_path), "on-deploy", "deploy", "--cwd", str(tmp_path)]
        )
        assert result.exit_code == 0
        assert "Completed" in result.output
        assert "notify" in result.output

    def test_unknown_event(self, runner, config_path):
        result = runner.invoke(main, ["run", str(config_path), "pre-session", "use"])
        assert result.exit_code == 2


class TestLogLevelOption:
    def test_invalid_level(self, runner, config_path):
        result = runner.invoke(main, ["-L", "verbose-ish", "validate", str(config_path)])
        assert result.exit_code == 2
        assert "Invalid log level" in result.output
