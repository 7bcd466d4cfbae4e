"""Tests for the stepchain CLI commands."""

from collections.abc import Generator
import json
import sys
import types
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from stepchain import Runner, __version__
from stepchain.cli import app


@pytest.fixture
def runner() -> CliRunner:
    """Fixture providing a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def mock_configure_logging() -> Generator[MagicMock, None, None]:
    """Keeps the CLI from replacing the loguru handlers of the test session."""
    with patch("stepchain.cli.configure_logging") as mock:
        yield mock


@pytest.fixture
def pipeline_module(monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    """An importable module exposing a few pipelines."""
    module = types.ModuleType("sample_pipelines")

    def greet(context, next, stop, loop, save):
        context["greeting"] = f"hello {context.get('name', 'world')}"
        next()

    def count(context, next, stop, loop, save):
        context["count"] = context.get("count", 0) + 1
        if context["count"] < 3:
            loop()
        else:
            next()

    def fail(context, next, stop, loop, save):
        next(ValueError("boom"))

    module.STEPS = [greet, count]
    module.FAILING = [greet, fail]
    module.RUNNER = Runner([greet], name="greeter")
    module.NOT_STEPS = "greet"
    module.nested = types.SimpleNamespace(STEPS=[greet])

    monkeypatch.setitem(sys.modules, "sample_pipelines", module)
    return module


class DescribeRunCommand:
    """Tests for the `run` command."""

    def it_prints_the_final_context(self, runner: CliRunner, pipeline_module) -> None:
        result = runner.invoke(app, ["run", "sample_pipelines:STEPS"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"greeting": "hello world", "count": 3}

    def it_configures_logging(
        self, runner: CliRunner, pipeline_module, mock_configure_logging: MagicMock
    ) -> None:
        runner.invoke(app, ["run", "sample_pipelines:STEPS"])

        mock_configure_logging.assert_called_once()

    def it_seeds_the_context_from_json(self, runner: CliRunner, pipeline_module) -> None:
        result = runner.invoke(
            app, ["run", "sample_pipelines:STEPS", "--context", '{"name": "ada"}']
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["greeting"] == "hello ada"

    def it_runs_loops_synchronously_when_asked_to(
        self, runner: CliRunner, pipeline_module
    ) -> None:
        result = runner.invoke(app, ["run", "sample_pipelines:STEPS", "--sync-loop"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["count"] == 3

    def it_accepts_a_runner(self, runner: CliRunner, pipeline_module) -> None:
        result = runner.invoke(app, ["run", "sample_pipelines:RUNNER"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"greeting": "hello world"}

    def it_resolves_dotted_attributes(self, runner: CliRunner, pipeline_module) -> None:
        result = runner.invoke(app, ["run", "sample_pipelines:nested.STEPS"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"greeting": "hello world"}

    def it_exits_with_an_error_when_a_step_fails(
        self, runner: CliRunner, pipeline_module
    ) -> None:
        result = runner.invoke(app, ["run", "sample_pipelines:FAILING"])

        assert result.exit_code == 1
        assert json.loads(result.stdout) == {"greeting": "hello world"}

    @pytest.mark.parametrize(
        "args",
        [
            ["run", "sample_pipelines"],
            ["run", "sample_pipelines:MISSING"],
            ["run", "missing_module_for_tests:STEPS"],
            ["run", "sample_pipelines:NOT_STEPS"],
            ["run", "sample_pipelines:STEPS", "--context", "{not json"],
            ["run", "sample_pipelines:STEPS", "--context", "[1, 2]"],
        ],
    )
    def it_rejects_bad_parameters(
        self, runner: CliRunner, pipeline_module, args: list[str]
    ) -> None:
        result = runner.invoke(app, args)

        assert result.exit_code == 2


class DescribeVersionCommand:
    def it_prints_the_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert result.stdout.strip() == __version__
