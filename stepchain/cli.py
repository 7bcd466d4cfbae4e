"""CLI for running pipelines defined in importable modules."""

import asyncio
import importlib
import json
from typing import Any

from loguru import logger
import typer

from stepchain import __version__
from stepchain.config import LoggingObserver, StepchainSettings, configure_logging
from stepchain.runner import Runner

app = typer.Typer()


def _load_target(target: str) -> Any:
    """Loads `module:attribute` (the attribute may be dotted)."""
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise typer.BadParameter(f"Expected 'module:attribute', got '{target}'")

    try:
        value: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"Cannot import module '{module_name}': {e}") from e

    for part in attribute.split("."):
        try:
            value = getattr(value, part)
        except AttributeError as e:
            raise typer.BadParameter(f"'{target}' has no attribute '{part}'") from e
    return value


def _parse_context(raw: str | None) -> dict[str, Any] | None:
    if raw is None:
        return None
    try:
        context = json.loads(raw)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"Context is not valid JSON: {e}") from e
    if not isinstance(context, dict):
        raise typer.BadParameter("Context must be a JSON object")
    return context


def _build_runner(value: Any, name: str, yield_on_loop: bool) -> Runner:
    """Builds a logging runner from a runner or a sequence of steps."""
    if isinstance(value, Runner):
        steps, name = value.steps, value.name
    else:
        steps = value
    return Runner(
        steps,
        name=name,
        observers=[LoggingObserver()],
        yield_on_loop=yield_on_loop,
    )


@app.command("run")
def run_pipeline(
    target: str = typer.Argument(
        ..., help="Steps to run, as 'module:attribute' (a sequence of steps or a Runner)."
    ),
    context: str | None = typer.Option(
        None, "--context", "-c", help="JSON object used as the initial context."
    ),
    sync_loop: bool = typer.Option(
        False, "--sync-loop", help="Re-enter looping steps synchronously instead of yielding."
    ),
):
    """Runs a pipeline and prints its final context as JSON."""
    settings = StepchainSettings()
    configure_logging(settings)

    initial_context = _parse_context(context)
    value = _load_target(target)
    name = target.rpartition(":")[2]

    try:
        runner = _build_runner(
            value,
            name,
            settings.yield_on_loop and not sync_loop,
        )
    except TypeError as e:
        raise typer.BadParameter(str(e)) from e

    outcome = asyncio.run(runner.run_async(initial_context))

    typer.echo(json.dumps(outcome.context, default=str, indent=2))

    if not outcome.succeeded():
        logger.error(f"Pipeline '{runner.name}' failed: {outcome.error}")
        raise typer.Exit(code=1)


@app.command("version")
def version():
    """Prints the installed version."""
    typer.echo(__version__)


if __name__ == "__main__":
    app()
