"""Configuration and setup for logging of pipeline runs."""

import sys

from loguru import logger

from stepchain.config.settings import StepchainSettings
from stepchain.context import Context
from stepchain.control import Loop, Next, Operation, Save, Stop
from stepchain.lifecycle import IgnoreAllObserver
from stepchain.runner import Runner, RunOutcome


class LoggingObserver(IgnoreAllObserver):
    """Observer that logs run events."""

    def _format_runner_and_step(self, runner: Runner, step_name: str) -> str:
        return f"{runner.name}.{step_name}"

    def on_run_start(self, runner: Runner, context: Context) -> None:
        with logger.contextualize(runner_name=runner.name):
            logger.info(
                "Starting pipeline '{runner_name}' with {count} steps",
                runner_name=runner.name,
                count=len(runner),
            )

    def on_step_start(self, runner: Runner, step_name: str, index: int) -> None:
        with logger.contextualize(runner_name=runner.name, step_name=step_name, index=index):
            logger.info(f"{self._format_runner_and_step(runner, step_name)}: Starting step")

    def on_step_finish(self, runner: Runner, step_name: str, operation: Operation) -> None:
        label = self._format_runner_and_step(runner, step_name)
        with logger.contextualize(
            runner_name=runner.name, step_name=step_name, operation=type(operation).__name__
        ):
            match operation:
                case Next(error=None):
                    logger.info(f"{label}: Step completed successfully")
                case Stop():
                    logger.info(f"{label}: Step stopped the pipeline")
                case Loop(error=None):
                    logger.info(f"{label}: Step requested another iteration")
                case Save(error=None, key=key):
                    logger.info(f"{label}: Step saved results as '{key}'")
                case Next(error=error) | Loop(error=error) | Save(error=error):
                    logger.error(f"{label}: {error}")

    def on_run_finish(self, runner: Runner, outcome: RunOutcome) -> None:
        with logger.contextualize(
            runner_name=runner.name,
            result_succeeded=outcome.succeeded(),
            stopped_by_user=outcome.stopped_by_user,
        ):
            if not outcome.succeeded():
                logger.warning(
                    "Pipeline '{runner_name}' finished with errors", runner_name=runner.name
                )
            elif outcome.stopped_by_user:
                logger.success(
                    "Pipeline '{runner_name}' was stopped by a step", runner_name=runner.name
                )
            else:
                logger.success(
                    "Pipeline '{runner_name}' finished successfully", runner_name=runner.name
                )


def configure_logging(settings: StepchainSettings) -> None:
    logger.remove()  # Remove default handler
    logger.enable("stepchain")

    logger.add(
        sys.stderr,
        serialize=settings.serialize_logs,
        level=settings.log_level,
        backtrace=True,
        diagnose=settings.debug,  # Include variable values only in debug mode
    )
