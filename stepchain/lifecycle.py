"""Defines lifecycle hooks for runner execution."""

from typing import TYPE_CHECKING, Protocol

from stepchain.context import Context
from stepchain.control import Operation

if TYPE_CHECKING:
    from stepchain.runner import Runner, RunOutcome


class RunObserver(Protocol):
    """Observer protocol for run lifecycle events.

    Observers are notified synchronously by the runner, from the same turn that
    produced the event. They only watch: the flow of a run is decided by the steps
    alone.
    """

    def on_run_start(self, runner: "Runner", context: Context) -> None:
        """Called when a run starts.

        Args:
            runner: The runner that is starting.
            context: The context of the run.
        """
        ...

    def on_step_start(self, runner: "Runner", step_name: str, index: int) -> None:
        """Called right before a step is invoked, including loop re-entries.

        Args:
            runner: The runner the step belongs to.
            step_name: The name of the step.
            index: Position of the step in the pipeline.
        """
        ...

    def on_step_finish(self, runner: "Runner", step_name: str, operation: Operation) -> None:
        """Called when a step reports its outcome.

        Args:
            runner: The runner the step belongs to.
            step_name: The name of the step.
            operation: The control operation the step requested.
        """
        ...

    def on_run_finish(self, runner: "Runner", outcome: "RunOutcome") -> None:
        """Called when a run completes, fails or is stopped.

        It fires before the final callback is delivered.

        Args:
            runner: The runner that has finished.
            outcome: The outcome handed to the final callback.
        """
        ...


class IgnoreAllObserver:
    """A run observer that ignores every event.

    Useful as a base class for observers interested in a few events only.
    """

    def on_run_start(self, runner: "Runner", context: Context) -> None:
        return None

    def on_step_start(self, runner: "Runner", step_name: str, index: int) -> None:
        return None

    def on_step_finish(self, runner: "Runner", step_name: str, operation: Operation) -> None:
        return None

    def on_run_finish(self, runner: "Runner", outcome: "RunOutcome") -> None:
        return None
