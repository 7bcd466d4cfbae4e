import functools
from typing import TYPE_CHECKING, Any, Protocol

from stepchain.context import Context

if TYPE_CHECKING:
    from stepchain.control import Continuation, LoopFn, SaveFn, StopFn


class Runnable(Protocol):
    """Runnable is a protocol that defines the contract for anything that can be executed as a step.

    It takes the shared context and the continuation of the current invocation, and must eventually report its outcome by calling exactly one of the control operations.
    """

    def __call__(
        self,
        context: Context,
        next: "Continuation",
        stop: "StopFn",
        loop: "LoopFn",
        save: "SaveFn",
    ) -> Any:
        """Invoke the runnable with the given context.

        Args:
            context: The context shared by all steps of the run.
            next: The continuation; also exposes `.next`, `.stop`, `.loop` and `.save`.
            stop: Ends the run successfully, flagging it as stopped by the user.
            loop: Re-invokes the current step.
            save: Builds a callback that stores its values under a key.
        """
        ...


class Step:
    """Step gives a name to a runnable so it shows up in logs and errors.

    Plain functions can be used as steps directly; wrapping them is only needed when
    the function name is not descriptive (lambdas, partials, callable objects).

    Args:
        name: The name of the step.
        runnable: The runnable operation to execute in this step.
    """

    def __init__(self, name: str, runnable: Runnable) -> None:
        self.name = name
        self.runnable = runnable

    def __repr__(self) -> str:
        return f"Step(name={self.name})"

    def __call__(
        self,
        context: Context,
        next: "Continuation",
        stop: "StopFn",
        loop: "LoopFn",
        save: "SaveFn",
    ) -> Any:
        return self.runnable(context, next, stop, loop, save)


def step_name(step: Any) -> str:
    """Get a readable name for a step, used for logging and error reporting."""
    if isinstance(step, Step):
        return step.name
    if isinstance(step, functools.partial):
        return step_name(step.func)
    name = getattr(step, "__name__", None)
    if name:
        return name
    return type(step).__name__
