"""Defines the runner, which executes callback styled steps one after another.

    def fetch(context, next, stop, loop, save):
        client.get(context["url"], save("response"))

    def parse(context, next, stop, loop, save):
        context["document"] = json.loads(context["response"][0])
        next()

    runner = Runner.create([fetch, parse])
    runner.run(lambda error, context, stopped: ...)

Runners are reusable, but only one run may be in flight at a time.
"""

import asyncio
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
import functools
from typing import Annotated, Any, NamedTuple, final

from loguru import logger

from stepchain.context import Context, new_context
from stepchain.control import Continuation, Loop, Next, Operation, Save, Stop
from stepchain.errors import (
    CallbackAlreadyInvokedError,
    InvalidPipelineError,
    MissingCallbackError,
    RunnerStateError,
)
from stepchain.lifecycle import RunObserver
from stepchain.scheduling import AsyncioScheduler, Scheduler
from stepchain.steps import Runnable, step_name

type FinalCallback = Callable[[Exception | None, Context, bool], object]
"""Callback receiving `(error, context, stopped_by_user)` once a run is over."""


class RunnerStatus(Enum):
    """Status of a runner."""

    IDLE = "idle"
    RUNNING = "running"


class RunOutcome(NamedTuple):
    """Outcome of a run, as delivered to the final callback.

    Args:
        error: The error reported by a step, or None if the run succeeded.
        context: The context shared by the steps of the run.
        stopped_by_user: Whether a step ended the run early by calling `stop`.
    """

    error: Exception | None
    context: Context
    stopped_by_user: bool

    def succeeded(self) -> bool:
        """Check if the run finished without errors."""
        return self.error is None


@dataclass
class _RunState:
    """Internal record of the run in flight."""

    context: Annotated[Context, "The context shared by the steps."]
    callback: Annotated[FinalCallback, "The final callback supplied by the caller."]
    position: Annotated[int, "Index of the step being executed."] = 0
    stopped_by_user: Annotated[bool, "Whether a step called `stop`."] = False


@final
class Runner:
    """Executes a sequence of callback styled steps serially against a shared context.

    Each step is called as `step(context, next, stop, loop, save)` and must report
    its outcome exactly once through one of the control operations. Moving from one
    step to the next always goes through the scheduler, so a long pipeline never
    grows the call stack.

    Args:
        steps: The steps to run, in order. Defaults to an empty pipeline.
        name: Name used in logs and errors. Defaults to "pipeline".
        scheduler: The deferred continuation primitive. Defaults to an
            `AsyncioScheduler` bound to the loop running at scheduling time.
        observers: Observers notified of run and step lifecycle events.
        yield_on_loop: Whether `loop` re-enters the step on a later scheduler turn
            (the default) or synchronously.

    Raises:
        InvalidPipelineError: If `steps` is not a sequence of callables.
    """

    def __init__(
        self,
        steps: Sequence[Runnable] | None = None,
        *,
        name: str | None = None,
        scheduler: Scheduler | None = None,
        observers: Iterable[RunObserver] | None = None,
        yield_on_loop: bool = True,
    ) -> None:
        if steps is None:
            steps = ()
        if not isinstance(steps, Sequence) or isinstance(steps, (str, bytes, bytearray)):
            raise InvalidPipelineError(
                f"expected a sequence of steps, got {type(steps).__name__}", steps
            )
        for index, step in enumerate(steps):
            if not callable(step):
                raise InvalidPipelineError(
                    f"step at index {index} is not callable ({type(step).__name__})", steps
                )

        self._steps: tuple[Runnable, ...] = tuple(steps)
        self._name = name or "pipeline"
        self._scheduler: Scheduler = scheduler or AsyncioScheduler()
        self._observers: tuple[RunObserver, ...] = tuple(observers or ())
        self._yield_on_loop = yield_on_loop
        self._run: _RunState | None = None

        logger.debug(f"Creating runner '{self._name}' with {len(self._steps)} steps")

    @classmethod
    def create(cls, steps: Sequence[Runnable] | None = None, **options: Any) -> "Runner":
        """Create a runner. Equivalent to calling the constructor."""
        return cls(steps, **options)

    def __repr__(self) -> str:
        step_names = ", ".join(step_name(step) for step in self._steps)
        return f"{self._name}(steps=[{step_names}])"

    def __len__(self) -> int:
        return len(self._steps)

    @property
    def name(self) -> str:
        return self._name

    @property
    def steps(self) -> tuple[Runnable, ...]:
        """Get the steps of the runner."""
        return self._steps

    @property
    def status(self) -> RunnerStatus:
        return RunnerStatus.RUNNING if self._run is not None else RunnerStatus.IDLE

    @property
    def is_running(self) -> bool:
        return self._run is not None

    def run(
        self,
        context_or_callback: Context | FinalCallback | None = None,
        callback: FinalCallback | None = None,
    ) -> None:
        """Start a run.

        Accepts either `run(callback)`, which uses a fresh empty context, or
        `run(context, callback)`, which hands `context` itself back to the callback.
        The callback is always invoked from a later scheduler turn, never from
        within this call.

        Args:
            context_or_callback: The context for the run, or the final callback.
            callback: The final callback, when a context is given.

        Raises:
            MissingCallbackError: If no callable final callback is given.
            RunnerStateError: If a previous run has not completed yet.
        """
        if callback is None and callable(context_or_callback):
            context, callback = None, context_or_callback
        else:
            context = context_or_callback

        if not callable(callback):
            raise MissingCallbackError()

        if self._run is not None:
            raise RunnerStateError(self._name)

        run = _RunState(
            context=new_context() if context is None else context,
            callback=callback,
        )
        self._run = run

        logger.debug(f"Starting run of '{self._name}'")
        self._notify("on_run_start", run.context)

        if not self._steps:
            self._finish(run, None)
            return

        self._invoke(run)

    async def run_async(self, context: Context | None = None) -> RunOutcome:
        """Run the pipeline and wait for its outcome from a coroutine.

        Step errors are returned in the outcome rather than raised.

        The scheduler must make progress while the coroutine is suspended. The
        default `AsyncioScheduler` does so on the running loop. A
        `WorkQueueScheduler` has to be drained by another task or thread,
        otherwise the returned coroutine never completes.

        Args:
            context: Optional context for the run.

        Returns:
            The outcome of the run.

        Raises:
            RunnerStateError: If a previous run has not completed yet.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[RunOutcome] = loop.create_future()

        def resolve(outcome: RunOutcome) -> None:
            if not future.done():
                future.set_result(outcome)

        def on_finish(error: Exception | None, context: Context, stopped: bool) -> None:
            loop.call_soon_threadsafe(resolve, RunOutcome(error, context, stopped))

        if context is None:
            self.run(on_finish)
        else:
            self.run(context, on_finish)
        return await future

    def _step_id(self, name: str) -> str:
        return f"{self._name}.{name}"

    def _notify(self, hook: str, *args: Any) -> None:
        # Observer failures are logged and never reach the run.
        for observer in self._observers:
            try:
                getattr(observer, hook)(self, *args)
            except Exception:
                logger.exception(f"Observer {type(observer).__name__}.{hook} failed")

    def _invoke(self, run: _RunState) -> None:
        step = self._steps[run.position]
        name = step_name(step)
        continuation = Continuation(step, name, functools.partial(self._dispatch, run, name))

        logger.debug(f"{self._step_id(name)}: Starting step {run.position}")
        self._notify("on_step_start", name, run.position)

        try:
            step(
                run.context,
                continuation,
                continuation.stop,
                continuation.loop,
                continuation.save,
            )
        except CallbackAlreadyInvokedError:
            raise
        except Exception as error:
            if continuation.consumed:
                raise
            logger.debug(f"{self._step_id(name)}: Step raised {error!r}")
            continuation.next(error)

    def _dispatch(self, run: _RunState, name: str, operation: Operation) -> None:
        self._notify("on_step_finish", name, operation)

        match operation:
            case Stop():
                logger.debug(f"{self._step_id(name)}: Stopping")
                run.position = len(self._steps)
                run.stopped_by_user = True
                self._next(run, None)
            case Loop(error=error) if error is not None:
                self._finish(run, error)
            case Loop():
                logger.debug(f"{self._step_id(name)}: Looping")
                if self._yield_on_loop:
                    self._defer(run, functools.partial(self._invoke, run))
                else:
                    self._invoke(run)
            case Save(error=error) if error is not None:
                self._finish(run, error)
            case Save(key=key, values=values):
                logger.debug(f"{self._step_id(name)}: Saving {len(values)} values as '{key}'")
                run.context[key] = list(values)
                self._next(run, None)
            case Next(error=error):
                self._next(run, error)

    def _next(self, run: _RunState, error: Exception | None) -> None:
        if error is not None:
            self._finish(run, error)
            return

        if run.position + 1 >= len(self._steps):
            self._finish(run, None)
            return

        run.position += 1
        self._defer(run, functools.partial(self._invoke, run))

    def _defer(self, run: _RunState, callback: Callable[[], object]) -> None:
        try:
            self._scheduler.call_soon(callback)
        except Exception:
            # The run cannot make progress without its scheduler.
            self._run = None
            raise

    def _finish(self, run: _RunState, error: Exception | None) -> None:
        self._run = None
        outcome = RunOutcome(error, run.context, run.stopped_by_user)

        if error is not None:
            logger.debug(f"Run of '{self._name}' failed: {error!r}")
        elif run.stopped_by_user:
            logger.debug(f"Run of '{self._name}' stopped by a step")
        else:
            logger.debug(f"Run of '{self._name}' finished")

        self._notify("on_run_finish", outcome)

        self._scheduler.call_soon(functools.partial(run.callback, *outcome))
