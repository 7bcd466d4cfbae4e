"""Control operations a step uses to report its outcome.

Every call a step makes on its continuation is turned into one tagged operation
(`Next`, `Stop`, `Loop` or `Save`) and handed to the runner, which decides what
happens next. A continuation accepts a single operation; anything after that is a
defect in the step and raises `CallbackAlreadyInvokedError`.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, final

from stepchain.errors import CallbackAlreadyInvokedError


@dataclass(frozen=True)
class Next:
    """Advance to the following step, or abort the run when `error` is set."""

    error: Exception | None = None


@dataclass(frozen=True)
class Stop:
    """End the run successfully, skipping the remaining steps."""


@dataclass(frozen=True)
class Loop:
    """Invoke the current step again, or abort the run when `error` is set."""

    error: Exception | None = None


@dataclass(frozen=True)
class Save:
    """Store `values` under `key` in the context and advance, or abort on `error`."""

    key: str
    values: tuple[Any, ...] = field(default_factory=tuple)
    error: Exception | None = None


type Operation = Next | Stop | Loop | Save
"""Tagged union of the operations a step may request."""

type StopFn = Callable[[], None]
type LoopFn = Callable[..., None]
type SaveCallback = Callable[..., None]
type SaveFn = Callable[[str], SaveCallback]


@final
class Continuation:
    """One-shot handle given to a single step invocation.

    It is callable (calling it is the same as calling `next`) and also exposes the
    four control operations as methods, so a step may either take them as separate
    positional arguments or use them through this single object.

    Args:
        step: The step this continuation belongs to.
        step_name: Readable name of the step, used in error messages.
        dispatch: Receives the operation once the step reports its outcome.
    """

    def __init__(
        self, step: Any, step_name: str, dispatch: Callable[[Operation], None]
    ) -> None:
        self._step = step
        self._step_name = step_name
        self._dispatch = dispatch
        self._consumed = False

    def __repr__(self) -> str:
        return f"Continuation(step={self._step_name}, consumed={self._consumed})"

    def __call__(self, error: Exception | None = None) -> None:
        self.next(error)

    @property
    def consumed(self) -> bool:
        """Whether the step already reported its outcome."""
        return self._consumed

    def next(self, error: Exception | None = None) -> None:
        self._resolve(Next(error))

    def stop(self) -> None:
        self._resolve(Stop())

    def loop(self, error: Exception | None = None) -> None:
        self._resolve(Loop(error))

    def save(self, key: str) -> SaveCallback:
        """Build a callback in the `(error, *values)` shape for `key`.

        The continuation is only consumed when the returned callback is invoked.
        """

        def callback(error: Exception | None = None, *values: Any) -> None:
            self._resolve(Save(key, values, error))

        return callback

    def _resolve(self, operation: Operation) -> None:
        if self._consumed:
            raise CallbackAlreadyInvokedError(self._step, self._step_name)
        self._consumed = True
        self._dispatch(operation)
