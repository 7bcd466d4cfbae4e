from typing import Any


class PipelineException(Exception):
    """Base exception for pipeline errors."""


class InvalidPipelineError(PipelineException, TypeError):
    """Raised when a runner is built from something that is not a sequence of steps."""

    def __init__(self, message: str, value: Any) -> None:
        self.value = value
        super().__init__(f"missing or invalid pipeline parameter: {message}")


class MissingCallbackError(PipelineException, TypeError):
    """Raised when `run` is called without a callable final callback."""

    def __init__(self) -> None:
        super().__init__("missing a callback parameter")


class RunnerStateError(PipelineException, RuntimeError):
    """Raised when a runner is asked to start a run while another one is in flight."""

    def __init__(self, runner_name: str) -> None:
        self.runner_name = runner_name
        super().__init__(f"Runner '{runner_name}' is already running")


class CallbackAlreadyInvokedError(PipelineException, RuntimeError):
    """Exception raised when a step reports its outcome more than once.

    It carries the offending step, so the defective step can be identified from the
    traceback or from a test assertion.
    """

    def __init__(self, step: Any, step_name: str) -> None:
        self.cause = step
        self.step_name = step_name
        super().__init__(
            f"callback was already invoked by step '{step_name}', "
            "check err.cause for the offending function"
        )
