from loguru import logger

from stepchain.context import Context
from stepchain.control import Continuation, Loop, Next, Operation, Save, Stop
from stepchain.errors import (
    CallbackAlreadyInvokedError,
    InvalidPipelineError,
    MissingCallbackError,
    PipelineException,
    RunnerStateError,
)
from stepchain.lifecycle import IgnoreAllObserver, RunObserver
from stepchain.runner import FinalCallback, Runner, RunnerStatus, RunOutcome
from stepchain.scheduling import AsyncioScheduler, Scheduler, WorkQueueScheduler
from stepchain.steps import Runnable, Step, step_name

__version__ = "0.3.0"

create = Runner.create

logger.disable("stepchain")

__all__ = [
    # Core types
    "Runner",
    "Step",
    "Runnable",
    "Context",
    "create",
    "step_name",
    # Execution
    "RunOutcome",
    "RunnerStatus",
    "FinalCallback",
    # Control operations
    "Continuation",
    "Operation",
    "Next",
    "Stop",
    "Loop",
    "Save",
    # Scheduling
    "Scheduler",
    "AsyncioScheduler",
    "WorkQueueScheduler",
    # Lifecycle
    "RunObserver",
    "IgnoreAllObserver",
    # Errors
    "PipelineException",
    "InvalidPipelineError",
    "MissingCallbackError",
    "RunnerStateError",
    "CallbackAlreadyInvokedError",
]
