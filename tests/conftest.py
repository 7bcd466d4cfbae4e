"""Shared fixtures for stepchain tests."""

from collections.abc import Callable, Generator
from typing import Any

from loguru import logger
import pytest

from stepchain import Context, RunOutcome, WorkQueueScheduler

# ============================================================================
# Scheduling
# ============================================================================


@pytest.fixture
def scheduler() -> WorkQueueScheduler:
    """A work queue scheduler, drained explicitly by the tests."""
    return WorkQueueScheduler()


# ============================================================================
# Final callbacks
# ============================================================================


@pytest.fixture
def outcomes() -> list[RunOutcome]:
    """Outcomes delivered to the `record` callback, in delivery order."""
    return []


@pytest.fixture
def record(outcomes: list[RunOutcome]) -> Callable[[Exception | None, Context, bool], None]:
    """A final callback that appends every outcome it receives to `outcomes`."""

    def callback(error: Exception | None, context: Context, stopped: bool) -> None:
        outcomes.append(RunOutcome(error, context, stopped))

    return callback


# ============================================================================
# Logging
# ============================================================================


@pytest.fixture
def log_messages() -> Generator[list[dict[str, Any]], None, None]:
    """Records emitted by loguru while the test runs."""
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="TRACE")
    logger.enable("stepchain")
    yield records
    logger.disable("stepchain")
    logger.remove(handler_id)
