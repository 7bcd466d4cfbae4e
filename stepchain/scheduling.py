"""Deferred continuation primitives used by the runner.

The runner never moves from one step to the next in the same call stack. Instead it
posts the continuation to a `Scheduler`, which runs it once the current synchronous
work has returned and before any timer based work.
"""

import asyncio
from collections import deque
from collections.abc import Callable
import threading
from typing import Protocol, final

type Callback = Callable[[], object]


class Scheduler(Protocol):
    """Protocol for anything able to run a zero-argument callback on a later turn."""

    def call_soon(self, callback: Callback) -> None:
        """Schedule `callback` to run after the current synchronous execution.

        Args:
            callback: The function to run. It receives no arguments.
        """
        ...


@final
class AsyncioScheduler:
    """Scheduler that posts callbacks to an asyncio event loop.

    Callbacks are posted with `call_soon_threadsafe`, so they keep FIFO order with
    other ready callbacks and may be scheduled from worker threads as well.

    Args:
        loop: The loop to post to. Defaults to the loop running when `call_soon`
            is called.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_soon(self, callback: Callback) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_soon_threadsafe(callback)


@final
class WorkQueueScheduler:
    """Scheduler backed by an explicit FIFO work queue.

    Nothing runs until the owner drains the queue with `run_once` or
    `run_until_idle`. This makes it suitable for hosts without an event loop and
    for deterministic tests.
    """

    def __init__(self) -> None:
        self._queue: deque[Callback] = deque()
        self._lock = threading.Lock()

    def call_soon(self, callback: Callback) -> None:
        with self._lock:
            self._queue.append(callback)

    @property
    def pending(self) -> int:
        """Number of callbacks waiting to run."""
        with self._lock:
            return len(self._queue)

    def run_once(self) -> bool:
        """Run the oldest queued callback.

        Returns:
            True if a callback ran, False if the queue was empty.
        """
        with self._lock:
            if not self._queue:
                return False
            callback = self._queue.popleft()
        callback()
        return True

    def run_until_idle(self, max_iterations: int | None = None) -> int:
        """Run queued callbacks until the queue is empty.

        Callbacks scheduled while draining are run as well.

        Args:
            max_iterations: Optional upper bound on the number of callbacks to run.

        Returns:
            The number of callbacks that ran.
        """
        count = 0
        while max_iterations is None or count < max_iterations:
            if not self.run_once():
                break
            count += 1
        return count
