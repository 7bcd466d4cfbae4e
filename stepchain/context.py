"""Definitions related to the context shared by the steps of a run."""

from collections.abc import MutableMapping
from typing import Any

type Context = MutableMapping[str, Any]
"""Context is the mutable mapping threaded through every step of a run.

It is created empty for each run unless the caller supplies one, in which case the
very same object is handed back to the final callback.

The context is mutable, meaning that steps are expected to read and write it. Only the step currently executing may touch it.
"""


def new_context() -> Context:
    """Create an empty context for a run."""
    return {}
