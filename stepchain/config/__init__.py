"""Configuration of settings and logging for pipeline runs."""

from stepchain.config.logging import LoggingObserver, configure_logging
from stepchain.config.settings import StepchainSettings

__all__ = [
    "LoggingObserver",
    "StepchainSettings",
    "configure_logging",
]
