"""Application settings using Pydantic Settings.

This module defines the StepchainSettings class which loads configuration
from environment variables and .env files using pydantic-settings.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class StepchainSettings(BaseSettings):
    """Settings for running pipelines from the command line.

    Attributes:
        debug (bool): Include variable values in logged tracebacks.
        log_level (LogLevel): Minimum level of the log records written to stderr.
        serialize_logs (bool): Write log records as JSON lines.
        yield_on_loop (bool): Re-enter looping steps on a later scheduler turn.
    """

    model_config = SettingsConfigDict(
        env_prefix="STEPCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Include variable values in logged tracebacks",
    )
    log_level: LogLevel = Field(
        default="INFO",
        description="Minimum log level",
    )
    serialize_logs: bool = Field(
        default=False,
        description="Serialize log records to JSON",
    )
    yield_on_loop: bool = Field(
        default=True,
        description="Whether `loop` yields to the scheduler before re-entering a step",
    )
