import os
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Inputs larger than this are analysed in parallel unless configured otherwise.
DEFAULT_PARALLEL_THRESHOLD = 10 * 1024 * 1024  # 10 MB


class EngineSettings(BaseSettings):
    """Execution settings for the parallel dispatcher."""

    model_config = SettingsConfigDict(env_prefix="ENGINE_", env_file=".env", extra="ignore")

    parallel_threshold_bytes: int = Field(
        default=DEFAULT_PARALLEL_THRESHOLD,
        ge=0,
        description="Inputs strictly larger than this many bytes run in parallel",
    )
    max_workers: int = Field(
        default_factory=lambda: os.cpu_count() or 1,
        ge=1,
        description="Size of the worker pool",
    )
    chunks_per_worker: int = Field(
        default=1,
        ge=1,
        description="Number of chunks handed to each worker",
    )
    executor: Literal["process", "thread"] = Field(
        default="process",
        description="Worker pool flavour. Processes give real CPU parallelism.",
    )

    @property
    def chunk_count(self) -> int:
        """Number of chunks a parallel run splits its input into."""
        return self.max_workers * self.chunks_per_worker


class AnalysisSettings(BaseSettings):
    """What to analyse and how to filter it."""

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_", env_file=".env", extra="ignore")

    input_path: Path | None = Field(default=None, description="Path to the log file to analyse")
    top_n: int = Field(default=5, description="Number of most frequent errors to report")
    errors_only: bool = Field(default=False, description="Keep only ERROR entries")
    search: str | None = Field(default=None, description="Substring to look for in messages")
    since: datetime | None = Field(default=None, description="Keep entries at or after this time")
    until: datetime | None = Field(default=None, description="Keep entries at or before this time")
    force_parallel: bool = Field(
        default=False,
        description="Run in parallel whatever the input size",
    )

    @field_validator("since", "until")
    @classmethod
    def validate_naive(cls, v: datetime | None) -> datetime | None:
        """Reject bounds with a timezone; log timestamps carry none."""
        if v is not None and v.tzinfo is not None:
            raise ValueError("time window bounds must not carry a timezone")
        return v

    @model_validator(mode="after")
    def validate_top_n(self) -> "AnalysisSettings":
        """Ensure top_n is not negative."""
        if self.top_n < 0:
            raise ValueError(f"top_n must be zero or positive, got {self.top_n}")
        return self

    @model_validator(mode="after")
    def validate_window(self) -> "AnalysisSettings":
        """Ensure the time window is not inverted."""
        if self.since and self.until and self.until < self.since:
            raise ValueError(
                f"Invalid time window: until ({self.until}) is before since ({self.since})"
            )
        return self


class Settings(BaseSettings):
    """Top-level settings for a loglyzer run.

    Groups the engine and analysis sections under one object. Values come
    from keyword arguments first, then environment variables, then `.env`,
    then the defaults below.

    Example .env file:
        APP_LOG_LEVEL=DEBUG
        ANALYSIS_INPUT_PATH=/var/log/app.log
        ANALYSIS_TOP_N=10
        ENGINE_MAX_WORKERS=4
        ENGINE_EXECUTOR=thread
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    name: str = Field(default="loglyzer", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Sub-configurations
    engine: EngineSettings = Field(default_factory=EngineSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings, parsed on first call.

    Tests reset it with ``get_settings.cache_clear()``.
    """
    return Settings()
