"""Schemas for analysis results - immutable, handed to the output layer."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from loglyzer.services.dispatch import ExecutionMode
from loglyzer.services.logparser import LogLevel, ParseFailure


@dataclass(frozen=True)
class LevelCount:
    """Number of entries at one level."""

    level: LogLevel
    count: int


@dataclass(frozen=True)
class ErrorFrequency:
    """One ranked error message."""

    message: str
    count: int


@dataclass(frozen=True)
class HourlyBucket:
    """Entries falling in one hour.

    ``error_rate`` is ``errors / total`` for that hour, between 0 and 1.
    """

    hour: datetime
    total: int
    errors: int
    error_rate: float


@dataclass(frozen=True)
class AnalysisReport:
    """Final statistics for one run.

    Identical for a given input and request whatever the execution mode or
    chunking. Created once per run and never mutated.
    """

    total_entries: int
    skipped_lines: int
    by_level: tuple[LevelCount, ...]
    top_errors: tuple[ErrorFrequency, ...]
    hourly: tuple[HourlyBucket, ...]
    since: datetime | None = None
    until: datetime | None = None

    @property
    def is_empty(self) -> bool:
        """True when no entry passed the filters."""
        return self.total_entries == 0

    @property
    def level_counts(self) -> dict[LogLevel, int]:
        return {item.level: item.count for item in self.by_level}

    @property
    def errors_by_hour(self) -> dict[datetime, int]:
        """Hours with at least one error, mapped to their error count."""
        return {bucket.hour: bucket.errors for bucket in self.hourly if bucket.errors}

    @property
    def error_rate_by_hour(self) -> dict[datetime, float]:
        return {bucket.hour: bucket.error_rate for bucket in self.hourly}


@dataclass(frozen=True)
class AnalysisResult:
    """Report plus everything the caller needs alongside it.

    Run metadata lives here rather than in the report so that reports compare
    equal across execution modes.
    """

    report: AnalysisReport
    failures: tuple[ParseFailure, ...]
    mode: ExecutionMode
    chunk_count: int
