"""Schemas for parsed log data - pure data, no I/O."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class LogLevel(str, Enum):
    """Recognised log levels, in report order."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    DEBUG = "DEBUG"


@dataclass(frozen=True)
class LogRecord:
    """One structured log entry.

    Only produced for lines matching ``TIMESTAMP [LEVEL] MESSAGE``.
    ``line_number`` is 1-based and global to the whole input.
    """

    timestamp: datetime
    level: LogLevel
    message: str
    line_number: int

    @property
    def hour(self) -> datetime:
        """Timestamp truncated to the start of its hour."""
        return self.timestamp.replace(minute=0, second=0, microsecond=0)

    @property
    def is_error(self) -> bool:
        return self.level is LogLevel.ERROR


@dataclass(frozen=True)
class ParseFailure:
    """A line that did not match the record grammar."""

    line_number: int
    raw_line: str


ParseOutcome = LogRecord | ParseFailure
