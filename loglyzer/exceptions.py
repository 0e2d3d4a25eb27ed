"""Exception hierarchy for the analysis engine.

Per-line parse failures are data, not exceptions (see ``ParseFailure``).
Only run-level failures are raised.
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pydantic import ValidationError


class LoglyzerError(Exception):
    """Base class for every error raised by the engine."""


class ConfigurationError(LoglyzerError, ValueError):
    """Invalid configuration handed to the engine, rejected before processing."""

    @classmethod
    def from_validation_error(cls, exc: "ValidationError") -> "ConfigurationError":
        """Flatten a pydantic ValidationError into one configuration error."""
        message = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'request'}: {error['msg']}"
            for error in exc.errors()
        )
        return cls(message)


class InputUnavailableError(LoglyzerError, OSError):
    """The input source could not be read (missing, permission denied, ...)."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read log file {self.path}: {reason}")


class WorkerError(LoglyzerError):
    """A chunk worker failed; the whole run is discarded."""

    def __init__(self, chunk_index: int, cause: BaseException) -> None:
        self.chunk_index = chunk_index
        self.cause = cause
        super().__init__(f"Worker for chunk {chunk_index} failed: {cause!r}")
