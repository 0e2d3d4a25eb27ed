"""Analysis service - validates a request, runs the engine, assembles the report.

This service orchestrates:
- Configuration validation (before any processing)
- Execution via ParallelDispatcher
- Report assembly via build_report
- Reading a log file asynchronously for callers that have a path

The engine itself works on in-memory bytes only; ``analyze_file`` is the one
place that touches the filesystem.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import aiofiles
import aiofiles.os
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from loglyzer.exceptions import ConfigurationError, InputUnavailableError
from loglyzer.services.dispatch import ParallelDispatcher
from loglyzer.services.filtering import FilterSpec, build_filter_spec

from .report import build_report
from .schemas import AnalysisResult

if TYPE_CHECKING:
    from loglyzer.config.settings import AnalysisSettings, Settings

logger = logging.getLogger(__name__)


class AnalysisRequest(BaseModel):
    """Validated parameters of one run."""

    model_config = ConfigDict(frozen=True)

    filter_spec: FilterSpec = Field(default_factory=FilterSpec)
    top_n: int = Field(default=5, ge=0, description="Number of ranked error messages")
    force_parallel: bool = Field(default=False)
    chunk_count: int | None = Field(default=None, ge=1)


def build_request(
    *,
    filter_spec: FilterSpec | None = None,
    top_n: int = 5,
    force_parallel: bool = False,
    chunk_count: int | None = None,
) -> AnalysisRequest:
    """Validate run parameters.

    Raises:
        ConfigurationError: On a negative top_n or a non-positive chunk count.
    """
    try:
        return AnalysisRequest(
            filter_spec=filter_spec if filter_spec is not None else FilterSpec(),
            top_n=top_n,
            force_parallel=force_parallel,
            chunk_count=chunk_count,
        )
    except ValidationError as e:
        raise ConfigurationError.from_validation_error(e) from e


def filter_spec_from_settings(settings: "AnalysisSettings") -> FilterSpec:
    """Build a FilterSpec from AnalysisSettings.

    Raises:
        ConfigurationError: If the configured window is invalid.
    """
    return build_filter_spec(
        since=settings.since,
        until=settings.until,
        errors_only=settings.errors_only,
        search=settings.search,
    )


class AnalysisService:
    """Runs one analysis per call; holds no state between runs.

    Example:
        service = AnalysisService(ParallelDispatcher(max_workers=4))
        result = service.analyze(data, filter_spec=FilterSpec(errors_only=True), top_n=10)
        # or, from async code with a path:
        result = await service.analyze_file(Path("app.log"))
    """

    def __init__(self, dispatcher: ParallelDispatcher | None = None) -> None:
        """Initialize the analysis service.

        Args:
            dispatcher: Dispatcher used for every run. Defaults to a
                single-worker dispatcher with the default threshold.
        """
        self.dispatcher = dispatcher or ParallelDispatcher()

    @classmethod
    def from_settings(cls, settings: "Settings") -> "AnalysisService":
        """Build a service whose dispatcher follows ``settings.engine``."""
        return cls(ParallelDispatcher.from_settings(settings.engine))

    def analyze(
        self,
        data: bytes | bytearray | memoryview | str,
        *,
        filter_spec: FilterSpec | None = None,
        top_n: int = 5,
        force_parallel: bool = False,
        chunk_count: int | None = None,
    ) -> AnalysisResult:
        """Analyse an in-memory log.

        Args:
            data: The whole input. ``str`` input is encoded as UTF-8.
            filter_spec: Record constraints. Defaults to none.
            top_n: Size of the ranked error list. 0 gives an empty list.
            force_parallel: Run in parallel whatever the input size.
            chunk_count: Chunks for a parallel run; dispatcher default if None.

        Returns:
            AnalysisResult with the report and the ordered parse failures.

        Raises:
            ConfigurationError: If the request is invalid. Nothing is processed.
            WorkerError: If a parallel worker fails.
        """
        request = build_request(
            filter_spec=filter_spec,
            top_n=top_n,
            force_parallel=force_parallel,
            chunk_count=chunk_count,
        )
        return self.run(data, request)

    def run(
        self, data: bytes | bytearray | memoryview | str, request: AnalysisRequest
    ) -> AnalysisResult:
        """Analyse ``data`` with an already validated request."""
        if isinstance(data, str):
            data = data.encode("utf-8")

        dispatched = self.dispatcher.run(
            data,
            request.filter_spec,
            force_parallel=request.force_parallel,
            chunk_count=request.chunk_count,
        )
        report = build_report(
            dispatched.aggregate, top_n=request.top_n, filter_spec=request.filter_spec
        )

        if dispatched.failures:
            logger.info("Skipped %d lines with an invalid format", len(dispatched.failures))
        if report.is_empty:
            logger.info("No entry matched the given filters")
        logger.debug(
            "Analysis done: %d entries, %d hours, mode=%s, chunks=%d",
            report.total_entries,
            len(report.hourly),
            dispatched.mode.value,
            dispatched.chunk_count,
        )

        return AnalysisResult(
            report=report,
            failures=dispatched.failures,
            mode=dispatched.mode,
            chunk_count=dispatched.chunk_count,
        )

    async def read_input(self, path: Path | str) -> bytes:
        """Read the whole file at ``path``.

        Raises:
            InputUnavailableError: If the file cannot be read.
        """
        try:
            stat_result = await aiofiles.os.stat(path)
            logger.debug("Reading %s (%d bytes)", path, stat_result.st_size)
            async with aiofiles.open(path, "rb") as file:
                return await file.read()
        except FileNotFoundError as e:
            raise InputUnavailableError(path, "file not found") from e
        except PermissionError as e:
            raise InputUnavailableError(path, "permission denied") from e
        except OSError as e:
            raise InputUnavailableError(path, e.strerror or str(e)) from e

    async def analyze_file(
        self,
        path: Path | str,
        *,
        filter_spec: FilterSpec | None = None,
        top_n: int = 5,
        force_parallel: bool = False,
        chunk_count: int | None = None,
    ) -> AnalysisResult:
        """Read ``path`` and analyse it off the event loop.

        The request is validated before the file is touched, and the file is
        read in full before any chunking, so an unreadable input never yields
        a partial report.

        Raises:
            ConfigurationError: If the request is invalid.
            InputUnavailableError: If the file cannot be read.
            WorkerError: If a parallel worker fails.
        """
        request = build_request(
            filter_spec=filter_spec,
            top_n=top_n,
            force_parallel=force_parallel,
            chunk_count=chunk_count,
        )
        data = await self.read_input(path)
        return await asyncio.to_thread(self.run, data, request)
