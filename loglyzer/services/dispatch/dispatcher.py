"""Sequential / chunked-parallel execution of parse, filter and aggregate.

This module handles:
- Choosing the execution mode from the input size (pure policy)
- Splitting the input into line-aligned chunks
- Running each chunk in a worker pool, one PartialAggregate per chunk
- Merging partial results in chunk order, whatever order workers finish in
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Literal

from loglyzer.exceptions import ConfigurationError, WorkerError
from loglyzer.services.aggregation import PartialAggregate, merge_all
from loglyzer.services.filtering import FilterSpec, matches
from loglyzer.services.logparser import LogParser, ParseFailure

if TYPE_CHECKING:
    from loglyzer.config.settings import EngineSettings

logger = logging.getLogger(__name__)

INPUT_ENCODING = "utf-8"


class ExecutionMode(str, Enum):
    """How a run is executed."""

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


def choose_execution_mode(
    input_size: int, *, force_parallel: bool, threshold: int
) -> ExecutionMode:
    """Pick the execution mode for an input of ``input_size`` bytes.

    Parallel when forced or when the input is strictly larger than ``threshold``.
    """
    if force_parallel or input_size > threshold:
        return ExecutionMode.PARALLEL
    return ExecutionMode.SEQUENTIAL


@dataclass(frozen=True)
class Chunk:
    """A contiguous, line-aligned byte range of the input."""

    index: int
    start: int
    end: int
    first_line_number: int

    @property
    def size(self) -> int:
        return self.end - self.start


def split_into_chunks(data: bytes, chunk_count: int) -> list[Chunk]:
    """Split ``data`` into at most ``chunk_count`` line-aligned chunks.

    Split points are placed just after a ``\\n`` so no line is cut in two.
    Chunks are sized by bytes; a chunk always holds at least one line, so
    fewer chunks than requested come back when lines are long or few.

    Raises:
        ConfigurationError: If ``chunk_count`` is not positive.
    """
    if chunk_count < 1:
        raise ConfigurationError(f"chunk_count must be positive, got {chunk_count}")

    size = len(data)
    chunks: list[Chunk] = []
    start = 0
    line_number = 1

    for i in range(chunk_count):
        if start >= size:
            break
        if i == chunk_count - 1:
            end = size
        else:
            target = max(start, size * (i + 1) // chunk_count)
            newline = data.find(b"\n", target)
            end = size if newline == -1 else newline + 1

        chunks.append(
            Chunk(index=len(chunks), start=start, end=end, first_line_number=line_number)
        )
        line_number += data.count(b"\n", start, end)
        start = end

    return chunks


@dataclass
class ChunkResult:
    """What one worker hands back for its chunk."""

    index: int
    aggregate: PartialAggregate
    failures: list[ParseFailure] = field(default_factory=list)


def process_chunk(
    text: str, filter_spec: FilterSpec, *, first_line_number: int = 1, index: int = 0
) -> ChunkResult:
    """Parse, filter and aggregate one block of lines.

    Malformed lines are recorded as failures and never abort the chunk.
    """
    parser = LogParser()
    aggregate = PartialAggregate()
    failures: list[ParseFailure] = []
    check = not filter_spec.is_empty

    for outcome in parser.iter_parsed_records(text, first_line_number=first_line_number):
        if isinstance(outcome, ParseFailure):
            aggregate.record_failure()
            failures.append(outcome)
        elif not check or matches(outcome, filter_spec):
            aggregate.accumulate(outcome)

    return ChunkResult(index=index, aggregate=aggregate, failures=failures)


def _run_chunk(payload: tuple[int, bytes, int, FilterSpec]) -> ChunkResult:
    """Worker entry point. Module level so process pools can pickle it."""
    index, raw, first_line_number, filter_spec = payload
    text = raw.decode(INPUT_ENCODING, errors="replace")
    return process_chunk(
        text, filter_spec, first_line_number=first_line_number, index=index
    )


@dataclass(frozen=True)
class DispatchResult:
    """Merged outcome of one run, before report assembly."""

    aggregate: PartialAggregate
    failures: tuple[ParseFailure, ...]
    mode: ExecutionMode
    chunk_count: int


class ParallelDispatcher:
    """Runs parse, filter and aggregate sequentially or over a worker pool.

    Example:
        dispatcher = ParallelDispatcher(max_workers=4)
        result = dispatcher.run(data, FilterSpec(errors_only=True))
        result.aggregate.total_entries
    """

    def __init__(
        self,
        *,
        parallel_threshold_bytes: int = 10 * 1024 * 1024,
        max_workers: int = 1,
        chunks_per_worker: int = 1,
        executor: Literal["process", "thread"] = "process",
    ) -> None:
        """Initialize the dispatcher.

        Args:
            parallel_threshold_bytes: Inputs larger than this run in parallel.
            max_workers: Size of the worker pool.
            chunks_per_worker: Chunks per worker in a parallel run.
            executor: "process" or "thread" worker pool.
        """
        if max_workers < 1 or chunks_per_worker < 1:
            raise ConfigurationError(
                "max_workers and chunks_per_worker must be positive, "
                f"got {max_workers} and {chunks_per_worker}"
            )
        if executor not in ("process", "thread"):
            raise ConfigurationError(f"Unknown executor: {executor!r}")

        self.parallel_threshold_bytes = parallel_threshold_bytes
        self.max_workers = max_workers
        self.chunks_per_worker = chunks_per_worker
        self.executor = executor

    @classmethod
    def from_settings(cls, settings: "EngineSettings") -> "ParallelDispatcher":
        """Build a dispatcher from EngineSettings."""
        return cls(
            parallel_threshold_bytes=settings.parallel_threshold_bytes,
            max_workers=settings.max_workers,
            chunks_per_worker=settings.chunks_per_worker,
            executor=settings.executor,
        )

    def choose_mode(self, input_size: int, *, force_parallel: bool = False) -> ExecutionMode:
        """Execution mode this dispatcher would use for ``input_size`` bytes."""
        return choose_execution_mode(
            input_size,
            force_parallel=force_parallel,
            threshold=self.parallel_threshold_bytes,
        )

    def _create_executor(self) -> Executor:
        if self.executor == "thread":
            return ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="loglyzer")
        return ProcessPoolExecutor(max_workers=self.max_workers)

    def run(
        self,
        data: bytes | bytearray | memoryview,
        filter_spec: FilterSpec | None = None,
        *,
        force_parallel: bool = False,
        chunk_count: int | None = None,
    ) -> DispatchResult:
        """Parse, filter and aggregate ``data``.

        Args:
            data: The whole input, UTF-8 encoded. Any bytes-like view is accepted.
            filter_spec: Record constraints. Defaults to no constraints.
            force_parallel: Run in parallel whatever the input size.
            chunk_count: Number of chunks for a parallel run. Defaults to
                ``max_workers * chunks_per_worker``.

        Returns:
            DispatchResult with the merged aggregate and ordered parse failures.

        Raises:
            ConfigurationError: If ``chunk_count`` is not positive.
            WorkerError: If any worker fails. No partial result is returned.
        """
        if chunk_count is not None and chunk_count < 1:
            raise ConfigurationError(f"chunk_count must be positive, got {chunk_count}")
        if not isinstance(data, bytes):
            data = bytes(data)
        if filter_spec is None:
            filter_spec = FilterSpec()
        mode = self.choose_mode(len(data), force_parallel=force_parallel)

        if mode is ExecutionMode.SEQUENTIAL:
            logger.info("Analysing %d bytes sequentially", len(data))
            result = _run_chunk((0, data, 1, filter_spec))
            return DispatchResult(
                aggregate=result.aggregate,
                failures=tuple(result.failures),
                mode=mode,
                chunk_count=1,
            )

        requested = chunk_count if chunk_count is not None else self.max_workers * self.chunks_per_worker
        chunks = split_into_chunks(data, requested)
        logger.info(
            "Analysing %d bytes in parallel: %d chunks, %d %s workers",
            len(data),
            len(chunks),
            self.max_workers,
            self.executor,
        )

        results = self._run_parallel(data, chunks, filter_spec)

        failures: list[ParseFailure] = []
        for result in results:
            failures.extend(result.failures)

        return DispatchResult(
            aggregate=merge_all(result.aggregate for result in results),
            failures=tuple(failures),
            mode=mode,
            chunk_count=len(chunks),
        )

    def _run_parallel(
        self, data: bytes, chunks: list[Chunk], filter_spec: FilterSpec
    ) -> list[ChunkResult]:
        """Run every chunk and return results in chunk-index order."""
        if not chunks:
            return []

        with self._create_executor() as pool:
            futures: list[Future[ChunkResult]] = [
                pool.submit(
                    _run_chunk,
                    (chunk.index, data[chunk.start:chunk.end], chunk.first_line_number, filter_spec),
                )
                for chunk in chunks
            ]

            results: list[ChunkResult] = []
            # Collect in submission order; completion order does not matter.
            for chunk, future in zip(chunks, futures):
                try:
                    results.append(future.result())
                except Exception as e:
                    logger.exception("Worker failed on chunk %d: %s", chunk.index, e)
                    for pending in futures:
                        pending.cancel()
                    raise WorkerError(chunk.index, e) from e

        logger.debug("Collected %d chunk results", len(results))
        return results
