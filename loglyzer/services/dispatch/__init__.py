"""Execution-mode policy, chunking and the worker pool."""
from .dispatcher import (
    Chunk,
    ChunkResult,
    DispatchResult,
    ExecutionMode,
    ParallelDispatcher,
    choose_execution_mode,
    process_chunk,
    split_into_chunks,
)

__all__ = [
    "Chunk",
    "ChunkResult",
    "DispatchResult",
    "ExecutionMode",
    "ParallelDispatcher",
    "choose_execution_mode",
    "process_chunk",
    "split_into_chunks",
]
