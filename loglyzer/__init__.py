"""loglyzer - parse, filter and aggregate plain-text logs, sequentially or in parallel."""
from loglyzer.exceptions import (
    ConfigurationError,
    InputUnavailableError,
    LoglyzerError,
    WorkerError,
)
from loglyzer.services.analysis import AnalysisReport, AnalysisResult, AnalysisService
from loglyzer.services.dispatch import ExecutionMode, ParallelDispatcher
from loglyzer.services.filtering import FilterSpec
from loglyzer.services.logparser import LogLevel, LogRecord, ParseFailure

__version__ = "0.1.0"

__all__ = [
    "AnalysisReport",
    "AnalysisResult",
    "AnalysisService",
    "ConfigurationError",
    "ExecutionMode",
    "FilterSpec",
    "InputUnavailableError",
    "LogLevel",
    "LogRecord",
    "LoglyzerError",
    "ParallelDispatcher",
    "ParseFailure",
    "WorkerError",
]
