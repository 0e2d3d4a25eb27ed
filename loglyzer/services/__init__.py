"""Services layer - parsing, filtering, aggregation, dispatch and analysis."""
from .analysis import AnalysisService
from .dispatch import ParallelDispatcher
from .logparser import LogParser

__all__ = ["AnalysisService", "ParallelDispatcher", "LogParser"]
