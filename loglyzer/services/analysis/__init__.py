"""Analysis entry points and the immutable report."""
from .report import build_report
from .schemas import AnalysisReport, AnalysisResult, ErrorFrequency, HourlyBucket, LevelCount
from .service import AnalysisRequest, AnalysisService, build_request, filter_spec_from_settings

__all__ = [
    "AnalysisReport",
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisService",
    "ErrorFrequency",
    "HourlyBucket",
    "LevelCount",
    "build_report",
    "build_request",
    "filter_spec_from_settings",
]
