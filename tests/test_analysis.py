"""Tests for the analysis service and the final report."""

import json
from datetime import datetime
from pathlib import Path

import pytest
from pydantic import TypeAdapter

from loglyzer.config import AnalysisSettings, Settings
from loglyzer.exceptions import ConfigurationError, InputUnavailableError
from loglyzer.services.analysis import (
    AnalysisReport,
    AnalysisService,
    ErrorFrequency,
    HourlyBucket,
    LevelCount,
    build_request,
    filter_spec_from_settings,
)
from loglyzer.services.dispatch import ExecutionMode, ParallelDispatcher
from loglyzer.services.filtering import FilterSpec
from loglyzer.services.logparser import LogLevel, ParseFailure

HOUR_10 = datetime(2024, 1, 15, 10)
HOUR_11 = datetime(2024, 1, 15, 11)


@pytest.fixture
def service() -> AnalysisService:
    return AnalysisService(ParallelDispatcher(max_workers=3, executor="thread"))


def test_sample_log_report(service: AnalysisService, sample_log_text: str) -> None:
    """Counts, ranking and hourly buckets of the sample log."""
    result = service.analyze(sample_log_text)
    report = result.report

    assert result.mode is ExecutionMode.SEQUENTIAL
    assert result.failures == (ParseFailure(line_number=6, raw_line="this line is not a log entry"),)
    assert report.total_entries == 10
    assert report.skipped_lines == 1
    assert report.by_level == (
        LevelCount(LogLevel.INFO, 2),
        LevelCount(LogLevel.WARNING, 2),
        LevelCount(LogLevel.ERROR, 5),
        LevelCount(LogLevel.DEBUG, 1),
    )
    assert report.top_errors == (
        ErrorFrequency("Failed to connect to API: timeout", 2),
        ErrorFrequency("Database query failed: syntax error", 2),
        ErrorFrequency("Disk quota exceeded", 1),
    )
    assert report.hourly == (
        HourlyBucket(hour=HOUR_10, total=6, errors=3, error_rate=0.5),
        HourlyBucket(hour=HOUR_11, total=4, errors=2, error_rate=0.5),
    )
    assert report.errors_by_hour == {HOUR_10: 3, HOUR_11: 2}
    assert report.since is None and report.until is None


@pytest.mark.parametrize("chunk_count", [1, 2, 3, 5, 11])
def test_report_independent_of_chunking(
    service: AnalysisService, sample_log_text: str, chunk_count: int
) -> None:
    """Sequential and parallel runs produce equal reports."""
    sequential = service.analyze(sample_log_text, top_n=2)
    parallel = service.analyze(sample_log_text, top_n=2, force_parallel=True, chunk_count=chunk_count)

    assert parallel.mode is ExecutionMode.PARALLEL
    assert parallel.report == sequential.report
    assert parallel.failures == sequential.failures


def test_filters_apply_before_aggregation(service: AnalysisService, sample_log_text: str) -> None:
    spec = FilterSpec(
        since=datetime(2024, 1, 15, 10, 31, 15),
        until=datetime(2024, 1, 15, 11, 10, 0),
        errors_only=True,
    )
    report = service.analyze(sample_log_text, filter_spec=spec).report

    assert report.total_entries == 4
    assert report.level_counts == {
        LogLevel.INFO: 0,
        LogLevel.WARNING: 0,
        LogLevel.ERROR: 4,
        LogLevel.DEBUG: 0,
    }
    assert report.since == spec.since
    assert report.until == spec.until
    # Parse failures are counted whatever the filters.
    assert report.skipped_lines == 1


def test_search_filter(service: AnalysisService, sample_log_text: str) -> None:
    report = service.analyze(sample_log_text, filter_spec=FilterSpec(search="API")).report

    assert report.total_entries == 2
    assert report.top_errors == (ErrorFrequency("Failed to connect to API: timeout", 2),)


def test_no_match_gives_empty_report(service: AnalysisService, sample_log_text: str) -> None:
    """A filter matching nothing is a normal, empty result."""
    result = service.analyze(sample_log_text, filter_spec=FilterSpec(search="nothing like this"))

    assert result.report.is_empty
    assert result.report.top_errors == ()
    assert result.report.hourly == ()
    assert all(item.count == 0 for item in result.report.by_level)


def test_zero_errors_gives_empty_top_list(service: AnalysisService) -> None:
    data = "2024-01-15 10:00:00 [INFO] up\n2024-01-15 10:05:00 [DEBUG] tick\n"
    report = service.analyze(data).report

    assert report.top_errors == ()
    assert report.hourly == (HourlyBucket(hour=HOUR_10, total=2, errors=0, error_rate=0.0),)
    assert report.errors_by_hour == {}


def test_top_n_zero(service: AnalysisService, sample_log_text: str) -> None:
    assert service.analyze(sample_log_text, top_n=0).report.top_errors == ()


def test_empty_input(service: AnalysisService) -> None:
    result = service.analyze(b"")

    assert result.report.is_empty
    assert result.failures == ()


@pytest.mark.parametrize(
    "kwargs, message",
    [({"top_n": -1}, "top_n"), ({"chunk_count": 0}, "chunk_count")],
)
def test_invalid_request_rejected(service: AnalysisService, kwargs: dict, message: str) -> None:
    with pytest.raises(ConfigurationError, match=message):
        service.analyze(b"2024-01-15 10:00:00 [INFO] up\n", **kwargs)


def test_build_request_defaults() -> None:
    request = build_request()

    assert request.filter_spec == FilterSpec()
    assert request.top_n == 5
    assert request.force_parallel is False
    assert request.chunk_count is None


def test_filter_spec_from_settings() -> None:
    settings = AnalysisSettings(
        errors_only=True,
        search="timeout",
        since=datetime(2024, 1, 15, 10, 0, 0),
        until=datetime(2024, 1, 15, 12, 0, 0),
    )
    spec = filter_spec_from_settings(settings)

    assert spec == FilterSpec(
        errors_only=True,
        search="timeout",
        since=datetime(2024, 1, 15, 10, 0, 0),
        until=datetime(2024, 1, 15, 12, 0, 0),
    )


def test_service_from_settings() -> None:
    service = AnalysisService.from_settings(Settings())

    assert service.dispatcher.max_workers == 2
    assert service.dispatcher.executor == "thread"
    assert service.dispatcher.parallel_threshold_bytes == 10 * 1024 * 1024


def test_report_serializes_to_json(service: AnalysisService, sample_log_text: str) -> None:
    report = service.analyze(sample_log_text).report
    payload = json.loads(TypeAdapter(AnalysisReport).dump_json(report))

    assert payload["total_entries"] == 10
    assert payload["by_level"][2] == {"level": "ERROR", "count": 5}
    assert payload["top_errors"][0] == {"message": "Failed to connect to API: timeout", "count": 2}
    assert payload["hourly"][0]["hour"] == "2024-01-15T10:00:00"
    assert payload["since"] is None


@pytest.mark.asyncio
async def test_analyze_file(service: AnalysisService, sample_log_path: Path) -> None:
    result = await service.analyze_file(sample_log_path, top_n=1)

    assert result.report.total_entries == 10
    assert result.report.top_errors == (ErrorFrequency("Failed to connect to API: timeout", 2),)


@pytest.mark.asyncio
async def test_analyze_file_parallel_matches_in_memory(
    service: AnalysisService, sample_log_path: Path, sample_log_text: str
) -> None:
    from_file = await service.analyze_file(sample_log_path, force_parallel=True, chunk_count=4)

    assert from_file.report == service.analyze(sample_log_text).report


@pytest.mark.asyncio
async def test_analyze_missing_file(service: AnalysisService, tmp_path: Path) -> None:
    missing = tmp_path / "missing.log"

    with pytest.raises(InputUnavailableError, match="file not found") as exc_info:
        await service.analyze_file(missing)

    assert exc_info.value.path == missing
    assert isinstance(exc_info.value, OSError)


@pytest.mark.asyncio
async def test_analyze_directory(service: AnalysisService, tmp_path: Path) -> None:
    with pytest.raises(InputUnavailableError) as exc_info:
        await service.analyze_file(tmp_path)

    assert exc_info.value.path == tmp_path


@pytest.mark.asyncio
async def test_invalid_request_checked_before_reading(service: AnalysisService, tmp_path: Path) -> None:
    """Configuration errors win over a missing file: nothing is read."""
    with pytest.raises(ConfigurationError):
        await service.analyze_file(tmp_path / "missing.log", top_n=-3)


@pytest.mark.asyncio
async def test_analyze_file_crlf(service: AnalysisService, tmp_path: Path) -> None:
    log_file = tmp_path / "windows.log"
    log_file.write_bytes(
        b"2024-01-15 10:00:00 [ERROR] boom\r\n"
        b"2024-01-15 10:00:01 [ERROR] boom\r\n"
        b"\r\n"
    )
    result = await service.analyze_file(log_file)

    assert result.report.top_errors == (ErrorFrequency("boom", 2),)
    assert result.failures == (ParseFailure(line_number=3, raw_line=""),)
