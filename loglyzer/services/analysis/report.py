"""Assembly of the final AnalysisReport from a merged aggregate."""
from __future__ import annotations

from loglyzer.services.aggregation import PartialAggregate, rank_errors
from loglyzer.services.filtering import FilterSpec
from loglyzer.services.logparser import LogLevel

from .schemas import AnalysisReport, ErrorFrequency, HourlyBucket, LevelCount


def build_report(
    aggregate: PartialAggregate, *, top_n: int, filter_spec: FilterSpec | None = None
) -> AnalysisReport:
    """Freeze a merged aggregate into an AnalysisReport.

    Every level appears in ``by_level`` (zero counts included) in LogLevel
    order; hourly buckets are chronological.
    """
    by_level = tuple(
        LevelCount(level=level, count=aggregate.level_counts.get(level, 0))
        for level in LogLevel
    )

    top_errors = tuple(
        ErrorFrequency(message=message, count=count)
        for message, count in rank_errors(aggregate, top_n)
    )

    hourly: list[HourlyBucket] = []
    for hour in sorted(aggregate.hour_totals):
        total = aggregate.hour_totals[hour]
        errors = aggregate.hour_errors.get(hour, 0)
        hourly.append(
            HourlyBucket(hour=hour, total=total, errors=errors, error_rate=errors / total)
        )

    return AnalysisReport(
        total_entries=aggregate.total_entries,
        skipped_lines=aggregate.skipped_lines,
        by_level=by_level,
        top_errors=top_errors,
        hourly=tuple(hourly),
        since=filter_spec.since if filter_spec else None,
        until=filter_spec.until if filter_spec else None,
    )
