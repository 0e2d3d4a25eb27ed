"""Partial aggregates and their merge.

This module handles:
- Folding records into per-chunk counters (levels, error messages, hours)
- Merging two partial aggregates into one
- Ranking error messages for the top-N list

A merge of the aggregates of two consecutive chunks equals the aggregate of
the concatenated chunks. Error messages carry the line number where they were
first seen; merging keeps the smaller one, so ties in the top-N ranking break
the same way however the input was split.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from loglyzer.services.logparser.schemas import LogLevel, LogRecord

logger = logging.getLogger(__name__)


@dataclass
class PartialAggregate:
    """Counters accumulated from one chunk of input.

    Owned by a single worker until merged; never shared while accumulating.
    """

    level_counts: Counter[LogLevel] = field(default_factory=Counter)
    error_counts: Counter[str] = field(default_factory=Counter)
    error_first_seen: dict[str, int] = field(default_factory=dict)
    hour_totals: Counter[datetime] = field(default_factory=Counter)
    hour_errors: Counter[datetime] = field(default_factory=Counter)
    skipped_lines: int = 0

    @property
    def total_entries(self) -> int:
        """Number of records accumulated (every record has exactly one level)."""
        return sum(self.level_counts.values())

    def accumulate(self, record: LogRecord) -> None:
        """Fold one passing record into the counters."""
        hour = record.hour
        self.level_counts[record.level] += 1
        self.hour_totals[hour] += 1

        if record.is_error:
            self.hour_errors[hour] += 1
            self.error_counts[record.message] += 1
            # Records arrive in line order within a chunk, so the first write wins.
            self.error_first_seen.setdefault(record.message, record.line_number)

    def record_failure(self) -> None:
        """Count one line that failed to parse."""
        self.skipped_lines += 1

    def merge(self, other: "PartialAggregate") -> "PartialAggregate":
        """Return a new aggregate combining ``self`` and ``other``.

        Neither input is modified. Counts add up; for error messages seen on
        both sides the earliest first-seen line number is kept.
        """
        merged = PartialAggregate(
            level_counts=self.level_counts + other.level_counts,
            error_counts=self.error_counts + other.error_counts,
            error_first_seen=dict(self.error_first_seen),
            hour_totals=self.hour_totals + other.hour_totals,
            hour_errors=self.hour_errors + other.hour_errors,
            skipped_lines=self.skipped_lines + other.skipped_lines,
        )
        for message, line_number in other.error_first_seen.items():
            current = merged.error_first_seen.get(message)
            if current is None or line_number < current:
                merged.error_first_seen[message] = line_number
        return merged


def accumulate_all(records: Iterable[LogRecord]) -> PartialAggregate:
    """Aggregate a sequence of records into a fresh PartialAggregate."""
    aggregate = PartialAggregate()
    for record in records:
        aggregate.accumulate(record)
    return aggregate


def merge_all(aggregates: Iterable[PartialAggregate]) -> PartialAggregate:
    """Fold aggregates left to right, in the order given.

    An empty iterable yields an empty aggregate.
    """
    result = PartialAggregate()
    count = 0
    for aggregate in aggregates:
        result = result.merge(aggregate)
        count += 1
    logger.debug("Merged %d partial aggregates (%d entries)", count, result.total_entries)
    return result


def rank_errors(aggregate: PartialAggregate, top_n: int) -> list[tuple[str, int]]:
    """Return the ``top_n`` most frequent error messages as (message, count).

    Sorted by count descending, then by first-seen line ascending.
    ``top_n <= 0`` or no errors yields an empty list.
    """
    if top_n <= 0 or not aggregate.error_counts:
        return []
    ranked = sorted(
        aggregate.error_counts.items(),
        key=lambda item: (-item[1], aggregate.error_first_seen[item[0]]),
    )
    return ranked[:top_n]
