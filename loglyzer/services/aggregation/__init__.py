"""Aggregation of parsed records into mergeable counters."""
from .aggregator import PartialAggregate, accumulate_all, merge_all, rank_errors

__all__ = ["PartialAggregate", "accumulate_all", "merge_all", "rank_errors"]
