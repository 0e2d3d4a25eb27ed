"""Per-record filter predicate.

Filtering is a pure function of one record and one FilterSpec, so chunks can
be filtered independently and in any order.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from loglyzer.exceptions import ConfigurationError
from loglyzer.services.logparser.schemas import LogLevel, LogRecord


class FilterSpec(BaseModel):
    """Constraints a record must satisfy to be aggregated.

    Every constraint that is set must hold (logical AND); unset constraints
    always pass. An inverted window (``until`` before ``since``) or a bound with
    a timezone is rejected at construction time with ``pydantic.ValidationError``;
    use ``build_filter_spec`` to get a ``ConfigurationError`` instead.
    """

    model_config = ConfigDict(frozen=True)

    since: datetime | None = Field(default=None, description="Inclusive lower time bound")
    until: datetime | None = Field(default=None, description="Inclusive upper time bound")
    errors_only: bool = Field(default=False, description="Keep only ERROR records")
    search: str | None = Field(
        default=None,
        description="Case-sensitive literal substring the message must contain",
    )

    @field_validator("since", "until")
    @classmethod
    def _require_naive(cls, v: datetime | None) -> datetime | None:
        # Log timestamps carry no zone; comparing against an aware bound would fail.
        if v is not None and v.tzinfo is not None:
            raise ValueError("time window bounds must not carry a timezone")
        return v

    @model_validator(mode="after")
    def validate_window(self) -> "FilterSpec":
        """Ensure the time window is not inverted."""
        if self.since is not None and self.until is not None and self.until < self.since:
            raise ValueError(
                f"Invalid time window: until ({self.until}) is before since ({self.since})"
            )
        return self

    @property
    def is_empty(self) -> bool:
        """True when no constraint is set."""
        return (
            self.since is None
            and self.until is None
            and not self.errors_only
            and self.search is None
        )


def build_filter_spec(
    *,
    since: datetime | None = None,
    until: datetime | None = None,
    errors_only: bool = False,
    search: str | None = None,
) -> FilterSpec:
    """Build a FilterSpec, reporting invalid constraints as ConfigurationError."""
    try:
        return FilterSpec(since=since, until=until, errors_only=errors_only, search=search)
    except ValidationError as e:
        raise ConfigurationError.from_validation_error(e) from e


def matches(record: LogRecord, spec: FilterSpec) -> bool:
    """Return True if ``record`` satisfies every constraint in ``spec``."""
    if spec.errors_only and record.level is not LogLevel.ERROR:
        return False
    if spec.since is not None and record.timestamp < spec.since:
        return False
    if spec.until is not None and record.timestamp > spec.until:
        return False
    if spec.search is not None and spec.search not in record.message:
        return False
    return True
