from collections.abc import Iterator
import re
import logging
from datetime import datetime

from .constants import LEVEL_ALIASES, TIMESTAMP_FORMAT, log_line_pattern
from .schemas import LogLevel, LogRecord, ParseFailure, ParseOutcome


logger = logging.getLogger(__name__)


def iter_lines(text: str) -> Iterator[str]:
    """Yield the lines of ``text`` without their terminators.

    Lines end at ``\\n``; a single trailing ``\\r`` is dropped. A terminator at
    the very end of the text does not open an extra empty line.
    """
    if not text:
        return
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    for line in lines:
        yield line[:-1] if line.endswith("\r") else line


class LogParser:
    """Parses ``TIMESTAMP [LEVEL] MESSAGE`` log lines.

    Handles:
    - Matching raw lines against the record grammar
    - Normalising level tokens (WARN -> WARNING)
    - Turning non-matching lines into ParseFailure values instead of raising

    The compiled pattern is shared by every parser in the process, so building
    one parser per worker costs nothing.
    """

    def __init__(self, pattern: re.Pattern[str] | None = None) -> None:
        """Create a parser.

        Args:
            pattern (re.Pattern[str], optional): Pattern with ``date``, ``time``,
                ``level`` and ``message`` groups. Defaults to the process-wide one.
        """
        self.pattern = pattern or log_line_pattern()

        # Statistics
        self.parsed_lines: int = 0
        self.skipped_lines: int = 0

    def parsed_lines_count(self) -> int:
        """Return the number of parsed lines."""
        return self.parsed_lines

    def skipped_lines_count(self) -> int:
        """Return the number of skipped lines."""
        return self.skipped_lines

    def validate_log_line(self, log_line: str) -> re.Match[str] | None:
        """Match the whole line against the record grammar."""
        return self.pattern.fullmatch(log_line)

    def _parse_timestamp(self, matched: re.Match[str]) -> datetime | None:
        try:
            return datetime.strptime(
                f"{matched.group('date')} {matched.group('time')}", TIMESTAMP_FORMAT
            )
        except ValueError:
            # Shape matched but not a real calendar date-time (e.g. Feb 30th)
            return None

    def _parse_level(self, matched: re.Match[str]) -> LogLevel | None:
        canonical = LEVEL_ALIASES.get(matched.group("level"))
        return LogLevel(canonical) if canonical else None

    def parse_line(self, line: str, line_number: int) -> ParseOutcome:
        """Parse one line (without terminator) into a LogRecord or a ParseFailure.

        Args:
            line: Raw line text.
            line_number: 1-based position of the line in the whole input.

        Returns:
            LogRecord when the line matches, ParseFailure otherwise. Never raises
            for malformed input.
        """
        matched = self.validate_log_line(line)
        timestamp = self._parse_timestamp(matched) if matched else None
        level = self._parse_level(matched) if matched else None

        if matched is None or timestamp is None or level is None:
            logger.debug("Skipping unmatched line %d: '%s'", line_number, line)
            self.skipped_lines += 1
            return ParseFailure(line_number=line_number, raw_line=line)

        self.parsed_lines += 1
        return LogRecord(
            timestamp=timestamp,
            level=level,
            message=matched.group("message"),
            line_number=line_number,
        )

    def iter_parsed_records(
        self, text: str, *, first_line_number: int = 1
    ) -> Iterator[ParseOutcome]:
        """Yield one ParseOutcome per line of ``text``, in order.

        Args:
            text: A block of log lines.
            first_line_number: Line number of the first line of ``text``.
                Chunks of a larger input pass their global offset here.
        """
        for offset, line in enumerate(iter_lines(text)):
            yield self.parse_line(line, first_line_number + offset)
