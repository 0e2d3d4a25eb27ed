import re
from functools import lru_cache

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Tokens accepted inside the level brackets, mapped to their canonical name.
LEVEL_ALIASES: dict[str, str] = {
    "INFO": "INFO",
    "WARNING": "WARNING",
    "WARN": "WARNING",
    "ERROR": "ERROR",
    "DEBUG": "DEBUG",
}

LOG_LINE_REGEX = (
    r"(?P<date>\d{4}-\d{2}-\d{2})\s+"
    r"(?P<time>\d{2}:\d{2}:\d{2})\s+"
    r"\[(?P<level>\w+)\]\s+"
    r"(?P<message>.+)"
)


@lru_cache(maxsize=1)
def log_line_pattern() -> re.Pattern[str]:
    """Compiled ``TIMESTAMP [LEVEL] MESSAGE`` pattern, built once per process."""
    return re.compile(LOG_LINE_REGEX, re.ASCII)
