"""Log parser module - parsing only, no file access."""
from .logparser import LogParser, iter_lines
from .schemas import LogLevel, LogRecord, ParseFailure, ParseOutcome

__all__ = ["LogParser", "iter_lines", "LogLevel", "LogRecord", "ParseFailure", "ParseOutcome"]
