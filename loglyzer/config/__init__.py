"""Configuration module for loglyzer."""

from loglyzer.config.logging_config import configure_logging
from loglyzer.config.settings import (
    AnalysisSettings,
    EngineSettings,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "AnalysisSettings",
    "EngineSettings",
    "configure_logging",
]
