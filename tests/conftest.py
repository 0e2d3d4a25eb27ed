import os
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def baseline_settings_env():
    """Pin every setting through env vars so a developer .env cannot leak in.

    Env vars beat .env in pydantic-settings. Workers run as threads here so
    tests do not depend on process start-up.
    """
    os.environ.update({
        # App
        "APP_NAME": "loglyzer",
        "APP_VERSION": "0.1.0",
        "APP_DEBUG": "false",
        "APP_ENVIRONMENT": "development",
        "APP_LOG_LEVEL": "INFO",
        # Engine
        "ENGINE_PARALLEL_THRESHOLD_BYTES": str(10 * 1024 * 1024),
        "ENGINE_MAX_WORKERS": "2",
        "ENGINE_CHUNKS_PER_WORKER": "1",
        "ENGINE_EXECUTOR": "thread",
        # Analysis
        "ANALYSIS_TOP_N": "5",
        "ANALYSIS_ERRORS_ONLY": "false",
        "ANALYSIS_FORCE_PARALLEL": "false",
    })


@pytest.fixture(autouse=True)
def refresh_settings_cache():
    """Drop the cached Settings around each test so monkeypatched env applies."""
    from loglyzer.config.settings import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_log_path() -> Path:
    """Path to a small, well-formed application log."""
    return TESTS_DIR / "sample_app.log"


@pytest.fixture
def sample_log_text(sample_log_path: Path) -> str:
    """Contents of the sample application log."""
    return sample_log_path.read_text(encoding="utf-8")


@pytest.fixture
def load_invalid_logs() -> list[str]:
    """Lines that must not parse, one per line of the fixture file."""
    return (TESTS_DIR / "invalid_logs.txt").read_text(encoding="utf-8").splitlines()
