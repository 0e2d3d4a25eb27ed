from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError

from loglyzer.config import configure_logging, get_settings
from loglyzer.exceptions import ConfigurationError, InputUnavailableError
from loglyzer.services.analysis import AnalysisReport, AnalysisService, filter_spec_from_settings

load_dotenv()

logger = logging.getLogger(__name__)


async def main() -> int:
    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging()
        logger.error("Invalid configuration: %s", e)
        return 2
    configure_logging(settings.log_level)

    if settings.analysis.input_path is None:
        logger.error("No input configured. Set ANALYSIS_INPUT_PATH.")
        return 2

    service = AnalysisService.from_settings(settings)
    try:
        result = await service.analyze_file(
            settings.analysis.input_path,
            filter_spec=filter_spec_from_settings(settings.analysis),
            top_n=settings.analysis.top_n,
            force_parallel=settings.analysis.force_parallel,
        )
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    except InputUnavailableError as e:
        logger.error("%s", e)
        return 1

    for failure in result.failures:
        logger.debug("Line %d skipped: %s", failure.line_number, failure.raw_line)

    sys.stdout.write(TypeAdapter(AnalysisReport).dump_json(result.report, indent=2).decode())
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
