"""Logging configuration for openapi_function_calling."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "openapi_function_calling"
CONSOLE_HANDLER = f"{PACKAGE_LOGGER}.console"
FILE_HANDLER = f"{PACKAGE_LOGGER}.file"


def setup_logging(
    level: Union[int, str, None] = None, log_file: Optional[Union[str, Path]] = None
) -> None:
    """Configure logging for the package.

    Args:
        level: Optional logging level (e.g. logging.DEBUG or "DEBUG"). If None, uses INFO.
        log_file: Optional file to log to in addition to the console.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    level = level or logging.INFO

    formatter = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Replace handlers from earlier calls so they follow the current sys.stderr
    for handler in list(logger.handlers):
        if handler.name in (CONSOLE_HANDLER, FILE_HANDLER):
            logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.set_name(CONSOLE_HANDLER)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.set_name(FILE_HANDLER)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # urllib3 logs request URLs, which carry the API key as a query parameter
    logging.getLogger("urllib3").setLevel(logging.WARNING)
