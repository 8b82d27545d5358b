"""Logging setup for browserscope.

Modules get their logger with ``logging.getLogger(__name__)``; this module
only configures handlers and levels once, typically from the CLI or a test
suite's conftest.
"""

import logging
import os
import sys

DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s: %(message)s"

VALID_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level() -> int:
    """Get the log level from the LOG_LEVEL environment variable.

    Unknown values fall back to the default with a warning on stderr.
    """
    level_str = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    if level_str not in VALID_LEVELS:
        print(
            f"Warning: Invalid LOG_LEVEL '{level_str}'. "
            f"Valid values: {', '.join(VALID_LEVELS.keys())}. "
            f"Using {DEFAULT_LOG_LEVEL}.",
            file=sys.stderr,
        )
        return VALID_LEVELS[DEFAULT_LOG_LEVEL]

    return VALID_LEVELS[level_str]


def configure_logging(level: int | None = None, verbose: bool = False) -> None:
    """Configure logging for browserscope.

    Args:
        level: Override log level (default: from LOG_LEVEL env var).
        verbose: Use detailed format with timestamps.
    """
    if level is None:
        level = get_log_level()

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT if verbose else LOG_FORMAT_SIMPLE,
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("browserscope").setLevel(level)

    # Playwright's own loggers are noisy below DEBUG
    if level > logging.DEBUG:
        logging.getLogger("playwright").setLevel(logging.WARNING)
        logging.getLogger("asyncio").setLevel(logging.WARNING)
