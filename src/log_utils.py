"""
Logging utilities for the Assistant Cloner.
"""

import logging
import sys

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(
    verbose: bool = False,
    log_file: str = "assistant-cloner.log",
    level: str = "info",
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        verbose: Enable verbose (DEBUG) logging, overriding level
        log_file: Path to log file
        level: One of "debug", "info", "warn", "error"

    Returns:
        Logger instance
    """
    log_level = logging.DEBUG if verbose else LEVELS.get(level, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
        force=True,
    )

    # Keep per-request noise out of the run log
    logging.getLogger("urllib3").setLevel(max(log_level, logging.WARNING))

    return logging.getLogger(__name__)
