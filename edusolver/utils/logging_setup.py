"""Logging configuration for the application and the CLI."""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_FILENAME = "edusolver.log"


def configure_logging(log_dir: Optional[Path] = None, verbose: bool = False) -> logging.Logger:
    """
    Attach handlers to the package logger.

    Args:
        log_dir: Directory for the log file. No file handler if None.
        verbose: Also log DEBUG and above to stderr.

    Returns:
        The configured "edusolver" logger
    """
    logger = logging.getLogger("edusolver")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    # Calling twice (GUI after CLI parsing) must not duplicate output
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / LOG_FILENAME, encoding="utf-8")
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    if verbose:
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(formatter)
        logger.addHandler(sh)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger
