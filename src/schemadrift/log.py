"""Logging configuration for the command line."""

from __future__ import annotations

import logging


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Setup basic logging and return the package logger."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return logging.getLogger("schemadrift")
