"""Logging configuration helpers for the OLPM service."""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level="INFO"):
    """Configure basic logging for the application and return the package logger."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger = logging.getLogger("olpm")
    logger.setLevel(level)
    return logger
