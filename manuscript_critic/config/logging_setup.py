"""Logging setup shared by the API and the command-line entry point."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a single stream handler to the package logger."""
    logger = logging.getLogger("manuscript_critic")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
