"""Logging setup for the API process."""
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stdout handler to the package logger (once) and set its level."""
    logger = logging.getLogger("reconstruct")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger
