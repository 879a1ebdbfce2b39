"""
Console logging setup for the command-line entry point.

Library modules only create ``logging.getLogger(__name__)`` loggers; handlers
are attached here, once, by the CLI.
"""

import logging
import sys

FORMATS = {
    "DEBUG": "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
    "INFO": "%(levelname)s - %(message)s",
    "WARNING": "%(levelname)s - %(message)s",
}


def configure_logging(level: str = "INFO", stream=None) -> logging.Logger:
    """Attach a single stream handler to the ``briefdeck`` logger."""
    level = (level or "INFO").upper()
    numeric = getattr(logging, level, logging.INFO)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(FORMATS.get(level, FORMATS["WARNING"])))

    logger = logging.getLogger("briefdeck")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(numeric)
    logger.propagate = False
    return logger
