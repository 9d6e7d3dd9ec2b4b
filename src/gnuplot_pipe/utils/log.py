"""
Logging setup for the gnuplot_pipe package.

Library modules only call logging.getLogger(__name__); applications that want
the package's output formatted call configure_logging() once.
"""

import json
import logging

from ..config import Settings

PACKAGE_LOGGER = "gnuplot_pipe"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Args:
        settings: Settings providing log_level and log_format

    Returns:
        The configured package logger

    Note:
        Calling this again replaces the handler installed by the previous call.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_gnuplot_pipe", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._gnuplot_pipe = True
    if settings.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
    return logger
