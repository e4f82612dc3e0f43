"""Log sink for the native host.

stdout carries the native-messaging frames and the browser discards
stderr, so diagnostics go to an append-only file. The logger built here
is handed to each component explicitly.
"""

import atexit
import logging

from taildrop_host.config import Settings

LOGGER_NAME = "taildrop_host"
LOG_FORMAT = "%(asctime)s %(filename)s:%(lineno)d: %(levelname)s %(message)s"
LOG_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


def open_log_sink(settings: Settings, name: str = LOGGER_NAME) -> logging.Logger:
    """Open the append-only log file and return a logger writing to it.

    The file handler is closed when the process exits.

    Args:
        settings: Settings providing ``log_file`` and ``log_level``.
        name: Logger name.

    Returns:
        Logger with a single file handler and propagation disabled.

    Raises:
        OSError: If the log file cannot be opened.
    """
    handler = logging.FileHandler(settings.log_file, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    logger = logging.getLogger(name)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)
    logger.setLevel(settings.log_level)
    logger.propagate = False

    atexit.register(handler.close)
    return logger


__all__ = ["LOGGER_NAME", "LOG_DATE_FORMAT", "LOG_FORMAT", "open_log_sink"]
