"""
logging_config.py: logging setup for the storefront API.

Console output always goes to stdout; a file handler is added when
``LOG_FILE`` is configured. Third-party loggers are kept at WARNING.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s"

NOISY_LOGGERS = ("werkzeug", "sqlalchemy", "sqlalchemy.engine")


def setup_logging(level="INFO", log_file=None):
    """
    Configures the root logger once per process.

    Args:
        level (str | int): log level name or number, e.g. "INFO".
        log_file (str | None): optional path for a persistent log file.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name):
    """Returns the logger for a module; use with ``__name__``."""
    return logging.getLogger(name)
