"""Logging for the build pipeline.

Every stage logs under ``docsite.<stage>`` (``docsite.options``,
``docsite.plugins``, ``docsite.server`` ...). Failures an operator has to act
on go through :func:`report_error`, which writes to ``docsite.errors``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import BundlerError

_LOGGER_NAME = "docsite"
_CONSOLE_FORMAT = "[%(name)s] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the logger for one pipeline stage."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send docsite logs to stderr and, optionally, to ``log_file``.

    ``verbose`` lowers the level to DEBUG, which also surfaces skipped plugins
    and the causes behind reported errors.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Watch mode rebuilds reuse the process; keep a single set of handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def report_error(error: BaseException | str) -> None:
    """Shared error channel: log an operator-facing failure with its cause."""
    logger = get_logger("errors")
    if isinstance(error, str):
        logger.error(error)
        return
    logger.error("%s", error)
    if isinstance(error, BundlerError) and error.details:
        logger.error("%s", error.details)
    cause = error.__cause__
    if cause is not None:
        logger.debug("Caused by %s: %s", type(cause).__name__, cause)


__all__ = ["configure_logging", "get_logger", "report_error"]
