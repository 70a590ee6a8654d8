"""
navexport.log - Logging module with proper Python exception handling.

Usage:
    from navexport import log

    log.info("Hello")
    log.warn("Something wrong")

    try:
        do_something()
    except Exception as e:
        log.error(e, "Failed to do something")  # includes traceback
"""

import logging
from enum import IntEnum

_logger = logging.getLogger("navexport")


class Level(IntEnum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR


def _emit(level: int, msg_or_exc, context: str) -> None:
    if not isinstance(msg_or_exc, BaseException):
        _logger.log(level, str(msg_or_exc))
        return
    # Traceback is attached through exc_info and rendered by the handler
    head = f"{type(msg_or_exc).__name__}: {msg_or_exc}"
    if context:
        head = f"{context}: {head}"
    _logger.log(level, head, exc_info=(type(msg_or_exc), msg_or_exc, msg_or_exc.__traceback__))


def debug(msg_or_exc, context: str = ""):
    _emit(logging.DEBUG, msg_or_exc, context)


def info(msg_or_exc, context: str = ""):
    _emit(logging.INFO, msg_or_exc, context)


def warn(msg_or_exc, context: str = ""):
    """Log warning message, or exception with traceback and context."""
    _emit(logging.WARNING, msg_or_exc, context)


warning = warn


def error(msg_or_exc, context: str = ""):
    """Log error message, or exception with traceback and context."""
    _emit(logging.ERROR, msg_or_exc, context)


def exception(msg: str = ""):
    """Log error with current exception traceback."""
    _logger.exception(msg)


def set_level(level) -> None:
    """Set minimal level for the navexport logger (Level, logging constant or name)."""
    _logger.setLevel(level)


def set_callback(callback) -> None:
    """
    Route log records to callback(level_name, message).

    Replaces a previously installed callback.
    """
    for handler in list(_logger.handlers):
        if isinstance(handler, _CallbackHandler):
            _logger.removeHandler(handler)
    if callback is not None:
        _logger.addHandler(_CallbackHandler(callback))


class _CallbackHandler(logging.Handler):
    def __init__(self, callback):
        super().__init__()
        self._callback = callback

    def emit(self, record: logging.LogRecord) -> None:
        self._callback(record.levelname, self.format(record))
