# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Logging and error handling for the ui_accessibility_analyzer package.

Every module gets its logger from ``setup_logger(__name__)``. The CLI calls
``configure_logging`` once, which moves the root logger and every package
logger created so far to the requested level.

All errors raised on purpose by the package derive from
``UIAccessibilityError``. Analyzers never raise them for malformed nodes;
they are reserved for tree loading, configuration, report output and
cancellation.
"""

import logging
import sys
from typing import Any, Dict, Optional, Type

PACKAGE_LOGGER_NAME = "ui_accessibility_analyzer"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class UIAccessibilityError(Exception):
    """
    Base exception class for all ui_accessibility_analyzer errors.

    Args:
        message: Human readable description
        path: File the error relates to, when there is one
    """

    def __init__(self, message: str = "", path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class TreeLoadError(UIAccessibilityError):
    """An action tree document cannot be read, decoded or validated."""


class AccessibilityAnalysisError(UIAccessibilityError):
    """Analysis of a tree failed outside the per-analyzer isolation."""


class AnalysisCancelledError(UIAccessibilityError):
    """An in-flight analysis observed a cancelled token."""


class ConfigurationError(UIAccessibilityError):
    """Invalid option, setting or configuration file."""


class ReportGenerationError(UIAccessibilityError):
    """A report cannot be rendered or written."""


logger = logging.getLogger(__name__)


def _default_level() -> int:
    # --debug puts the root logger at DEBUG before package modules log anything
    if logging.getLogger().level <= logging.DEBUG:
        return logging.DEBUG
    return logging.INFO


def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a package logger with the standard stdout handler.

    Args:
        name: The logger name, typically __name__ of the calling module
        level: The logging level (default: DEBUG when the root logger is in
            debug mode, INFO otherwise)

    Returns:
        A configured logger instance
    """
    logger_obj = logging.getLogger(name)
    logger_obj.setLevel(_default_level() if level is None else level)
    logger_obj.propagate = True

    if not logger_obj.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger_obj.addHandler(handler)

    return logger_obj


def configure_logging(debug: bool = False, quiet: bool = False) -> int:
    """
    Set the root and package log levels from the CLI flags.

    ``quiet`` wins over ``debug``. Package loggers pick their level when
    their module is imported, so each one created so far is updated
    together with its handlers.

    Returns:
        The level applied
    """
    if quiet:
        level = logging.ERROR
    elif debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(level=level)
    logging.getLogger().setLevel(level)

    for name in list(logging.Logger.manager.loggerDict):
        if name == PACKAGE_LOGGER_NAME or name.startswith(PACKAGE_LOGGER_NAME + "."):
            logger_obj = logging.getLogger(name)
            logger_obj.setLevel(level)
            for handler in logger_obj.handlers:
                handler.setLevel(level)

    logger.debug(f"Log level set to {logging.getLevelName(level)}")
    return level


def log_exception(
    logger: logging.Logger,
    exception: Exception,
    message: str = "An error occurred",
    level: int = logging.ERROR,
    include_traceback: bool = True,
) -> None:
    """Log ``message: ExceptionType - text``, with the traceback unless told otherwise."""
    log_msg = f"{message}: {type(exception).__name__} - {exception}"
    if include_traceback:
        logger.log(level, log_msg, exc_info=exception)
    else:
        logger.log(level, log_msg)


def handle_exception(
    exc: Exception,
    logger: logging.Logger,
    custom_message: str = None,
    reraise: bool = True,
    custom_exception: Type[UIAccessibilityError] = None,
    path: Optional[str] = None,
    additional_data: Dict[str, Any] = None,
) -> Optional[Dict[str, Any]]:
    """
    Log an exception and either re-raise it or describe it.

    Args:
        exc: The caught exception
        logger: Logger to use for recording the error
        custom_message: Message to log and to give a wrapping exception
        reraise: Whether to raise (possibly wrapped) after logging
        custom_exception: Package error type to wrap ``exc`` in
        path: File the failure relates to, attached to the wrapping error
        additional_data: Extra context for the returned description

    Returns:
        When ``reraise`` is False, ``{"error_type", "error_message", "path", ...}``

    Raises:
        ``custom_exception`` wrapping ``exc``, or ``exc`` itself
    """
    message = custom_message or str(exc)
    log_exception(logger, exc, message, include_traceback=reraise)

    if reraise:
        if custom_exception is not None:
            raise custom_exception(message, path=path) from exc
        raise exc

    error_info = {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
        "path": path,
    }
    if additional_data:
        error_info.update(additional_data)
    return error_info
