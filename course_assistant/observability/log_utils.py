"""
Structured logging helpers.

Log extras in this service carry client-supplied session keys, course ids,
turn timings and exception details. Values are flattened to one short line so
a pasted message or a multi-line model error cannot flood or split a record.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from collections.abc import Mapping
from typing import Any

MAX_VALUE_CHARS = 200


def log_value(value: Any, max_length: int = MAX_VALUE_CHARS) -> str:
    """
    Render a value as a single bounded line.

    Mappings (exception details) become ``key=value`` pairs; strings have
    their whitespace collapsed before truncation.

    Args:
        value: Value to render
        max_length: Maximum length before truncating

    Returns:
        str: One-line representation
    """
    if value is None:
        return "None"
    if isinstance(value, Mapping):
        text = ", ".join(f"{key}={log_value(val, max_length)}" for key, val in value.items())
    else:
        text = " ".join(str(value).split())

    if len(text) > max_length:
        return f"{text[:max_length]}... ({len(text)} chars)"
    return text


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context,
) -> None:
    """
    Log a message with one-line context values attached as record extras.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Key-value pairs such as session_key, path, course_id
    """
    logger.log(level, message, extra={key: log_value(val) for key, val in context.items()})


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context,
) -> None:
    """
    Log an exception with its traceback, type, message and ``details``.

    ``details`` is read from the exception when it has one (the service's
    own exceptions do), so callers only pass the request context.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        **context: Additional context
    """
    extra = {key: log_value(val) for key, val in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = log_value(str(exc))
    details = getattr(exc, "details", None)
    if details:
        extra["error_details"] = log_value(details)
    logger.error(message, exc_info=exc, extra=extra)
