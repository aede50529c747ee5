"""
Structured logging helpers.

Render arbitrary context values (document ids, batches, embedding vectors,
query text) into short strings before they reach a log record.

Dependencies: logging (stdlib)
System role: Safe `extra=` payloads for sync and retrieval logs
"""

import logging
from typing import Any

DEFAULT_MAX_LENGTH = 500

# LogRecord attribute names; reusing them in extra raises KeyError
_RESERVED_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def safe_log_value(value: Any, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Render a context value for a log record.

    Collections are summarized by size, float sequences (embeddings) by
    dimension, long strings are truncated.

    Args:
        value: Value to render
        max_length: Truncation length for the rendered string

    Returns:
        str: Rendered value, never raises
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, str):
            rendered = value
        elif isinstance(value, (list, tuple)) and value and all(
            isinstance(item, float) for item in value
        ):
            rendered = f"vector({len(value)} dims)"
        elif isinstance(value, (list, tuple, set, frozenset)):
            rendered = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict):
            rendered = f"dict({len(value)} keys)"
        else:
            rendered = str(value)
    except Exception as e:
        return f"<unrenderable {type(e).__name__}>"

    if len(rendered) > max_length:
        return f"{rendered[:max_length]}... ({len(rendered)} chars)"
    return rendered


def build_extra(**context: Any) -> dict[str, str]:
    """Render context into an `extra=` dict, prefixing keys LogRecord already owns."""
    extra = {}
    for key, value in context.items():
        name = f"ctx_{key}" if key in _RESERVED_KEYS else key
        extra[name] = safe_log_value(value)
    return extra


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    logger.log(level, message, extra=build_extra(**context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log a failure with its traceback and rendered context.

    Adds error_type and error_msg to the record so failed documents and
    batches can be filtered without parsing the traceback.

    Args:
        logger: Logger to write to
        message: Log message
        exc: The caught exception
        **context: Identifiers of the failing unit (document_id, batch_number, ...)
    """
    extra = build_extra(**context)
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.error(message, exc_info=exc, extra=extra)
