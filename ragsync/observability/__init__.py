"""
Observability module.

Logging configuration, correlation IDs and structured logging helpers.
"""

from ragsync.observability.correlation import get_correlation_id, set_correlation_id
from ragsync.observability.log_utils import (
    build_extra,
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)
from ragsync.observability.logger import configure_logging

__all__ = [
    "build_extra",
    "configure_logging",
    "get_correlation_id",
    "log_exception_with_context",
    "log_with_context",
    "safe_log_value",
    "set_correlation_id",
]
