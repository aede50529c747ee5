"""
Logger configuration.

Sets up a single stdout handler on the root logger. Every record carries the
current correlation ID ("-" outside an HTTP request or sync pass).

Dependencies: logging (stdlib), ragsync.observability.correlation
System role: Centralized logging configuration
"""

import logging
import sys

from ragsync.observability.correlation import get_correlation_id

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = (
    "urllib3",
    "botocore",
    "boto3",
    "httpx",
    "openai",
    "asyncpg",
    "sqlalchemy.engine",
)


class CorrelationIdFilter(logging.Filter):
    """Attach the context correlation ID to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id() or "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the CLI and the HTTP service.

    Safe to call more than once; previous root handlers are replaced.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
