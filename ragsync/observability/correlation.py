"""
Correlation IDs.

One ID per HTTP request or sync pass, carried in a ContextVar so it follows
the work across awaits and shows up on every log record.

Dependencies: contextvars
System role: Tracing requests and sync passes through the logs
"""

import re
import uuid
from contextvars import ContextVar

MAX_CORRELATION_ID_LENGTH = 128

_VALID_ID = re.compile(r"^[A-Za-z0-9._:-]+$")

correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")


def new_correlation_id(prefix: str = "") -> str:
    """Generate an ID, optionally prefixed (e.g. "sync-watch")."""
    token = uuid.uuid4().hex[:12]
    return f"{prefix}-{token}" if prefix else token


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Set the correlation ID for the current context.

    Caller-supplied IDs that are too long or contain characters other than
    letters, digits and ``._:-`` are replaced with a generated one.

    Args:
        correlation_id: Incoming ID (e.g. from a request header)

    Returns:
        str: The ID now in effect
    """
    if (
        not correlation_id
        or len(correlation_id) > MAX_CORRELATION_ID_LENGTH
        or not _VALID_ID.match(correlation_id)
    ):
        correlation_id = new_correlation_id()
    correlation_id_ctx.set(correlation_id)
    return correlation_id


def get_correlation_id() -> str:
    """Current correlation ID, "" when none was set."""
    return correlation_id_ctx.get()
