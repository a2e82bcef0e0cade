"""Correlation ID utilities for tying log lines to one invocation."""

import uuid
from contextvars import ContextVar
from typing import Optional

# One voicemail is handled per process; the id lives in a context variable
# so every coroutine of the invocation sees it.
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return f"vm_{uuid.uuid4().hex[:12]}"


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    """Get the correlation ID from the current context."""
    return _correlation_id.get()
