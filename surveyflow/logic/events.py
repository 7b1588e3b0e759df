"""Domain event constants, publisher and error reporting.

UI signals (scroll/focus requests, section changes) and submission outcomes
are published as events; the rendering boundary decides what to do with them.
`report_error` is the error-reporting collaborator used for non-fatal
failures such as session restoration or submission errors.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

FIELD_FOCUS_REQUESTED = "field.focus_requested"
SECTION_CHANGED = "section.changed"
RESPONSE_SUBMITTED = "response.submitted"
SUBMISSION_FAILED = "response.submission_failed"
ANSWERS_RESTORED = "session.answers_restored"
ERROR_REPORTED = "error.reported"


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    """Log a domain event and append it to the in-process buffer."""
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    EVENT_BUFFER.append({"type": event_type, "payload": payload})


def report_error(context: str, exc: Optional[BaseException] = None, **details: Any) -> None:
    """Report a non-fatal failure without interrupting the caller."""
    logger.error(
        "error_reported context=%s details=%s",
        context,
        details,
        exc_info=(type(exc), exc, exc.__traceback__) if exc is not None else None,
    )
    payload: Dict[str, Any] = {"context": context, **details}
    if exc is not None:
        payload["error"] = f"{type(exc).__name__}: {exc}"
    publish(ERROR_REPORTED, payload)


# In-memory buffer for domain events (test-only visibility); oldest dropped first
EVENT_BUFFER_LIMIT = 1000
EVENT_BUFFER: Deque[Dict[str, Any]] = deque(maxlen=EVENT_BUFFER_LIMIT)


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered domain events; optionally clear the buffer."""
    events = list(EVENT_BUFFER)
    if clear:
        EVENT_BUFFER.clear()
    return events

__all__ = [
    "FIELD_FOCUS_REQUESTED",
    "SECTION_CHANGED",
    "RESPONSE_SUBMITTED",
    "SUBMISSION_FAILED",
    "ANSWERS_RESTORED",
    "ERROR_REPORTED",
    "publish",
    "report_error",
    "get_buffered_events",
    "EVENT_BUFFER",
    "EVENT_BUFFER_LIMIT",
]
