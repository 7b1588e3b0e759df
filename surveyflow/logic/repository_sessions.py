"""Respondent session data access helpers.

Stores the saved answers and page index that make a form-filling session
resumable. Also satisfies the session-store interface consumed by
`AnswerRestorer` (`get_saved_answers`, `get_saved_page`).
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import text as sql_text

from surveyflow.db.base import get_engine

logger = logging.getLogger(__name__)

STATUS_STARTED = "started"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def create_session(survey_id: str, session_id: str | None = None) -> str:
    """Insert a new session row and return its id."""
    sid = session_id or str(uuid.uuid4())
    now = _now()
    eng = get_engine()
    with eng.begin() as conn:
        conn.execute(
            sql_text(
                """
                INSERT INTO survey_session
                    (session_id, survey_id, status, current_section, saved_answers, started_at, last_activity_at)
                VALUES (:sid, :survey_id, :status, 0, NULL, :now, :now)
                """
            ),
            {"sid": sid, "survey_id": survey_id, "status": STATUS_STARTED, "now": now},
        )
    logger.info("session_created session_id=%s survey_id=%s", sid, survey_id)
    return sid


def get_session(session_id: str) -> Optional[Dict[str, Any]]:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(
                """
                SELECT session_id, survey_id, status, current_section, last_activity_at
                FROM survey_session WHERE session_id = :sid
                """
            ),
            {"sid": session_id},
        ).fetchone()
    if row is None:
        return None
    return {
        "session_id": str(row[0]),
        "survey_id": str(row[1]),
        "status": str(row[2]),
        "current_section": int(row[3]),
        "last_activity_at": row[4],
    }


def get_saved_answers(session_id: str) -> Optional[Dict[str, Any]]:
    """Return the saved answer map, or None when nothing was saved."""
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text("SELECT saved_answers FROM survey_session WHERE session_id = :sid"),
            {"sid": session_id},
        ).fetchone()
    if row is None or row[0] is None:
        return None
    data = json.loads(row[0])
    return data if isinstance(data, dict) else None


def get_saved_page(session_id: str) -> Optional[int]:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text("SELECT current_section FROM survey_session WHERE session_id = :sid"),
            {"sid": session_id},
        ).fetchone()
    return int(row[0]) if row is not None and row[0] is not None else None


def save_progress(session_id: str, answers: Mapping[str, Any], page: int) -> None:
    """Persist the current answers and page; completed sessions are left alone."""
    eng = get_engine()
    with eng.begin() as conn:
        conn.execute(
            sql_text(
                """
                UPDATE survey_session
                SET saved_answers = :answers,
                    current_section = :page,
                    status = :status,
                    last_activity_at = :now
                WHERE session_id = :sid AND status <> :completed
                """
            ),
            {
                "answers": json.dumps(dict(answers)),
                "page": int(page),
                "status": STATUS_IN_PROGRESS,
                "now": _now(),
                "sid": session_id,
                "completed": STATUS_COMPLETED,
            },
        )


def complete_session(session_id: str) -> None:
    eng = get_engine()
    with eng.begin() as conn:
        conn.execute(
            sql_text(
                "UPDATE survey_session SET status = :status, last_activity_at = :now WHERE session_id = :sid"
            ),
            {"status": STATUS_COMPLETED, "now": _now(), "sid": session_id},
        )
    logger.info("session_completed session_id=%s", session_id)


__all__ = [
    "STATUS_STARTED",
    "STATUS_IN_PROGRESS",
    "STATUS_COMPLETED",
    "create_session",
    "get_session",
    "get_saved_answers",
    "get_saved_page",
    "save_progress",
    "complete_session",
]
