"""Survey response data access helpers.

`insert_survey_response` is the default submission collaborator: it stores the
descriptive-id keyed payload produced by a successful submit.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from sqlalchemy import text as sql_text

from surveyflow.db.base import get_engine

logger = logging.getLogger(__name__)


def insert_survey_response(survey_id: str, session_id: str | None, payload: Mapping[str, Any]) -> str:
    response_id = str(uuid.uuid4())
    submitted_at = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
    eng = get_engine()
    with eng.begin() as conn:
        conn.execute(
            sql_text(
                """
                INSERT INTO survey_response (response_id, survey_id, session_id, payload, submitted_at)
                VALUES (:rid, :survey_id, :session_id, :payload, :submitted_at)
                """
            ),
            {
                "rid": response_id,
                "survey_id": survey_id,
                "session_id": session_id,
                "payload": json.dumps(dict(payload), sort_keys=True),
                "submitted_at": submitted_at,
            },
        )
    logger.info("survey_response_stored response_id=%s survey_id=%s", response_id, survey_id)
    return response_id


def list_survey_responses(survey_id: str) -> List[Dict[str, Any]]:
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(
                """
                SELECT response_id, session_id, payload, submitted_at
                FROM survey_response
                WHERE survey_id = :survey_id
                ORDER BY submitted_at ASC, response_id ASC
                """
            ),
            {"survey_id": survey_id},
        ).fetchall()
    return [
        {
            "response_id": str(r[0]),
            "session_id": r[1],
            "payload": json.loads(r[2]),
            "submitted_at": r[3],
        }
        for r in rows
    ]


__all__ = ["insert_survey_response", "list_survey_responses"]
