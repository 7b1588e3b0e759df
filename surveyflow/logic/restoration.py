"""Answer restoration for resumed sessions.

Applies a previously saved `{answers, page}` pair to a freshly initialized
form exactly once per session attach. Saved answers replace computed defaults
but never a value the respondent already entered during this visit. Failures
to read the saved state are reported and the form continues with defaults.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from surveyflow.logic.events import ANSWERS_RESTORED, publish, report_error
from surveyflow.logic.form_controller import SurveyFormController

logger = logging.getLogger(__name__)


class AnswerRestorer:
    """One-shot restoration guarded by a `restored` flag.

    `session_store` is any object exposing `get_saved_answers(session_id)` and
    `get_saved_page(session_id)`; `surveyflow.logic.repository_sessions`
    satisfies it.
    """

    def __init__(self, controller: SurveyFormController) -> None:
        self.controller = controller
        self.restored = False

    def apply_saved(self, answers: Optional[Mapping[str, Any]], page: Optional[int]) -> bool:
        """Apply saved answers and page; return False when already restored."""
        if self.restored:
            return False
        self.restored = True
        applied = self.controller.load_answers(answers or {})
        paginator = self.controller.paginator
        jumped = False
        if (
            isinstance(page, int)
            and not isinstance(page, bool)
            and 0 <= page < paginator.total_sections
            and page != paginator.current_section_index
        ):
            jumped = paginator.go_to_section(page)
        publish(
            ANSWERS_RESTORED,
            {
                "survey_id": self.controller.config.id,
                "fields": sorted(applied),
                "page": paginator.current_section_index if jumped else None,
            },
        )
        return True

    def restore(self, session_store: Any, session_id: str) -> bool:
        """Read saved state from `session_store` and apply it once."""
        if self.restored:
            return False
        try:
            answers = session_store.get_saved_answers(session_id)
            page = session_store.get_saved_page(session_id)
        except Exception as exc:
            # Restoration is best-effort; the form proceeds with defaults
            self.restored = True
            report_error("session_restore_failed", exc, session_id=session_id)
            return False
        logger.info(
            "session_restore session_id=%s answers=%s page=%s",
            session_id,
            len(answers or {}),
            page,
        )
        return self.apply_saved(answers, page)


__all__ = ["AnswerRestorer"]
