"""Central in-memory state holders for the form service.

Survey configurations and option catalogs are owned by external persistence;
the service keeps the latest registered copies here for the process lifetime,
together with the open form sessions. Routes and tests share these holders.

Route handlers run on a worker threadpool, so each open form carries its own
lock. Hold it around any controller transition or snapshot.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from surveyflow.logic.catalog_lookups import CatalogProjection
from surveyflow.logic.form_controller import SurveyFormController
from surveyflow.logic.restoration import AnswerRestorer
from surveyflow.models.survey import SurveyConfig

logger = logging.getLogger(__name__)


@dataclass
class OpenForm:
    controller: SurveyFormController
    restorer: AnswerRestorer
    session_id: Optional[str] = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    last_used: float = field(default_factory=time.monotonic, compare=False)

    def touch(self) -> None:
        self.last_used = time.monotonic()


# Survey configuration registry: survey_id -> SurveyConfig
SURVEY_CONFIGS: Dict[str, SurveyConfig] = {}

# Latest catalog lists projected into id-keyed lookups
CATALOGS = CatalogProjection()

# Open form-filling sessions: form_id -> OpenForm
OPEN_FORMS: Dict[str, OpenForm] = {}


def expire_idle_forms(max_idle_seconds: float, now: Optional[float] = None) -> List[str]:
    """Drop open forms unused for longer than `max_idle_seconds`.

    A non-positive limit disables expiry. Returns the dropped form ids.
    """
    if max_idle_seconds <= 0:
        return []
    now = time.monotonic() if now is None else now
    expired = [
        form_id
        for form_id, open_form in list(OPEN_FORMS.items())
        if now - open_form.last_used > max_idle_seconds
    ]
    for form_id in expired:
        OPEN_FORMS.pop(form_id, None)
    if expired:
        logger.info("open_forms_expired count=%d", len(expired))
    return expired


def clear_state() -> None:
    """Drop every registered survey, catalog and open form."""
    SURVEY_CONFIGS.clear()
    OPEN_FORMS.clear()
    CATALOGS.reset()


__all__ = [
    "OpenForm",
    "SURVEY_CONFIGS",
    "CATALOGS",
    "OPEN_FORMS",
    "expire_idle_forms",
    "clear_state",
]
