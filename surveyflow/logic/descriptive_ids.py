"""Descriptive response keys.

Submitted responses are keyed by `"{section_slug}_{field_slug}"` rather than
by internal field id. Slugs lower-case the text and collapse every run of
characters outside `[a-z0-9]` into a single underscore.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping

from surveyflow.logic.section_validation import section_fields
from surveyflow.models.survey import SurveyConfig

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    return _NON_ALNUM.sub("_", (text or "").lower())


def create_descriptive_field_id(section_title: str, field_label: str) -> str:
    return f"{slugify(section_title)}_{slugify(field_label)}"


def transform_to_descriptive_ids(form_data: Mapping[str, Any], config: SurveyConfig) -> Dict[str, Any]:
    """Re-key answered fields by descriptive id.

    Unset fields are omitted. When two fields slug to the same key the later
    field in declared order wins and a warning is logged.
    """
    out: Dict[str, Any] = {}
    for section in config.sections:
        for field in section_fields(section):
            if field.id not in form_data:
                continue
            key = create_descriptive_field_id(section.title, field.label)
            if key in out:
                logger.warning(
                    "descriptive_id_collision survey_id=%s key=%s field_id=%s",
                    config.id,
                    key,
                    field.id,
                )
            out[key] = form_data[field.id]
    return out


__all__ = ["slugify", "create_descriptive_field_id", "transform_to_descriptive_ids"]
