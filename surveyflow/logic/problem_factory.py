"""Centralised construction of problem+json payloads.

Provides helpers that return dicts with stable `code` tokens so route modules
do not embed problem literals.
"""

from __future__ import annotations

from typing import Dict
import logging


logger = logging.getLogger(__name__)


def _problem(title: str, status: int, detail: str, code: str) -> Dict[str, object]:
    problem: Dict[str, object] = {
        "title": title,
        "status": status,
        "detail": detail,
        "message": detail,
        "code": code,
    }
    logger.info("error_handler.handle code=%s status=%s", code, status)
    return problem


def problem_survey_not_found(survey_id: str) -> Dict[str, object]:
    """Return a 404 problem for an unregistered survey configuration."""
    return _problem("Not Found", 404, f"survey {survey_id} is not registered", "SURVEY_NOT_FOUND")


def problem_form_not_found(form_id: str) -> Dict[str, object]:
    """Return a 404 problem for an unknown or closed form session."""
    return _problem("Not Found", 404, f"form {form_id} is not open", "FORM_NOT_FOUND")


def problem_field_not_found(field_id: str) -> Dict[str, object]:
    """Return a 404 problem for a field id outside the survey configuration."""
    return _problem("Not Found", 404, f"field {field_id} is not part of this survey", "FIELD_NOT_FOUND")


def problem_storage_unavailable(detail: str) -> Dict[str, object]:
    return _problem("Service Unavailable", 503, detail, "STORAGE_UNAVAILABLE")


def problem_survey_config_invalid(detail: str) -> Dict[str, object]:
    """Return a 422 problem for a configuration the engine cannot drive."""
    return _problem("Unprocessable Entity", 422, detail, "SURVEY_CONFIG_INVALID")


__all__ = [
    "problem_survey_not_found",
    "problem_form_not_found",
    "problem_field_not_found",
    "problem_survey_config_invalid",
    "problem_storage_unavailable",
]
