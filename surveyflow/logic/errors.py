"""Exceptions raised by the form orchestration layer.

Field validation failures are never exceptions; they are plain strings in the
form's error map. These types signal caller mistakes only.
"""

from __future__ import annotations


class SurveyConfigError(ValueError):
    """Survey configuration cannot drive a form (e.g. it has no sections)."""


class UnknownFieldError(KeyError):
    """A field id that is not part of the survey configuration."""

    def __init__(self, field_id: str) -> None:
        super().__init__(field_id)
        self.field_id = field_id


__all__ = ["SurveyConfigError", "UnknownFieldError"]
