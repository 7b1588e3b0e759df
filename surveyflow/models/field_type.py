"""FieldType constants for survey field definitions.

Provides a simple constants container instead of an Enum so configuration
documents can compare raw `type` tokens without conversion.
"""

from __future__ import annotations


class FieldType:
    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    MULTISELECT = "multiselect"
    MULTISELECT_DROPDOWN = "multiselectdropdown"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    RATING = "rating"


# Value shape groups used by the emptiness classifier and validator
TEXT_LIKE_TYPES = frozenset(
    {FieldType.TEXT, FieldType.EMAIL, FieldType.TEXTAREA, FieldType.NUMBER}
)
SINGLE_CHOICE_TYPES = frozenset({FieldType.SELECT, FieldType.RADIO, FieldType.RATING})
MULTI_CHOICE_TYPES = frozenset({FieldType.MULTISELECT, FieldType.MULTISELECT_DROPDOWN})


__all__ = [
    "FieldType",
    "TEXT_LIKE_TYPES",
    "SINGLE_CHOICE_TYPES",
    "MULTI_CHOICE_TYPES",
]
