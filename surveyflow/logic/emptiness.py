"""Field emptiness classification.

Decides whether a field's current value counts as "no answer". Pure; never
raises.
"""

from __future__ import annotations

from typing import Any

from surveyflow.models.field_type import (
    MULTI_CHOICE_TYPES,
    SINGLE_CHOICE_TYPES,
    TEXT_LIKE_TYPES,
)


def is_field_empty(field: Any, value: Any) -> bool:
    """Return True when `value` is an unanswered value for `field`.

    - None -> empty for every type
    - multiselect/multiselectdropdown -> empty unless a non-empty list
    - text/email/textarea/number -> empty when the trimmed string form is ""
    - select/radio/rating -> empty only for None or ""
    - anything else (checkbox) -> empty when falsy
    """
    if value is None:
        return True
    field_type = getattr(field, "type", None)
    if field_type in MULTI_CHOICE_TYPES:
        return not isinstance(value, list) or len(value) == 0
    if field_type in TEXT_LIKE_TYPES:
        return str(value).strip() == ""
    if field_type in SINGLE_CHOICE_TYPES:
        return value == ""
    return not value


__all__ = ["is_field_empty"]
