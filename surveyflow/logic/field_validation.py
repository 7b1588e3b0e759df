"""Per-field value validation.

`validate_field_value` turns one field definition, its current value and the
catalog lookups into zero or one user-facing error message. Checks run in a
fixed order and the first failure wins:

1. normalize multi-choice values to lists
2. required check, then the empty-optional short-circuit
3. type format (email, number)
4. multi-choice selection range and option membership
5. single-choice (radio/select) option membership
6. rating option membership
7. custom rules from `field.validation`, in declared order

Catalog references that do not resolve (catalog deleted or not loaded yet)
impose no constraint. Membership checks against resolved catalogs are how
answers that reference a since-removed option get flagged.
"""

from __future__ import annotations

import logging
import math
import re
from functools import lru_cache
from typing import Any, Callable, List, Optional, Sequence

from surveyflow.logic.answer_canonical import (
    canonical_option_values,
    canonicalize_answer_value,
)
from surveyflow.logic.emptiness import is_field_empty
from surveyflow.models.catalogs import CatalogLookups
from surveyflow.models.field_type import MULTI_CHOICE_TYPES, FieldType
from surveyflow.models.survey import ValidationRule


logger = logging.getLogger(__name__)

MSG_REQUIRED = "This field is required"
MSG_INVALID_EMAIL = "Please enter a valid email address"
MSG_INVALID_NUMBER = "Please enter a valid number"
MSG_SOME_OPTIONS_UNAVAILABLE = "Some selected options are no longer available"
MSG_OPTION_UNAVAILABLE = "Selected option is no longer available"
MSG_RATING_UNAVAILABLE = "Selected rating is no longer available"
MSG_INVALID_FORMAT = "Invalid format"

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_PREFIXED_INT_PATTERN = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")


def _fmt(n: Any) -> str:
    token = canonicalize_answer_value(n)
    return token if token is not None else ""


def _plural(n: Any) -> str:
    return "" if n == 1 else "s"


def select_at_least(n: Any) -> str:
    return f"Please select at least {_fmt(n)} option{_plural(n)}"


def select_at_most(n: Any) -> str:
    return f"Please select at most {_fmt(n)} option{_plural(n)}"


def is_valid_email(value: Any) -> bool:
    return EMAIL_PATTERN.fullmatch(str(value)) is not None


def parse_number(value: Any) -> Optional[float]:
    """Read a numeric answer or rule bound; None when it is not a number.

    Ints pass through untouched so arbitrarily large ones never overflow.
    Text accepts decimal and exponent forms plus 0x/0o/0b integer literals;
    digit-group underscores are rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    if not text or "_" in text:
        return None
    if _PREFIXED_INT_PATTERN.fullmatch(text):
        return int(text, 0)
    try:
        return float(text)
    except (ValueError, OverflowError):
        return None


def is_finite_number(value: Any) -> bool:
    number = parse_number(value)
    if number is None:
        return False
    if isinstance(number, int):
        return True
    return math.isfinite(number)


def _normalize(field: Any, raw_value: Any) -> Any:
    if field.type in MULTI_CHOICE_TYPES and not isinstance(raw_value, list):
        return [raw_value] if raw_value else []
    return raw_value


def _resolve_options(
    field: Any,
    refs: Sequence[tuple[str, dict]],
) -> Optional[List[Any]]:
    """Return the authoritative option values for a field, or None.

    The first catalog reference set on the field wins; a reference whose
    catalog is missing yields None (unconstrained) rather than falling back
    to inline options. Inline options apply only when no reference is set.
    """
    for attr, catalog_map in refs:
        catalog_id = getattr(field, attr, None)
        if catalog_id:
            catalog = catalog_map.get(catalog_id)
            if catalog is None:
                logger.debug(
                    "catalog_lookup_miss field_id=%s ref=%s catalog_id=%s",
                    field.id,
                    attr,
                    catalog_id,
                )
                return None
            return [opt.value for opt in catalog.options]
    inline = getattr(field, "options", None) or []
    if inline:
        return [opt.value for opt in inline]
    return None


def _check_format(field: Any, value: Any, lookups: CatalogLookups) -> Optional[str]:
    if field.type == FieldType.EMAIL and not is_valid_email(value):
        return MSG_INVALID_EMAIL
    if field.type == FieldType.NUMBER and not is_finite_number(value):
        return MSG_INVALID_NUMBER
    return None


def _check_multi_choice(field: Any, value: Any, lookups: CatalogLookups) -> Optional[str]:
    if field.type not in MULTI_CHOICE_TYPES or not isinstance(value, list):
        return None
    option_set_id = getattr(field, "multi_select_option_set_id", None)
    option_set = lookups.multi_select_option_sets.get(option_set_id) if option_set_id else None
    if option_set is not None:
        if option_set.min_selections and len(value) < option_set.min_selections:
            return select_at_least(option_set.min_selections)
        if option_set.max_selections and len(value) > option_set.max_selections:
            return select_at_most(option_set.max_selections)
    valid = _resolve_options(
        field,
        [
            ("multi_select_option_set_id", lookups.multi_select_option_sets),
            ("select_option_set_id", lookups.select_option_sets),
        ],
    )
    if valid is None:
        return None
    tokens = canonical_option_values(valid)
    if any(canonicalize_answer_value(v) not in tokens for v in value):
        return MSG_SOME_OPTIONS_UNAVAILABLE
    return None


def _check_single_choice(field: Any, value: Any, lookups: CatalogLookups) -> Optional[str]:
    if field.type not in (FieldType.RADIO, FieldType.SELECT):
        return None
    valid = _resolve_options(
        field,
        [
            ("radio_option_set_id", lookups.radio_option_sets),
            ("select_option_set_id", lookups.select_option_sets),
        ],
    )
    if valid is not None and canonicalize_answer_value(value) not in canonical_option_values(valid):
        return MSG_OPTION_UNAVAILABLE
    return None


def _check_rating(field: Any, value: Any, lookups: CatalogLookups) -> Optional[str]:
    if field.type != FieldType.RATING:
        return None
    valid = _resolve_options(field, [("rating_scale_id", lookups.rating_scales)])
    if valid is not None and canonicalize_answer_value(value) not in canonical_option_values(valid):
        return MSG_RATING_UNAVAILABLE
    return None


def _rule_number(rule: ValidationRule) -> Optional[float]:
    return parse_number(rule.value)


@lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> Optional[re.Pattern]:
    try:
        return re.compile(pattern)
    except re.error:
        logger.warning("validation_pattern_invalid pattern=%r", pattern)
        return None


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _apply_rule(field: Any, rule: ValidationRule, value: Any) -> Optional[str]:
    kind = rule.type
    if kind in ("required", "custom"):
        return None
    if kind == "email":
        if field.type != FieldType.EMAIL and not is_valid_email(value):
            return rule.message or MSG_INVALID_EMAIL
        return None
    if kind == "pattern":
        if not isinstance(value, str) or not rule.value:
            return None
        regex = _compile_pattern(str(rule.value))
        if regex is not None and regex.search(value) is None:
            return rule.message or MSG_INVALID_FORMAT
        return None

    limit = _rule_number(rule)
    if limit is None:
        logger.debug("validation_rule_skipped field_id=%s rule=%s value=%r", field.id, kind, rule.value)
        return None

    if kind in ("minSelections", "maxSelections"):
        if not isinstance(value, list):
            return None
        if kind == "minSelections" and len(value) < limit:
            return rule.message or select_at_least(limit)
        if kind == "maxSelections" and len(value) > limit:
            return rule.message or select_at_most(limit)
        return None

    if isinstance(value, list):
        if kind == "min" and len(value) < limit:
            return rule.message or select_at_least(limit)
        if kind == "max" and len(value) > limit:
            return rule.message or select_at_most(limit)
    elif isinstance(value, str):
        if kind == "min" and len(value) < limit:
            return rule.message or f"Must be at least {_fmt(limit)} characters"
        if kind == "max" and len(value) > limit:
            return rule.message or f"Must be no more than {_fmt(limit)} characters"
    elif _is_numeric(value):
        if kind == "min" and value < limit:
            return rule.message or f"Must be at least {_fmt(limit)}"
        if kind == "max" and value > limit:
            return rule.message or f"Must be no more than {_fmt(limit)}"
    return None


def _check_rules(field: Any, value: Any, lookups: CatalogLookups) -> Optional[str]:
    for rule in field.validation or []:
        error = _apply_rule(field, rule, value)
        if error:
            return error
    return None


_CHECKS: tuple[Callable[[Any, Any, CatalogLookups], Optional[str]], ...] = (
    _check_format,
    _check_multi_choice,
    _check_single_choice,
    _check_rating,
    _check_rules,
)


def validate_field_value(
    field: Any,
    raw_value: Any,
    lookups: CatalogLookups | None = None,
) -> Optional[str]:
    """Return the first validation error for `raw_value`, or None when valid.

    An optional field with an empty value is always valid, whatever its
    custom rules say.
    """
    lookups = lookups or CatalogLookups()
    value = _normalize(field, raw_value)
    if is_field_empty(field, value):
        return MSG_REQUIRED if field.required else None
    for check in _CHECKS:
        error = check(field, value, lookups)
        if error:
            return error
    return None


__all__ = [
    "MSG_REQUIRED",
    "MSG_INVALID_EMAIL",
    "MSG_INVALID_NUMBER",
    "MSG_SOME_OPTIONS_UNAVAILABLE",
    "MSG_OPTION_UNAVAILABLE",
    "MSG_RATING_UNAVAILABLE",
    "MSG_INVALID_FORMAT",
    "is_valid_email",
    "is_finite_number",
    "parse_number",
    "select_at_least",
    "select_at_most",
    "validate_field_value",
]
