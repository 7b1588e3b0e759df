"""Canonicalization helpers for answer values.

Provides a single function to normalize a respondent value into a stable
string token used for option membership comparisons.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Set


def canonicalize_answer_value(value: Any) -> Optional[str]:
    """Return a stable string representation for an answer value.

    - Booleans -> "true" / "false"
    - Numbers  -> integer form when integral, else decimal string
    - Text     -> as-is string
    - None     -> None
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    return str(value)


def canonical_option_values(values: Iterable[Any]) -> Set[str]:
    """Canonical token set for a list of option values."""
    out: Set[str] = set()
    for v in values:
        token = canonicalize_answer_value(v)
        if token is not None:
            out.add(token)
    return out


__all__ = ["canonicalize_answer_value", "canonical_option_values"]
