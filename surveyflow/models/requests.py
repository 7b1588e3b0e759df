"""Pydantic models for form request payloads.

Declared apart from the route modules so the payload shapes are not coupled to
the route implementation files.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class OpenFormRequest(BaseModel):
    survey_id: str
    session_id: Optional[str] = None


class FieldChangeRequest(BaseModel):
    # str, number, bool or list of str depending on the field type
    value: Any = None


__all__ = ["OpenFormRequest", "FieldChangeRequest"]
