"""Pydantic models for engine results and form response bodies."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SectionValidationResult(BaseModel):
    is_valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)


class PaginationState(BaseModel):
    """Read-only view of the section paginator for the step indicator."""

    current_section_index: int
    total_sections: int
    visited_sections: List[int]
    is_first_section: bool
    is_last_section: bool
    allow_back_navigation: bool


class FieldChangeOutcome(BaseModel):
    field_id: str
    validated: bool
    error: Optional[str] = None


class NavigationOutcome(BaseModel):
    moved: bool
    current_section_index: int
    errors: Dict[str, str] = Field(default_factory=dict)
    # Field the UI should scroll to and focus, when navigation was refused
    focus_field_id: Optional[str] = None
    reason: Optional[str] = None


class SubmitOutcome(BaseModel):
    submitted: bool
    current_section_index: int
    errors: Dict[str, str] = Field(default_factory=dict)
    focus_field_id: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None


class FormSnapshot(BaseModel):
    """Everything the rendering layer needs for one form-filling session."""

    form_id: str
    survey_id: str
    session_id: Optional[str] = None
    form_data: Dict[str, Any]
    errors: Dict[str, str]
    pagination: PaginationState
    has_submitted: bool
    validated_sections: List[int]
    section_validity: Dict[int, bool]


__all__ = [
    "SectionValidationResult",
    "PaginationState",
    "FieldChangeOutcome",
    "NavigationOutcome",
    "SubmitOutcome",
    "FormSnapshot",
]
