"""Pydantic models for survey configuration documents.

Configuration documents arrive with camelCase keys (`ratingScaleId`,
`isDefault`, ...); models expose snake_case attributes and accept either
spelling. Field definitions form a discriminated union on `type` so that
option-source keys only exist on the variants that use them.
"""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SurveyModel(BaseModel):
    """Base model accepting camelCase wire keys and snake_case names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ValidationRule(SurveyModel):
    type: Literal[
        "required",
        "email",
        "min",
        "max",
        "minSelections",
        "maxSelections",
        "pattern",
        "custom",
    ]
    value: Any = None
    message: Optional[str] = None


class FieldOption(SurveyModel):
    value: str
    label: str = ""
    is_default: bool = False


class _FieldBase(SurveyModel):
    id: str
    label: str
    required: bool = False
    validation: List[ValidationRule] = Field(default_factory=list)
    placeholder: Optional[str] = None
    default_value: Any = None


class TextField(_FieldBase):
    type: Literal["text", "textarea"]


class EmailField(_FieldBase):
    type: Literal["email"]


class NumberField(_FieldBase):
    type: Literal["number"]


class CheckboxField(_FieldBase):
    type: Literal["checkbox"]


class ChoiceField(_FieldBase):
    """Single-choice field (radio buttons or a select box)."""

    type: Literal["radio", "select"]
    radio_option_set_id: Optional[str] = None
    select_option_set_id: Optional[str] = None
    options: List[FieldOption] = Field(default_factory=list)


class RatingField(_FieldBase):
    type: Literal["rating"]
    rating_scale_id: Optional[str] = None
    options: List[FieldOption] = Field(default_factory=list)


class MultiSelectField(_FieldBase):
    """Multi-choice field; `multiselectdropdown` may draw from a select set."""

    type: Literal["multiselect", "multiselectdropdown"]
    multi_select_option_set_id: Optional[str] = None
    select_option_set_id: Optional[str] = None
    options: List[FieldOption] = Field(default_factory=list)


FieldDefinition = Annotated[
    Union[
        TextField,
        EmailField,
        NumberField,
        CheckboxField,
        ChoiceField,
        RatingField,
        MultiSelectField,
    ],
    Field(discriminator="type"),
]


class Subsection(SurveyModel):
    id: str
    title: str = ""
    description: Optional[str] = None
    fields: List[FieldDefinition] = Field(default_factory=list)
    order: int = 0


class SectionContent(SurveyModel):
    """One entry of a section's unified ordering of fields and subsections."""

    type: Literal["field", "subsection"]
    order: int = 0
    field_id: Optional[str] = None
    subsection_id: Optional[str] = None


class SurveySection(SurveyModel):
    id: str
    title: str
    description: Optional[str] = None
    fields: List[FieldDefinition] = Field(default_factory=list)
    subsections: List[Subsection] = Field(default_factory=list)
    content: Optional[List[SectionContent]] = None
    order: int = 0


class PaginatorConfig(SurveyModel):
    allow_back_navigation: bool = True
    show_step_indicator: bool = True
    show_progress_bar: bool = True


class SurveyConfig(SurveyModel):
    id: str
    title: str = ""
    description: Optional[str] = None
    sections: List[SurveySection] = Field(min_length=1)
    paginator_config: PaginatorConfig = Field(default_factory=PaginatorConfig)
    use_descriptive_ids: bool = True
    is_active: bool = True
    version: str = "1"


__all__ = [
    "SurveyModel",
    "ValidationRule",
    "FieldOption",
    "TextField",
    "EmailField",
    "NumberField",
    "CheckboxField",
    "ChoiceField",
    "RatingField",
    "MultiSelectField",
    "FieldDefinition",
    "Subsection",
    "SectionContent",
    "SurveySection",
    "PaginatorConfig",
    "SurveyConfig",
]
