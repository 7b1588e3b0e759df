"""Section-level and whole-form validation.

Both validators flatten a section's own fields and its subsections' fields
into one list and run `validate_field_value` once per field, keyed by field
id. Each call recomputes the full error set for its scope from scratch and
never mutates `form_data`, so calling them once per keystroke is safe.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from surveyflow.logic.field_validation import validate_field_value
from surveyflow.models.catalogs import CatalogLookups
from surveyflow.models.response_types import SectionValidationResult
from surveyflow.models.survey import SurveyConfig, SurveySection

logger = logging.getLogger(__name__)


def _default_order(section: SurveySection) -> List[Any]:
    fields: List[Any] = list(section.fields)
    for sub in section.subsections:
        fields.extend(sub.fields)
    return fields


def section_fields(section: SurveySection) -> List[Any]:
    """Return every field of a section in declared order.

    A section's `content` list, when present and complete, defines the
    interleaving of fields and subsections. Otherwise the section's own fields
    come first, followed by each subsection's fields.
    """
    content = section.content or []
    expected = len(section.fields) + len(section.subsections)
    if not content or len(content) != expected:
        return _default_order(section)

    by_field_id = {f.id: f for f in section.fields}
    by_sub_id = {s.id: s for s in section.subsections}
    ordered: List[Any] = []
    for entry in sorted(content, key=lambda c: c.order):
        if entry.type == "field" and entry.field_id in by_field_id:
            ordered.append(by_field_id[entry.field_id])
        elif entry.type == "subsection" and entry.subsection_id in by_sub_id:
            ordered.extend(by_sub_id[entry.subsection_id].fields)
        else:
            logger.warning(
                "section_content_unresolved section_id=%s entry_type=%s",
                section.id,
                entry.type,
            )
            return _default_order(section)
    return ordered


def _collect_errors(
    fields: Iterable[Any],
    form_data: Mapping[str, Any],
    lookups: CatalogLookups,
) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for field in fields:
        err = validate_field_value(field, form_data.get(field.id), lookups)
        if err:
            errors[field.id] = err
    return errors


def validate_section(
    index: int,
    form_data: Mapping[str, Any],
    config: SurveyConfig,
    lookups: CatalogLookups | None = None,
) -> SectionValidationResult:
    """Validate every field of the section at `index`.

    An index outside the configured sections validates as empty and valid.
    """
    if index < 0 or index >= len(config.sections):
        return SectionValidationResult(is_valid=True, errors={})
    section = config.sections[index]
    errors = _collect_errors(section_fields(section), form_data, lookups or CatalogLookups())
    if errors:
        logger.debug(
            "section_validation_failed survey_id=%s index=%s invalid=%s",
            config.id,
            index,
            sorted(errors),
        )
    return SectionValidationResult(is_valid=not errors, errors=errors)


def validate_all_fields(
    form_data: Mapping[str, Any],
    config: SurveyConfig,
    lookups: CatalogLookups | None = None,
) -> SectionValidationResult:
    """Validate every field of every section (final submit)."""
    lookups = lookups or CatalogLookups()
    fields: List[Any] = []
    for section in config.sections:
        fields.extend(section_fields(section))
    errors = _collect_errors(fields, form_data, lookups)
    return SectionValidationResult(is_valid=not errors, errors=errors)


def section_validity_map(
    form_data: Mapping[str, Any],
    config: SurveyConfig,
    lookups: CatalogLookups | None = None,
) -> Dict[int, bool]:
    """Per-section validity for the step indicator's error badges."""
    return {
        i: validate_section(i, form_data, config, lookups).is_valid
        for i in range(len(config.sections))
    }


def first_invalid_field(section: SurveySection, errors: Mapping[str, str]) -> Optional[str]:
    """Return the id of the first field in declared order carrying an error."""
    for field in section_fields(section):
        if field.id in errors:
            return field.id
    return None


def find_field(config: SurveyConfig, field_id: str) -> Optional[Tuple[int, Any]]:
    """Return `(section_index, field)` for a field id, or None."""
    for i, section in enumerate(config.sections):
        for field in section_fields(section):
            if field.id == field_id:
                return i, field
    return None


def section_index_for_field(config: SurveyConfig, field_id: str) -> Optional[int]:
    found = find_field(config, field_id)
    return found[0] if found else None


def first_invalid_location(
    config: SurveyConfig, errors: Mapping[str, str]
) -> Optional[Tuple[int, str]]:
    """Return `(section_index, field_id)` of the first invalid field in the form."""
    for i, section in enumerate(config.sections):
        field_id = first_invalid_field(section, errors)
        if field_id is not None:
            return i, field_id
    return None


__all__ = [
    "section_fields",
    "validate_section",
    "validate_all_fields",
    "section_validity_map",
    "first_invalid_field",
    "first_invalid_location",
    "find_field",
    "section_index_for_field",
]
