"""Default-value initialization for form state.

Runs at form mount and again whenever option catalogs finish loading. Only
fields whose value is absent from `form_data` are assigned, so re-running it
never overwrites a respondent-set value, including one the respondent cleared
to an empty string.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, MutableMapping, Optional, Sequence, Tuple

from surveyflow.logic.section_validation import section_fields
from surveyflow.models.catalogs import CatalogLookups
from surveyflow.models.field_type import MULTI_CHOICE_TYPES, FieldType
from surveyflow.models.survey import SurveyConfig

logger = logging.getLogger(__name__)

_PENDING = object()


def _catalog_refs(field: Any, lookups: CatalogLookups) -> Sequence[Tuple[str, dict]]:
    if field.type == FieldType.RATING:
        return [("rating_scale_id", lookups.rating_scales)]
    if field.type in (FieldType.RADIO, FieldType.SELECT):
        return [
            ("radio_option_set_id", lookups.radio_option_sets),
            ("select_option_set_id", lookups.select_option_sets),
        ]
    if field.type in MULTI_CHOICE_TYPES:
        return [
            ("multi_select_option_set_id", lookups.multi_select_option_sets),
            ("select_option_set_id", lookups.select_option_sets),
        ]
    return []


def _option_source(field: Any, lookups: CatalogLookups) -> Any:
    """Return the field's authoritative option list, [] or `_PENDING`.

    `_PENDING` marks a catalog reference whose catalog is not loaded yet.
    """
    for attr, catalog_map in _catalog_refs(field, lookups):
        catalog_id = getattr(field, attr, None)
        if catalog_id:
            catalog = catalog_map.get(catalog_id)
            if catalog is None:
                return _PENDING
            return sorted(catalog.options, key=lambda o: o.order)
    return list(getattr(field, "options", None) or [])


def default_for_field(field: Any, lookups: CatalogLookups) -> Optional[Any]:
    """Return the configured default for a field, or None when it has none.

    Single-choice fields take the first option flagged `isDefault`;
    multi-choice fields take every flagged option. A field's own
    `defaultValue` applies when no option is flagged.
    """
    options = _option_source(field, lookups)
    if options is _PENDING:
        return None
    if field.type in MULTI_CHOICE_TYPES:
        flagged: List[str] = [o.value for o in options if o.is_default]
        if flagged:
            return flagged
    elif options:
        for option in options:
            if option.is_default:
                return option.value
    return field.default_value


def apply_default_values(
    form_data: MutableMapping[str, Any],
    config: SurveyConfig,
    lookups: CatalogLookups | None = None,
) -> Dict[str, Any]:
    """Assign defaults to unset fields in place; return what was assigned."""
    lookups = lookups or CatalogLookups()
    assigned: Dict[str, Any] = {}
    for section in config.sections:
        for field in section_fields(section):
            if field.id in form_data:
                continue
            value = default_for_field(field, lookups)
            if value is None:
                continue
            form_data[field.id] = value
            assigned[field.id] = value
    if assigned:
        logger.info(
            "default_values_assigned survey_id=%s fields=%s",
            config.id,
            sorted(assigned),
        )
    return assigned


__all__ = ["default_for_field", "apply_default_values"]
