"""Pydantic models for externally managed option catalogs.

Catalogs (rating scales and radio/select/multi-select option sets) are loaded
by a data-loading collaborator and handed to the engine as plain lookup maps
keyed by catalog id. The engine never fetches them itself.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from pydantic import Field

from surveyflow.models.survey import SurveyModel


class CatalogOption(SurveyModel):
    value: str
    label: str = ""
    order: int = 0
    is_default: bool = False
    color: Optional[str] = None


class _Catalog(SurveyModel):
    id: str
    name: str = ""
    description: Optional[str] = None
    options: List[CatalogOption] = Field(default_factory=list)
    is_active: bool = True


class RatingScale(_Catalog):
    pass


class RadioOptionSet(_Catalog):
    pass


class SelectOptionSet(_Catalog):
    pass


class MultiSelectOptionSet(_Catalog):
    min_selections: Optional[int] = None
    max_selections: Optional[int] = None


class CatalogLists(SurveyModel):
    """Catalog payload as delivered by the loader: plain lists per kind."""

    rating_scales: List[RatingScale] = Field(default_factory=list)
    radio_option_sets: List[RadioOptionSet] = Field(default_factory=list)
    select_option_sets: List[SelectOptionSet] = Field(default_factory=list)
    multi_select_option_sets: List[MultiSelectOptionSet] = Field(default_factory=list)


class CatalogLookups(SurveyModel):
    """Id-keyed catalog maps consumed by the validators.

    Any map may be empty or partial while catalogs are still loading.
    """

    rating_scales: Dict[str, RatingScale] = Field(default_factory=dict)
    radio_option_sets: Dict[str, RadioOptionSet] = Field(default_factory=dict)
    select_option_sets: Dict[str, SelectOptionSet] = Field(default_factory=dict)
    multi_select_option_sets: Dict[str, MultiSelectOptionSet] = Field(default_factory=dict)

    @classmethod
    def from_lists(cls, lists: CatalogLists) -> "CatalogLookups":
        return cls(
            rating_scales=_index(lists.rating_scales),
            radio_option_sets=_index(lists.radio_option_sets),
            select_option_sets=_index(lists.select_option_sets),
            multi_select_option_sets=_index(lists.multi_select_option_sets),
        )


def _index(items: Sequence[_Catalog]) -> dict:
    return {item.id: item for item in items}


__all__ = [
    "CatalogOption",
    "RatingScale",
    "RadioOptionSet",
    "SelectOptionSet",
    "MultiSelectOptionSet",
    "CatalogLists",
    "CatalogLookups",
]
