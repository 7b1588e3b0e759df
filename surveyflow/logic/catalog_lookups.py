"""Memoized projection of catalog lists into id-keyed lookups.

The loader delivers catalogs as lists; validators need `id -> catalog` maps.
The projection is recomputed only when the delivered lists change, not on
every field change.
"""

from __future__ import annotations

import logging
from typing import Optional

from surveyflow.models.catalogs import CatalogLists, CatalogLookups

logger = logging.getLogger(__name__)


class CatalogProjection:
    """Caches the last `CatalogLists -> CatalogLookups` projection."""

    def __init__(self) -> None:
        self._source: Optional[CatalogLists] = None
        self._lookups: CatalogLookups = CatalogLookups()

    def reset(self) -> None:
        self._source = None
        self._lookups = CatalogLookups()

    @property
    def lookups(self) -> CatalogLookups:
        return self._lookups

    def project(self, lists: CatalogLists) -> CatalogLookups:
        if self._source is not None and self._source == lists:
            return self._lookups
        self._source = lists.model_copy(deep=True)
        self._lookups = CatalogLookups.from_lists(lists)
        logger.info(
            "catalog_projection_rebuilt rating_scales=%s radio_sets=%s select_sets=%s multi_select_sets=%s",
            len(self._lookups.rating_scales),
            len(self._lookups.radio_option_sets),
            len(self._lookups.select_option_sets),
            len(self._lookups.multi_select_option_sets),
        )
        return self._lookups


__all__ = ["CatalogProjection"]
