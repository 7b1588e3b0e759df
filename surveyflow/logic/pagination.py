"""Section pagination state machine.

One state per section index. Transitions either fully apply or are refused
without touching state; each returns True when it moved the paginator.
Validation gating of `go_to_next` and click-navigation guards belong to the
form controller, not to this machine.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Set

from surveyflow.models.response_types import PaginationState

logger = logging.getLogger(__name__)


class SectionPaginator:
    """Tracks the current section, visited sections and back-navigation."""

    def __init__(
        self,
        total_sections: int,
        *,
        initial_index: int = 0,
        allow_back_navigation: bool = True,
        on_section_change: Optional[Callable[[int], None]] = None,
    ) -> None:
        if total_sections < 1:
            raise ValueError("total_sections must be at least 1")
        if initial_index < 0 or initial_index >= total_sections:
            raise ValueError(f"initial_index {initial_index} out of range")
        self._total = total_sections
        self._initial = initial_index
        self._current = initial_index
        self._visited: Set[int] = {initial_index}
        self.allow_back_navigation = allow_back_navigation
        self._on_section_change = on_section_change

    @property
    def current_section_index(self) -> int:
        return self._current

    @property
    def total_sections(self) -> int:
        return self._total

    @property
    def visited_sections(self) -> frozenset[int]:
        return frozenset(self._visited)

    @property
    def is_first_section(self) -> bool:
        return self._current == 0

    @property
    def is_last_section(self) -> bool:
        return self._current == self._total - 1

    @property
    def state(self) -> PaginationState:
        return PaginationState(
            current_section_index=self._current,
            total_sections=self._total,
            visited_sections=sorted(self._visited),
            is_first_section=self.is_first_section,
            is_last_section=self.is_last_section,
            allow_back_navigation=self.allow_back_navigation,
        )

    def _move(self, index: int) -> None:
        previous = self._current
        self._current = index
        self._visited.add(index)
        logger.info("section_changed from=%s to=%s", previous, index)
        if self._on_section_change is not None:
            self._on_section_change(index)

    def go_to_next(self) -> bool:
        """Advance one section; refused on the last section."""
        if self.is_last_section:
            return False
        self._move(self._current + 1)
        return True

    def go_to_previous(self) -> bool:
        """Step back one section; refused when back navigation is off or at 0."""
        if not self.allow_back_navigation or self._current == 0:
            return False
        # A resumed session can land past unvisited sections; keep current visited
        self._move(self._current - 1)
        return True

    def go_to_section(self, index: int) -> bool:
        """Jump directly to `index`, marking it visited.

        Used for error navigation and resumed sessions; does not require the
        target to have been visited before. Out-of-range indices are refused.
        """
        if index < 0 or index >= self._total:
            logger.warning("section_jump_refused index=%s total=%s", index, self._total)
            return False
        if index == self._current:
            self._visited.add(index)
            return True
        self._move(index)
        return True

    def can_navigate_to(self, index: int) -> bool:
        """Click-navigation guard for the step indicator.

        The current section is always reachable; otherwise the target must
        already be visited, and earlier sections need back navigation.
        """
        if index == self._current:
            return True
        if index < 0 or index >= self._total:
            return False
        if index not in self._visited:
            return False
        if index < self._current and not self.allow_back_navigation:
            return False
        return True

    def reset(self) -> None:
        self._current = self._initial
        self._visited = {self._initial}


__all__ = ["SectionPaginator"]
