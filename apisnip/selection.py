"""
Selection and cursor state for the endpoint list.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .catalog import Endpoint

logger = logging.getLogger(__name__)


@dataclass
class SearchSession:
    """
    State of the search filter.

    ``backup`` holds the authoritative full endpoint list once a search has been
    opened; it is kept after the search closes so a later search resumes from it.
    """

    active: bool = False
    query: str = ""
    backup: Optional[List[Endpoint]] = None


def selected_first_key(endpoint: Endpoint):
    return (not endpoint.selected, endpoint.path)


class SelectionModel:
    """
    The visible endpoint list with its cursor and scroll offset.

    Out-of-range indices are ignored rather than raised; the cursor is ``None``
    exactly when the list is empty.
    """

    def __init__(self, endpoints: List[Endpoint]):
        self.items: List[Endpoint] = list(endpoints)
        self.cursor: Optional[int] = 0 if self.items else None
        self.offset = 0
        self.session = SearchSession()

    def __len__(self) -> int:
        return len(self.items)

    @property
    def current(self) -> Optional[Endpoint]:
        if self.cursor is None or not 0 <= self.cursor < len(self.items):
            return None
        return self.items[self.cursor]

    def authoritative(self) -> List[Endpoint]:
        """The full endpoint list, regardless of any active filter."""
        if self.session.backup is not None:
            return self.session.backup
        return self.items

    def selected_endpoints(self) -> List[Endpoint]:
        selected = [endpoint for endpoint in self.authoritative() if endpoint.selected]
        return sorted(selected, key=lambda endpoint: endpoint.path)

    def selected_count(self) -> int:
        return sum(1 for endpoint in self.authoritative() if endpoint.selected)

    def toggle(self, index: int) -> Optional[Endpoint]:
        if not 0 <= index < len(self.items):
            return None
        endpoint = self.items[index]
        endpoint.toggle()
        logger.debug(f"{endpoint.path} is now {endpoint.status.value}")
        return endpoint

    def _move_to(self, index: int) -> None:
        if not self.items:
            self.cursor = None
            return
        self.cursor = max(0, min(index, len(self.items) - 1))

    def select_next(self) -> None:
        if self.items:
            self._move_to((self.cursor or 0) + 1)

    def select_previous(self) -> None:
        if self.items:
            self._move_to((self.cursor or 0) - 1)

    # The mouse wheel moves the cursor exactly like the arrow keys
    scroll_down = select_next
    scroll_up = select_previous

    def page_next(self, visible_rows: int) -> None:
        if self.items:
            self._move_to((self.cursor or 0) + max(1, visible_rows))

    def page_previous(self, visible_rows: int) -> None:
        if self.items:
            self._move_to((self.cursor or 0) - max(1, visible_rows))

    def go_to_top(self) -> None:
        if self.items:
            self.cursor = 0
        self.offset = 0

    def go_to_bottom(self, visible_rows: int = 1) -> None:
        if not self.items:
            self.offset = 0
            return
        self.cursor = len(self.items) - 1
        self.offset = max(0, len(self.items) - max(1, visible_rows))

    def ensure_visible(self, visible_rows: int) -> None:
        """Scroll just far enough that the cursor row is on screen."""
        if self.cursor is None:
            self.offset = 0
            return
        visible_rows = max(1, visible_rows)
        if self.cursor < self.offset:
            self.offset = self.cursor
        elif self.cursor >= self.offset + visible_rows:
            self.offset = self.cursor - visible_rows + 1
        self.offset = max(0, min(self.offset, max(0, len(self.items) - 1)))

    def hit_test(
        self,
        row: int,
        scroll_offset: int,
        header_rows: int,
        visible_rows: Optional[int] = None,
    ) -> Optional[int]:
        """
        Map a screen row to a list index.

        Args:
            row: Screen row that was clicked, relative to the top of the table
            scroll_offset: Index of the first visible item
            header_rows: Rows above the first item (borders, column header)
            visible_rows: Height of the item band, if bounded

        Returns:
            The index under the row, or None when the row is outside the items
        """
        band_row = row - header_rows
        if band_row < 0:
            return None
        if visible_rows is not None and band_row >= visible_rows:
            return None
        index = band_row + scroll_offset
        if index >= len(self.items):
            return None
        return index

    def select_index(self, index: int) -> None:
        if 0 <= index < len(self.items):
            self.cursor = index

    def select_path(self, path: Optional[str]) -> bool:
        for index, endpoint in enumerate(self.items):
            if endpoint.path == path:
                self.cursor = index
                return True
        return False

    def repair_selection(self, previous_path: Optional[str]) -> None:
        """Put the cursor back on ``previous_path``, or the first item, or nowhere."""
        if self.select_path(previous_path):
            return
        self.cursor = 0 if self.items else None
        self.offset = 0

    def reorder_after_toggle(self) -> None:
        """
        Sort selected endpoints first, then by path, keeping the cursor on the
        same endpoint. Does nothing while a search is active.
        """
        if self.session.active:
            return
        current = self.current
        self.items.sort(key=selected_first_key)
        if current is not None:
            self.select_path(current.path)
