"""
Fuzzy search over the endpoint list.

The filtered view is derived from the session backup, which stays the
authoritative list for the whole run. Visible entries and backup entries are
the same Endpoint objects, so a status change made while filtered is already
present in the backup; the explicit write-through in ``toggle_during_search``
keeps that true even if a caller hands in copies.
"""

import logging
from typing import Callable, List, Optional, Tuple

from .catalog import Endpoint
from .selection import SelectionModel, selected_first_key

logger = logging.getLogger(__name__)

Matcher = Callable[[str, str], Optional[int]]

SCORE_MATCH = 16
BONUS_CONSECUTIVE = 8
BONUS_BOUNDARY = 8
PENALTY_GAP = 1

BOUNDARY_CHARS = "/-_.{ "


def _fold(text: str) -> str:
    # one character in, one character out, so positions line up with the original
    return ''.join(c.lower() if len(c.lower()) == 1 else c for c in text)


def _is_boundary(text: str, pos: int) -> bool:
    if pos == 0:
        return True
    before, here = text[pos - 1], text[pos]
    return before in BOUNDARY_CHARS or (before.islower() and here.isupper())


def _score_from(original: str, haystack: str, needle: str, start: int) -> Optional[int]:
    score = 0
    run = 0
    prev = None
    for i, char in enumerate(needle):
        pos = start if i == 0 else haystack.find(char, prev + 1)
        if pos == -1:
            return None
        score += SCORE_MATCH
        if prev is not None and pos == prev + 1:
            run += 1
            score += BONUS_CONSECUTIVE * run
        else:
            run = 0
            if prev is not None:
                score -= PENALTY_GAP * (pos - prev - 1)
        if _is_boundary(original, pos):
            score += BONUS_BOUNDARY
        prev = pos
    return score


def fuzzy_match(haystack: str, needle: str) -> Optional[int]:
    """
    Case-insensitive subsequence match.

    Args:
        haystack: Text to search in
        needle: Characters that must appear in order

    Returns:
        A score where higher is a better match, or None when there is no match
    """
    if not needle:
        return 0
    lowered = _fold(haystack)
    needle = _fold(needle)

    best = None
    start = lowered.find(needle[0])
    while start != -1:
        score = _score_from(haystack, lowered, needle, start)
        if score is None:
            # a later start can only see fewer characters
            break
        if best is None or score > best:
            best = score
        start = lowered.find(needle[0], start + 1)
    return best


class SearchFilter:
    """Filters a SelectionModel's visible list by a fuzzy query."""

    def __init__(self, model: SelectionModel, matcher: Matcher = fuzzy_match):
        self.model = model
        self.matcher = matcher

    @property
    def session(self):
        return self.model.session

    @property
    def active(self) -> bool:
        return self.session.active

    @property
    def query(self) -> str:
        return self.session.query

    def _current_path(self) -> Optional[str]:
        current = self.model.current
        return current.path if current is not None else None

    def _backup(self) -> List[Endpoint]:
        if self.session.backup is None:
            self.session.backup = list(self.model.items)
        return self.session.backup

    def enter(self) -> None:
        """Open the search. An existing backup is never replaced."""
        was_filtered = self.session.active and self.session.query
        self._backup()
        self.session.active = True
        self.session.query = ""
        if was_filtered:
            self._show_all()
        logger.debug("Search opened")

    def score(self, endpoint: Endpoint, needle: str) -> Optional[int]:
        path_score = self.matcher(endpoint.path, needle)
        desc_score = self.matcher(endpoint.display_description(), needle)
        if path_score is not None and desc_score is not None:
            return 2 * path_score + desc_score
        if path_score is not None:
            return 2 * path_score
        return desc_score

    def _show_all(self) -> None:
        previous = self._current_path()
        self.model.items = sorted(self._backup(), key=selected_first_key)
        self.model.repair_selection(previous)

    def update(self, query: str) -> None:
        """Re-filter the visible list for ``query``; an empty query shows everything."""
        self.session.query = query
        needle = query.lower()
        if not needle:
            self._show_all()
            return

        previous = self._current_path()
        scored: List[Tuple[int, Endpoint]] = []
        for endpoint in self._backup():
            score = self.score(endpoint, needle)
            if score is not None:
                scored.append((score, endpoint))
        scored.sort(key=lambda item: (not item[1].selected, -item[0]))

        self.model.items = [endpoint for _, endpoint in scored]
        self.model.repair_selection(previous)
        logger.debug(f"'{query}' matches {len(scored)} endpoints")

    def append(self, char: str) -> None:
        self.update(self.session.query + char)

    def backspace(self) -> None:
        self.update(self.session.query[:-1])

    def clear(self) -> None:
        self.update("")

    def toggle_during_search(self, index: int) -> Optional[Endpoint]:
        """Toggle a visible entry and write the new status through to the backup."""
        endpoint = self.model.toggle(index)
        if endpoint is None:
            return None
        for entry in self._backup():
            if entry.path == endpoint.path and entry is not endpoint:
                entry.status = endpoint.status
        return endpoint

    def exit(self) -> None:
        """Close the search and show the full list. The backup is kept."""
        self.session.active = False
        self.session.query = ""
        self._show_all()
        logger.debug("Search closed")
