"""
Application state and input handling.

Each input event becomes at most one Action, and ``AppModel.update`` applies it.
Nothing in here touches the terminal: ``tui`` turns raw curses input into
InputEvents and renders the model after every step.
"""

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from .catalog import Endpoint
from .search import SearchFilter
from .selection import SelectionModel

logger = logging.getLogger(__name__)

# Table border plus column header
HEADER_ROWS = 2


class Message(enum.Enum):
    CLEAR_SEARCH = "clear_search"
    GO_TO_BOTTOM = "go_to_bottom"
    GO_TO_TOP = "go_to_top"
    HIDE_SEARCH = "hide_search"
    KEY_PRESS = "key_press"
    QUIT = "quit"
    SCROLL_DOWN = "scroll_down"
    SCROLL_UP = "scroll_up"
    SELECT_NEXT = "select_next"
    SELECT_NEXT_PAGE = "select_next_page"
    SELECT_PREVIOUS = "select_previous"
    SELECT_PREVIOUS_PAGE = "select_previous_page"
    SELECT_ROW = "select_row"
    SHOW_SEARCH = "show_search"
    TOGGLE_AND_SELECT_NEXT = "toggle_and_select_next"
    WRITE_AND_QUIT = "write_and_quit"


class EventKind(enum.Enum):
    KEY = "key"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    CLICK = "click"


@dataclass(frozen=True)
class InputEvent:
    """
    A raw input event.

    ``key`` is either a single printable character or one of the names
    ``up down pageup pagedown home end esc enter backspace ctrl-u``.
    ``row`` is relative to the top of the endpoint table.
    """

    kind: EventKind
    key: str = ""
    row: int = 0


@dataclass(frozen=True)
class Action:
    message: Message
    key: str = ""
    row: int = 0


SEARCH_KEYS = {
    'ctrl-u': Message.CLEAR_SEARCH,
    'esc': Message.HIDE_SEARCH,
    ' ': Message.TOGGLE_AND_SELECT_NEXT,
    'up': Message.SELECT_PREVIOUS,
    'down': Message.SELECT_NEXT,
    'pagedown': Message.SELECT_NEXT_PAGE,
    'pageup': Message.SELECT_PREVIOUS_PAGE,
    'home': Message.GO_TO_TOP,
}

NORMAL_KEYS = {
    ' ': Message.TOGGLE_AND_SELECT_NEXT,
    '/': Message.SHOW_SEARCH,
    'j': Message.SELECT_NEXT,
    'k': Message.SELECT_PREVIOUS,
    'q': Message.QUIT,
    'w': Message.WRITE_AND_QUIT,
    'up': Message.SELECT_PREVIOUS,
    'down': Message.SELECT_NEXT,
    'esc': Message.HIDE_SEARCH,
    'pagedown': Message.SELECT_NEXT_PAGE,
    'pageup': Message.SELECT_PREVIOUS_PAGE,
    'home': Message.GO_TO_TOP,
    'end': Message.GO_TO_BOTTOM,
}


def handle_key(key: str, search_active: bool) -> Optional[Action]:
    if search_active:
        if key in SEARCH_KEYS:
            return Action(SEARCH_KEYS[key])
        if key == 'enter':
            return None
        return Action(Message.KEY_PRESS, key=key)

    message = NORMAL_KEYS.get(key)
    return Action(message) if message is not None else None


def handle_event(event: InputEvent, search_active: bool) -> Optional[Action]:
    """Translate one input event into at most one action."""
    if event.kind is EventKind.KEY:
        return handle_key(event.key, search_active)
    if event.kind is EventKind.SCROLL_UP:
        return Action(Message.SCROLL_UP)
    if event.kind is EventKind.SCROLL_DOWN:
        return Action(Message.SCROLL_DOWN)
    if event.kind is EventKind.CLICK:
        return Action(Message.SELECT_ROW, row=event.row)
    return None


class AppModel:
    """The single piece of mutable state the interactive loop works on."""

    def __init__(self, endpoints: List[Endpoint], infile: str = ""):
        self.infile = infile
        self.selection = SelectionModel(endpoints)
        self.search = SearchFilter(self.selection)
        # Height of the item band, kept up to date by the renderer
        self.visible_rows = 1
        self.done = False
        self.write_requested = False

    def selected_endpoints(self) -> List[Endpoint]:
        return self.selection.selected_endpoints()

    def toggle_and_select_next(self) -> None:
        index = self.selection.cursor
        if index is None:
            return
        if self.search.active:
            self.search.toggle_during_search(index)
        else:
            self.selection.toggle(index)
        self.selection.select_next()
        self.selection.reorder_after_toggle()

    def edit_query(self, key: str) -> None:
        if key == 'backspace':
            self.search.backspace()
        elif len(key) == 1 and key.isprintable():
            self.search.append(key)

    def update(self, action: Action) -> None:
        selection = self.selection
        message = action.message

        if message is Message.QUIT:
            self.done = True
        elif message is Message.WRITE_AND_QUIT:
            self.write_requested = True
            self.done = True
        elif message is Message.SELECT_NEXT:
            selection.select_next()
        elif message is Message.SELECT_PREVIOUS:
            selection.select_previous()
        elif message is Message.SCROLL_DOWN:
            selection.scroll_down()
        elif message is Message.SCROLL_UP:
            selection.scroll_up()
        elif message is Message.SELECT_NEXT_PAGE:
            selection.page_next(self.visible_rows)
        elif message is Message.SELECT_PREVIOUS_PAGE:
            selection.page_previous(self.visible_rows)
        elif message is Message.GO_TO_TOP:
            selection.go_to_top()
        elif message is Message.GO_TO_BOTTOM:
            selection.go_to_bottom(self.visible_rows)
        elif message is Message.SELECT_ROW:
            index = selection.hit_test(action.row, selection.offset, HEADER_ROWS, self.visible_rows)
            if index is not None:
                selection.select_index(index)
        elif message is Message.TOGGLE_AND_SELECT_NEXT:
            self.toggle_and_select_next()
        elif message is Message.SHOW_SEARCH:
            self.search.enter()
        elif message is Message.HIDE_SEARCH:
            if self.search.active:
                self.search.exit()
        elif message is Message.CLEAR_SEARCH:
            self.search.clear()
        elif message is Message.KEY_PRESS:
            self.edit_query(action.key)

        selection.ensure_visible(self.visible_rows)
