"""
Terminal front end.

Runs the synchronous loop: render the model, wait up to POLL_TIMEOUT_MS for
one input event, apply the resulting action, repeat until the model is done.
"""

import curses
import logging
from collections import deque
from typing import Deque, Dict, List, Optional, Tuple, Union

from .app import AppModel, EventKind, InputEvent, handle_event
from .catalog import Endpoint, Method

logger = logging.getLogger(__name__)

POLL_TIMEOUT_MS = 250
DETAIL_HEIGHT = 9
LOG_HEIGHT = 6
LOG_CAPACITY = 200

SNIP_MARKER = " ✂ "
NO_MARKER = "   "

SHORTCUTS = "space snip | w write and quit | / search | ▼ move ▲ | q quit"
SEARCH_SHORTCUTS = "space snip | ctrl-u clear | esc close search | ▼ move ▲"

METHOD_COLORS = {
    'GET': curses.COLOR_BLUE,
    'POST': curses.COLOR_GREEN,
    'PUT': curses.COLOR_MAGENTA,
    'PATCH': curses.COLOR_YELLOW,
    'DELETE': curses.COLOR_RED,
    'HEAD': curses.COLOR_CYAN,
}
SELECTED_PAIR = 10

SPECIAL_KEYS = {
    curses.KEY_UP: 'up',
    curses.KEY_DOWN: 'down',
    curses.KEY_NPAGE: 'pagedown',
    curses.KEY_PPAGE: 'pageup',
    curses.KEY_HOME: 'home',
    curses.KEY_END: 'end',
    curses.KEY_BACKSPACE: 'backspace',
    curses.KEY_ENTER: 'enter',
}

CHAR_KEYS = {
    '\x1b': 'esc',
    '\x15': 'ctrl-u',
    '\n': 'enter',
    '\r': 'enter',
    '\x7f': 'backspace',
    '\x08': 'backspace',
}


class LogBuffer(logging.Handler):
    """Keeps recent log lines in memory while curses owns the terminal."""

    def __init__(self, capacity: int = LOG_CAPACITY):
        super().__init__()
        self.lines: Deque[str] = deque(maxlen=capacity)
        self.setFormatter(logging.Formatter('%(asctime)s %(message)s', datefmt='%H:%M:%S'))

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(self.format(record))


class Screen:
    """Draws an AppModel onto a curses window."""

    def __init__(self, stdscr, model: AppModel, log_buffer: Optional[LogBuffer] = None):
        self.stdscr = stdscr
        self.model = model
        self.log_buffer = log_buffer
        self.table_top = 0
        self.method_pairs: Dict[str, int] = {}
        self._init_colors()

    def _init_colors(self) -> None:
        if not curses.has_colors():
            return
        curses.start_color()
        try:
            curses.use_default_colors()
        except curses.error:
            pass
        for i, (verb, color) in enumerate(METHOD_COLORS.items(), start=1):
            curses.init_pair(i, color, -1)
            self.method_pairs[verb] = i
        curses.init_pair(SELECTED_PAIR, curses.COLOR_GREEN, -1)

    def method_attr(self, verb: str) -> int:
        pair = self.method_pairs.get(verb.upper())
        if pair is None:
            return curses.A_ITALIC if hasattr(curses, 'A_ITALIC') else curses.A_DIM
        return curses.color_pair(pair) | curses.A_BOLD

    def put(self, y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:
        height, width = self.stdscr.getmaxyx()
        if not 0 <= y < height or x >= width:
            return
        try:
            self.stdscr.addnstr(y, x, text, max(0, width - x), attr)
        except curses.error:
            # writing the bottom-right cell moves the cursor off screen
            pass

    def render(self) -> None:
        model = self.model
        stdscr = self.stdscr
        stdscr.erase()
        height, width = stdscr.getmaxyx()

        y = 0
        if model.search.active:
            self.put(0, 0, f"/{model.search.query}", curses.A_BOLD)
            y = 1

        log_height = LOG_HEIGHT if self.log_buffer is not None else 0
        table_height = max(3, height - y - DETAIL_HEIGHT - log_height)
        self.table_top = y
        model.visible_rows = max(1, table_height - 2)
        model.selection.ensure_visible(model.visible_rows)

        self.render_table(y, table_height, width)
        self.render_detail(y + table_height, DETAIL_HEIGHT, width)
        if self.log_buffer is not None:
            self.render_logs(y + table_height + DETAIL_HEIGHT, log_height, width)
        stdscr.refresh()

    def render_table(self, top: int, height: int, width: int) -> None:
        model = self.model
        selection = model.selection
        title = f" {len(selection)} endpoints for {model.infile} "
        self.put(top, 0, title.center(width, "─")[:width], curses.A_BOLD)

        if not selection.items:
            self.put(top + 2, 0, "No items match your search.".center(width), curses.A_DIM)
            return

        path_width = max(20, width // 3)
        summary_width = max(20, width - path_width - 16)
        header = f"{NO_MARKER}{'Summary':<{summary_width}} {'Path':<{path_width}} Methods"
        self.put(top + 1, 0, header, curses.A_BOLD)

        rows = selection.items[selection.offset:selection.offset + model.visible_rows]
        for i, endpoint in enumerate(rows):
            index = selection.offset + i
            marker = SNIP_MARKER if endpoint.selected else NO_MARKER
            summary = endpoint.display_description()[:summary_width - 1]
            verbs = " ".join(method.verb.upper() for method in endpoint.methods)
            line = f"{marker}{summary:<{summary_width}} {endpoint.path[:path_width - 1]:<{path_width}} {verbs}"
            attr = curses.A_NORMAL
            if endpoint.selected:
                attr |= curses.A_BOLD
                if self.method_pairs:
                    attr |= curses.color_pair(SELECTED_PAIR)
            if index == selection.cursor:
                attr |= curses.A_REVERSE
            self.put(top + 2 + i, 0, line.ljust(width), attr)

    def render_detail(self, top: int, height: int, width: int) -> None:
        model = self.model
        count = model.selection.selected_count()
        title = f" {count} endpoints selected " if count else ""
        self.put(top, 0, title.rjust(width, "─")[:width])

        endpoint = model.selection.current
        if endpoint is None:
            self.put(top + 1, 1, "No items selected or search results are empty.")
        else:
            self.render_endpoint(endpoint, top + 1, height - 2)

        shortcuts = SEARCH_SHORTCUTS if model.search.active else SHORTCUTS
        self.put(top + height - 1, 0, f" {shortcuts} ".rjust(width, "─")[:width], curses.A_BOLD)

    def render_endpoint(self, endpoint: Endpoint, top: int, height: int) -> None:
        lines: List[Union[Method, Tuple[str, int]]] = [
            (endpoint.display_description(), curses.A_NORMAL),
            (endpoint.path, curses.A_BOLD),
        ]
        lines.extend(endpoint.methods)
        if endpoint.parameters:
            lines.append((f"Parameters: {', '.join(endpoint.parameters)}", curses.A_DIM))
        if endpoint.refs:
            lines.append((f"Component schemas: {', '.join(endpoint.refs)}", curses.A_DIM))

        for i, line in enumerate(lines[:height]):
            if isinstance(line, Method):
                self.put(top + i, 1, f"{line.verb.upper():<7}", self.method_attr(line.verb))
                self.put(top + i, 8, line.description)
            else:
                text, attr = line
                self.put(top + i, 1, text, attr)

    def render_logs(self, top: int, height: int, width: int) -> None:
        self.put(top, 0, " internal logs ".center(width, "─")[:width], curses.A_DIM)
        lines = list(self.log_buffer.lines)[-(height - 1):]
        for i, line in enumerate(lines):
            self.put(top + 1 + i, 1, line, curses.A_DIM)


def read_event(stdscr, table_top: int) -> Optional[InputEvent]:
    """Wait for one input event, or return None when the poll times out."""
    try:
        ch = stdscr.get_wch()
    except curses.error:
        return None

    if isinstance(ch, str):
        if ch in CHAR_KEYS:
            return InputEvent(EventKind.KEY, key=CHAR_KEYS[ch])
        if ch.isprintable():
            return InputEvent(EventKind.KEY, key=ch)
        return None

    if ch == curses.KEY_MOUSE:
        try:
            _, _, y, _, bstate = curses.getmouse()
        except curses.error:
            return None
        if bstate & curses.BUTTON4_PRESSED:
            return InputEvent(EventKind.SCROLL_UP)
        if bstate & getattr(curses, 'BUTTON5_PRESSED', 0):
            return InputEvent(EventKind.SCROLL_DOWN)
        if bstate & (curses.BUTTON1_PRESSED | curses.BUTTON1_CLICKED):
            return InputEvent(EventKind.CLICK, row=y - table_top)
        return None

    key = SPECIAL_KEYS.get(ch)
    if key is None:
        return None
    return InputEvent(EventKind.KEY, key=key)


def _loop(stdscr, model: AppModel, log_buffer: Optional[LogBuffer]) -> AppModel:
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    try:
        curses.set_escdelay(25)
    except AttributeError:
        pass
    curses.mousemask(curses.ALL_MOUSE_EVENTS)
    stdscr.keypad(True)
    stdscr.timeout(POLL_TIMEOUT_MS)

    screen = Screen(stdscr, model, log_buffer)
    while not model.done:
        screen.render()
        event = read_event(stdscr, screen.table_top)
        if event is None:
            continue
        action = handle_event(event, model.search.active)
        if action is not None:
            model.update(action)
    return model


def run_tui(model: AppModel, verbose: bool = False) -> AppModel:
    """
    Run the interactive loop until the user quits.

    Log records are held in memory while the terminal is in curses mode and
    shown in a panel when ``verbose`` is set.
    """
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    log_buffer = LogBuffer()
    root.handlers = [log_buffer]
    try:
        return curses.wrapper(_loop, model, log_buffer if verbose else None)
    finally:
        root.handlers = saved_handlers
