"""
Curses front end.

The loop is single-threaded: draw, then wait for one key with a timeout equal
to the time left until the next word is due. A timeout while running turns
into a NEXT_WORD message. Messages are applied by ``update``, which may
return a follow-up message; ``update`` never touches curses so it can be
exercised without a terminal.

Key Binding:
    Quit (saves)     : q
    Next/prev word   : RIGHT / LEFT
    Next/prev line   : DOWN / UP
    Next/prev section: PGDN / PGUP
    Faster / slower  : + / -
    Run / pause      : SPC
    Save position    : s
    ToC up / down    : w / x
    ToC parent/child : a / d
    ToC jump         : ENTER
"""

from __future__ import annotations

import curses
import enum
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from speedread.config import (
    COMMA_PAUSE,
    MAX_PACE_MS,
    MIN_PACE_MS,
    MIN_WIDTH,
    PACE_STEP_MS,
    SENTENCE_PAUSE,
    ReaderConfig,
)
from speedread.cursor import DocumentCursor
from speedread.segmentation import estimate_pause_multiplier, split_word

log = logging.getLogger(__name__)

TOC_WIDTH_PCT = 25
WORD_BOX_ROWS = 5
STATUS_ROWS = 1
LINES_ABOVE_CURSOR = 3


class Status(enum.Enum):
    RUNNING = "Running"
    PAUSED = "Paused"


class Message(enum.Enum):
    QUIT = "quit"
    PREV_WORD = "prev_word"
    NEXT_WORD = "next_word"
    PREV_LINE = "prev_line"
    NEXT_LINE = "next_line"
    PREV_SECTION = "prev_section"
    NEXT_SECTION = "next_section"
    INCREASE_SPEED = "increase_speed"
    DECREASE_SPEED = "decrease_speed"
    TOGGLE_STATUS = "toggle_status"
    SAVE = "save"
    TOC_UP = "toc_up"
    TOC_DOWN = "toc_down"
    TOC_LEFT = "toc_left"
    TOC_RIGHT = "toc_right"
    TOC_SELECT = "toc_select"


KEYMAP = {
    ord("q"): Message.QUIT,
    curses.KEY_RIGHT: Message.NEXT_WORD,
    curses.KEY_LEFT: Message.PREV_WORD,
    curses.KEY_UP: Message.PREV_LINE,
    curses.KEY_DOWN: Message.NEXT_LINE,
    curses.KEY_PPAGE: Message.PREV_SECTION,
    curses.KEY_NPAGE: Message.NEXT_SECTION,
    ord("+"): Message.INCREASE_SPEED,
    ord("-"): Message.DECREASE_SPEED,
    ord(" "): Message.TOGGLE_STATUS,
    ord("s"): Message.SAVE,
    ord("w"): Message.TOC_UP,
    ord("x"): Message.TOC_DOWN,
    ord("a"): Message.TOC_LEFT,
    ord("d"): Message.TOC_RIGHT,
    ord("\n"): Message.TOC_SELECT,
    curses.KEY_ENTER: Message.TOC_SELECT,
}


@dataclass
class Model:
    cursor: DocumentCursor
    config: ReaderConfig
    pace_ms: int = 0
    status: Status = Status.PAUSED
    should_quit: bool = False
    last_word_change: float = field(default_factory=time.monotonic)
    toc_selected: Optional[int] = None
    notice: str = ""

    def __post_init__(self) -> None:
        if not self.pace_ms:
            self.pace_ms = self.config.pace_ms
        self.sync_toc()

    def sync_toc(self) -> None:
        path = self.cursor.toc_index()
        self.toc_selected = path[-1] if path else (0 if len(self.cursor.toc) else None)

    def interval(self) -> float:
        """Seconds the current word stays on screen."""
        mult = 1.0
        if self.config.punctuation_pauses:
            mult = estimate_pause_multiplier(self.cursor.current_word(), COMMA_PAUSE, SENTENCE_PAUSE)
        return self.pace_ms * mult / 1000.0

    def save(self) -> bool:
        ok = self.cursor.doc_state().store(self.config.state_dir)
        self.notice = "Position saved" if ok else "Could not save position"
        return ok


def _after_section_change(model: Model, before: int) -> None:
    if model.cursor.section_index != before:
        model.sync_toc()
        section = model.cursor.current_section
        if section.error:
            model.notice = f"Section {section.index} unavailable"
        model.save()


def update(model: Model, msg: Message) -> Optional[Message]:
    before = model.cursor.section_index
    cursor = model.cursor

    if msg is Message.QUIT:
        model.should_quit = True
        model.save()
        return None

    if msg is Message.NEXT_WORD:
        model.last_word_change = time.monotonic()
        if not cursor.next_word():
            model.status = Status.PAUSED
            model.notice = "End of document"
    elif msg is Message.PREV_WORD:
        cursor.prev_word()
    elif msg is Message.NEXT_LINE:
        cursor.next_line()
    elif msg is Message.PREV_LINE:
        cursor.prev_line()
    elif msg is Message.NEXT_SECTION:
        if not cursor.next_section():
            model.notice = "Last section"
    elif msg is Message.PREV_SECTION:
        if not cursor.prev_section():
            model.notice = "First section"
    elif msg is Message.INCREASE_SPEED:
        model.pace_ms = max(MIN_PACE_MS, model.pace_ms - PACE_STEP_MS)
    elif msg is Message.DECREASE_SPEED:
        model.pace_ms = min(MAX_PACE_MS, model.pace_ms + PACE_STEP_MS)
    elif msg is Message.SAVE:
        model.save()
    elif msg is Message.TOGGLE_STATUS:
        if model.status is Status.RUNNING:
            model.status = Status.PAUSED
            return None
        model.status = Status.RUNNING
        model.notice = ""
        return Message.NEXT_WORD
    else:
        model.status = Status.PAUSED
        _update_toc(model, msg)

    _after_section_change(model, before)
    return None


def _update_toc(model: Model, msg: Message) -> None:
    toc = model.cursor.toc
    if model.toc_selected is None:
        return
    node = toc[model.toc_selected]
    if msg is Message.TOC_SELECT:
        model.cursor.goto_section(node.target)
    elif msg is Message.TOC_LEFT:
        if node.parent is not None:
            model.toc_selected = node.parent
    elif msg is Message.TOC_RIGHT:
        if node.children:
            model.toc_selected = node.children[0]
    elif msg is Message.TOC_UP:
        model.toc_selected = max(0, model.toc_selected - 1)
    elif msg is Message.TOC_DOWN:
        model.toc_selected = min(len(toc) - 1, model.toc_selected + 1)


# -------------------------------
# Event source
# -------------------------------

def next_message(stdscr, model: Model) -> Optional[Message]:
    if model.status is Status.RUNNING:
        remaining = model.interval() - (time.monotonic() - model.last_word_change)
        stdscr.timeout(max(0, int(remaining * 1000)))
    else:
        stdscr.timeout(-1)

    key = stdscr.getch()
    if key == -1:
        if model.status is Status.RUNNING and time.monotonic() - model.last_word_change >= model.interval():
            return Message.NEXT_WORD
        return None
    if key == curses.KEY_RESIZE:
        return None
    return KEYMAP.get(key)


# -------------------------------
# Drawing
# -------------------------------

def _put(win, y: int, x: int, text: str, attr: int = 0) -> None:
    h, w = win.getmaxyx()
    if y < 0 or y >= h or x >= w:
        return
    try:
        win.addnstr(y, x, text, max(0, w - x), attr)
    except curses.error:
        # Writing the bottom-right cell moves the cursor off screen.
        pass


def draw_word(win, word: str, pivot_attr: int) -> None:
    h, w = win.getmaxyx()
    win.erase()
    win.box()
    _put(win, 0, 2, " Current Word ")
    head, pivot, tail = split_word(word)
    center = w // 2
    row = h // 2
    _put(win, row - 1, center, "v")
    _put(win, row + 1, center, "^")
    if word:
        x = center - len(head)
        _put(win, row, max(1, x), head)
        _put(win, row, center, pivot, pivot_attr)
        _put(win, row, center + 1, tail)


def draw_toc(win, model: Model, highlight_attr: int) -> None:
    h, w = win.getmaxyx()
    win.erase()
    win.box()
    _put(win, 0, 2, " Table of Contents ")
    toc = model.cursor.toc
    if not len(toc):
        return
    current_path = set(model.cursor.toc_index())
    rows = h - 2
    top = 0
    if model.toc_selected is not None and model.toc_selected >= rows:
        top = model.toc_selected - rows + 1
    for y, i in enumerate(range(top, min(len(toc), top + rows))):
        node = toc[i]
        marker = "*" if i in current_path else " "
        attr = highlight_attr if i == model.toc_selected else 0
        _put(win, y + 1, 1, f"{marker}{'  ' * node.depth}{node.label}"[: w - 2], attr)


def content_rows(model: Model, width: int) -> List[tuple]:
    """Physical rows of the current section as ``(text, highlight_offset)``."""
    section = model.cursor.current_section_or_resize(max(MIN_WIDTH, width))
    current = section.current_line()
    rows = []
    line_no = 0
    for text in section.content.splitlines():
        offset = None
        if text.strip():
            if current is not None and line_no == current.index:
                offset = current.offset_of(section.word_index)
                if offset is None:
                    offset = -1
            line_no += 1
        rows.append((text, offset))
    return rows


def draw_content(win, model: Model, cursor_attr: int) -> None:
    h, w = win.getmaxyx()
    win.erase()
    win.box()
    _put(win, 0, 2, " Content ")
    section = model.cursor.current_section
    if section.error:
        _put(win, 1, 1, f"[section unavailable: {section.error}]")
        return

    rows = content_rows(model, w - 3)
    current_row = next((i for i, (_, off) in enumerate(rows) if off is not None), 0)
    top = max(0, current_row - LINES_ABOVE_CURSOR)
    for y, (text, offset) in enumerate(rows[top: top + h - 2]):
        if offset is None or offset < 0:
            _put(win, y + 1, 1, text)
            continue
        tokens = text.split()
        before = " ".join(tokens[:offset])
        x = 1
        if before:
            _put(win, y + 1, x, before + " ")
            x += len(before) + 1
        _put(win, y + 1, x, tokens[offset], cursor_attr)
        after = " ".join(tokens[offset + 1:])
        if after:
            _put(win, y + 1, x + len(tokens[offset]) + 1, after)


def draw_status(win, model: Model) -> None:
    win.erase()
    cursor = model.cursor
    wpm = 60000 // max(1, model.pace_ms)
    text = (
        f" Status: {model.status.value}  Speed: {wpm} wpm"
        f"  Position {cursor.section_index + 1}/{cursor.section_count}"
        f" ({cursor.current_section.progress():.0%})"
    )
    if model.notice:
        text += f"  | {model.notice}"
    _put(win, 0, 0, text, curses.A_REVERSE)


def draw(stdscr, model: Model, attrs: dict) -> None:
    h, w = stdscr.getmaxyx()
    stdscr.erase()
    stdscr.noutrefresh()
    if h < WORD_BOX_ROWS + STATUS_ROWS + 3 or w < 20:
        _put(stdscr, 0, 0, "Terminal too small")
        stdscr.refresh()
        return

    body_h = h - WORD_BOX_ROWS - STATUS_ROWS
    toc_w = w * TOC_WIDTH_PCT // 100
    windows = [
        stdscr.derwin(WORD_BOX_ROWS, w, 0, 0),
        stdscr.derwin(body_h, toc_w, WORD_BOX_ROWS, 0),
        stdscr.derwin(body_h, w - toc_w, WORD_BOX_ROWS, toc_w),
        stdscr.derwin(STATUS_ROWS, w, h - STATUS_ROWS, 0),
    ]
    word_win, toc_win, content_win, status_win = windows
    # Content first: it is what reflows the section to the current width.
    draw_content(content_win, model, attrs["cursor"])
    draw_word(word_win, model.cursor.current_word() or "", attrs["pivot"])
    draw_toc(toc_win, model, attrs["highlight"])
    draw_status(status_win, model)
    for win in windows:
        win.noutrefresh()
    curses.doupdate()


def _init_attrs() -> dict:
    attrs = {"pivot": curses.A_BOLD, "cursor": curses.A_REVERSE, "highlight": curses.A_REVERSE}
    if curses.has_colors():
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(1, curses.COLOR_RED, -1)
        curses.init_pair(2, curses.COLOR_BLACK, curses.COLOR_YELLOW)
        attrs["pivot"] = curses.color_pair(1) | curses.A_BOLD
        attrs["cursor"] = curses.color_pair(2)
        attrs["highlight"] = curses.color_pair(2)
    return attrs


def _loop(stdscr, model: Model) -> None:
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    stdscr.keypad(True)
    attrs = _init_attrs()
    while True:
        draw(stdscr, model, attrs)
        if model.should_quit:
            break
        msg = next_message(stdscr, model)
        while msg is not None:
            msg = update(model, msg)


def run(cursor: DocumentCursor, config: ReaderConfig) -> Model:
    model = Model(cursor=cursor, config=config)
    try:
        curses.wrapper(_loop, model)
    except KeyboardInterrupt:
        model.save()
    log.info("reader closed at %s", cursor.doc_state())
    return model
