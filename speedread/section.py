"""
Section cursor: one rendered section and the reader's position inside it.

Positions are section-local word indices as assigned by ``index_lines``.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from speedread.render import MARKUP_HTML, render
from speedread.segmentation import Line, SegmentationPolicy, index_lines, line_containing

log = logging.getLogger(__name__)

Renderer = Callable[[bytes, int, str], str]


class SectionCursor:
    """One materialised section plus a live (line, word) pointer.

    Word/line steps return ``False`` when they would leave the section; moving
    to the adjacent section is the document cursor's job.
    """

    def __init__(
        self,
        index: int,
        raw: bytes,
        width: int,
        markup: str = MARKUP_HTML,
        renderer: Renderer = render,
        policy: SegmentationPolicy = SegmentationPolicy.WHITESPACE,
    ) -> None:
        self.index = index
        self.raw = raw
        self.markup = markup
        self.width = width
        self.policy = policy
        self.error: Optional[str] = None
        self._renderer = renderer
        self.content = renderer(raw, width, markup)
        self.lines: List[Line] = index_lines(self.content, policy)
        self.line_index = 0
        self.word_index = self.lines[0].first_word_index if self.lines else 0

    @classmethod
    def unavailable(cls, index: int, reason: str, width: int) -> "SectionCursor":
        cursor = cls(index, b"", width, renderer=lambda raw, width, markup: "")
        cursor.error = reason
        return cursor

    def __repr__(self) -> str:
        return (
            f"SectionCursor(index={self.index}, line={self.line_index}, "
            f"word={self.word_index}, lines={len(self.lines)}, width={self.width})"
        )

    # ----- queries -----

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def word_count(self) -> int:
        return sum(len(line.word_positions) for line in self.lines)

    def line(self, index: int) -> Optional[Line]:
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return None

    def current_line(self) -> Optional[Line]:
        return self.line(self.line_index)

    def current_word(self) -> Optional[str]:
        line = self.current_line()
        if line is None:
            return None
        return line.word(self.word_index)

    def progress(self) -> float:
        total = self.word_count
        if total == 0:
            return 1.0
        return min(1.0, self.word_index / total)

    # ----- word / line steps -----

    def next_word(self) -> bool:
        line = self.current_line()
        if line is not None:
            nxt = line.after(self.word_index)
            if nxt is not None:
                self.word_index = nxt
                return True
        return self.next_line()

    def prev_word(self) -> bool:
        line = self.current_line()
        if line is not None:
            prev = line.before(self.word_index)
            if prev is not None:
                self.word_index = prev
                return True
        return self.prev_line()

    def next_line(self) -> bool:
        if self.line_index + 1 >= len(self.lines):
            return False
        self.line_index += 1
        self.word_index = self.lines[self.line_index].first_word_index
        return True

    def prev_line(self) -> bool:
        if self.line_index == 0 or not self.lines:
            return False
        self.line_index -= 1
        self.word_index = self.lines[self.line_index].last_word_index
        return True

    def seek_word(self, word_index: int) -> bool:
        """Move onto the line holding ``word_index``.

        Falls back to the first word of line 0 and returns ``False`` if no line
        holds it.
        """
        line = line_containing(self.lines, word_index)
        if line is None:
            self.line_index = 0
            self.word_index = self.lines[0].first_word_index if self.lines else 0
            return False
        self.line_index = line.index
        self.word_index = word_index
        return True

    def seek_end(self) -> None:
        if not self.lines:
            return
        self.line_index = len(self.lines) - 1
        self.word_index = self.lines[-1].last_word_index

    # ----- reflow -----

    def reflow(self, new_width: int) -> None:
        if new_width == self.width:
            return
        word_index = self.word_index
        self.content = self._renderer(self.raw, new_width, self.markup)
        self.lines = index_lines(self.content, self.policy)
        self.width = new_width
        if not self.seek_word(word_index):
            log.debug("section %d: word %d lost on reflow to width %d", self.index, word_index, new_width)
