"""Tests for speedread.section: the per-section (line, word) cursor."""
from __future__ import annotations

import pytest

from speedread.render import MARKUP_TEXT, render
from speedread.section import SectionCursor
from speedread.segmentation import SegmentationPolicy

PANGRAMS = (
    b"The quick brown fox jumps over the lazy dog.\n\n"
    b"Pack my box with five dozen liquor jugs.\n\n"
    b"Sphinx of black quartz, judge my vow."
)


def _cursor(raw: bytes = PANGRAMS, width: int = 80, **kwargs) -> SectionCursor:
    return SectionCursor(3, raw, width, markup=MARKUP_TEXT, **kwargs)


def test_initial_position() -> None:
    cur = _cursor()
    assert cur.line_index == 0
    assert cur.word_index == 0
    assert cur.current_word() == "The"
    assert cur.current_line().text == "The quick brown fox jumps over the lazy dog."
    assert cur.word_count == 24
    assert cur.line_count == 3


def test_next_word_walks_whole_section_then_signals_boundary() -> None:
    cur = _cursor()
    seen = [cur.current_word()]
    while cur.next_word():
        seen.append(cur.current_word())
    assert seen == PANGRAMS.decode().split()
    # At the boundary the position stays on the last word.
    assert cur.current_word() == "vow."
    assert cur.line_index == 2
    assert cur.next_word() is False
    assert cur.word_index == 23


def test_prev_word_at_start_signals_boundary() -> None:
    cur = _cursor()
    assert cur.prev_word() is False
    assert (cur.line_index, cur.word_index) == (0, 0)


def test_next_then_prev_word_round_trips() -> None:
    cur = _cursor(width=12)
    for _ in range(cur.word_count - 1):
        before = (cur.line_index, cur.word_index)
        assert cur.next_word()
        after = (cur.line_index, cur.word_index)
        assert cur.prev_word()
        assert (cur.line_index, cur.word_index) == before
        assert cur.next_word()
        assert (cur.line_index, cur.word_index) == after


def test_line_steps_snap_to_first_and_last_word() -> None:
    cur = _cursor()
    assert cur.next_line()
    assert (cur.line_index, cur.word_index) == (1, 9)
    assert cur.current_word() == "Pack"
    assert cur.next_line()
    assert cur.next_line() is False
    assert cur.line_index == 2
    assert cur.prev_line()
    assert (cur.line_index, cur.word_index) == (1, 16)
    assert cur.current_word() == "jugs."
    assert cur.prev_line()
    assert cur.prev_line() is False
    assert cur.line_index == 0


def test_reflow_preserves_word_under_cursor() -> None:
    cur = _cursor(width=80)
    for _ in range(13):
        cur.next_word()
    word = cur.current_word()
    assert word == "five"
    for width in (1, 7, 20, 33, 120):
        cur.reflow(width)
        assert cur.width == width
        assert cur.current_word() == word
        assert cur.word_index in cur.current_line()


def test_reflow_moves_line_pointer() -> None:
    cur = _cursor(width=80)
    cur.seek_word(21)
    assert cur.line_index == 2
    cur.reflow(10)
    assert cur.line_index > 2
    assert cur.current_word() == "judge"


def test_reflow_same_width_is_noop() -> None:
    calls = []

    def counting_render(raw, width, markup):
        calls.append(width)
        return render(raw, width, markup)

    cur = _cursor(renderer=counting_render)
    cur.reflow(80)
    assert calls == [80]
    cur.reflow(40)
    assert calls == [80, 40]


def test_seek_word_outside_section_falls_back_to_start() -> None:
    cur = _cursor()
    cur.next_line()
    assert cur.seek_word(999) is False
    assert (cur.line_index, cur.word_index) == (0, 0)


@pytest.mark.parametrize("raw", [b"", b"\n\n   \n\t\n"])
def test_blank_section(raw: bytes) -> None:
    cur = _cursor(raw)
    assert cur.lines == []
    assert cur.current_word() is None
    assert cur.current_line() is None
    assert cur.next_word() is False
    assert cur.prev_word() is False
    assert cur.next_line() is False
    assert cur.prev_line() is False
    cur.reflow(10)
    assert cur.current_word() is None


def test_alphabetic_policy_skips_degenerate_line() -> None:
    raw = b"First line\n\n* * *\n\nSecond line"
    cur = _cursor(raw, policy=SegmentationPolicy.ALPHABETIC)
    words = [cur.current_word()]
    lines = [cur.line_index]
    while cur.next_word():
        words.append(cur.current_word())
        lines.append(cur.line_index)
    assert words == ["First", "line", None, "Second", "line"]
    assert lines == [0, 0, 1, 2, 2]
    # Walking back across the word-less line returns to the same words.
    assert cur.prev_word() and cur.current_word() == "Second"
    assert cur.prev_word() and cur.current_word() is None
    assert cur.prev_word() and cur.current_word() == "line"


def test_unavailable_section() -> None:
    cur = SectionCursor.unavailable(4, "not UTF-8 text", 80)
    assert cur.index == 4
    assert cur.error == "not UTF-8 text"
    assert cur.current_word() is None
    assert cur.next_word() is False


def test_progress() -> None:
    cur = _cursor()
    assert cur.progress() == 0.0
    cur.seek_end()
    assert cur.progress() == pytest.approx(23 / 24)
    assert _cursor(b"").progress() == 1.0
