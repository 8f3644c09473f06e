"""Tests for speedread.segmentation: line indexing and RSVP helpers."""
from __future__ import annotations

import pytest

from speedread.segmentation import (
    SegmentationPolicy,
    compute_orp_index,
    estimate_pause_multiplier,
    index_lines,
    line_containing,
    split_word,
)

DEDICATION = (
    "[Dedication][1]\n\nFor ELLEN,\nwho has been there for everything,\n"
    "including the books.\n\n—SJD\n\nFor my sister LINDA LEVITT JINES,\n"
    "whose creative genius amazed,\namused, and inspired me.\n\n—SDL\n\n"
    "[1]: part0002.html#ded\n"
)


# ───────────────────── index_lines ──────────────────────────────────


def test_blank_lines_are_not_indexed() -> None:
    lines = index_lines(DEDICATION)
    assert [line.index for line in lines] == list(range(len(lines)))
    assert all(line.text.strip() for line in lines)
    assert lines[0].text == "[Dedication][1]"
    assert lines[1].text == "For ELLEN,"


def test_positions_are_contiguous_and_increasing() -> None:
    lines = index_lines(DEDICATION)
    flat = [p for line in lines for p in line.word_positions]
    assert flat == list(range(len(DEDICATION.split())))
    for line in lines:
        assert list(line.word_positions) == sorted(set(line.word_positions))
    for a, b in zip(lines, lines[1:]):
        assert a.last_word_index < b.first_word_index


def test_words_align_with_positions() -> None:
    lines = index_lines("one two\nthree")
    assert lines[0].word(0) == "one"
    assert lines[0].word(1) == "two"
    assert lines[1].word(2) == "three"
    assert lines[0].word(2) is None


@pytest.mark.parametrize("text", ["", "\n\n", "   \n\t\n  "])
def test_blank_section_has_no_lines(text: str) -> None:
    assert index_lines(text) == []


def test_alphabetic_policy_skips_punctuation_tokens() -> None:
    lines = index_lines("Hello — world 42\n* * *\nagain", SegmentationPolicy.ALPHABETIC)
    assert lines[0].words == ("Hello", "world")
    assert lines[0].offsets == (0, 2)
    assert lines[0].word_positions == (0, 1)
    # A line with no indexable token keeps its slot but carries the last position.
    assert lines[1].word_positions == ()
    assert lines[1].first_word_index == lines[1].last_word_index == 1
    assert lines[2].word_positions == (2,)


def test_alphabetic_policy_leading_degenerate_line() -> None:
    lines = index_lines("...\nword", SegmentationPolicy.ALPHABETIC)
    assert lines[0].first_word_index == 0
    assert lines[0].word(0) is None
    assert lines[1].word(0) == "word"


def test_line_after_and_before() -> None:
    line = index_lines("a b c")[0]
    assert line.after(0) == 1
    assert line.after(2) is None
    assert line.before(1) == 0
    assert line.before(0) is None


def test_line_containing() -> None:
    lines = index_lines("a b\nc d\ne")
    assert line_containing(lines, 3).index == 1
    assert line_containing(lines, 4).index == 2
    assert line_containing(lines, 5) is None


# ───────────────────── RSVP helpers ─────────────────────────────────


@pytest.mark.parametrize(
    "word,expected",
    [("", 0), ("a", 0), ("read", 1), ("reading", 2), ("“quoted”", 3), ("extraordinarily", 4)],
)
def test_compute_orp_index(word: str, expected: int) -> None:
    assert compute_orp_index(word) == expected


def test_split_word_around_pivot() -> None:
    assert split_word("reading") == ("re", "a", "ding")
    assert split_word("") == ("", "", "")


def test_pause_multiplier() -> None:
    assert estimate_pause_multiplier("end.", 1.5, 2.0) == 2.0
    assert estimate_pause_multiplier("pause,", 1.5, 2.0) == 1.5
    assert estimate_pause_multiplier("word", 1.5, 2.0) == 1.0
    assert estimate_pause_multiplier(None, 1.5, 2.0) == 1.0
