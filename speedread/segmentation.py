"""
Line indexing and RSVP text helpers.

A section's rendered text is turned into an ordered list of ``Line`` objects,
each carrying the section-local word positions it contains. Blank rows are
not indexed at all; they only exist as spacing in the rendered text.

Two segmentation policies are supported:

- ``whitespace`` (default): every whitespace-delimited token is a word.
- ``alphabetic``: only tokens with at least one alphabetic character are
  words; punctuation-only tokens are skipped by navigation.
"""

from __future__ import annotations

import enum
import re
from bisect import bisect_left
from dataclasses import dataclass
from typing import List, Optional, Tuple


class SegmentationPolicy(str, enum.Enum):
    WHITESPACE = "whitespace"
    ALPHABETIC = "alphabetic"


@dataclass(frozen=True)
class Line:
    index: int
    word_positions: Tuple[int, ...]
    words: Tuple[str, ...]
    # Offset of each indexed word among the raw tokens of ``text``.
    offsets: Tuple[int, ...]
    text: str
    # Position reported by a line whose tokens were all filtered out.
    anchor: int = 0

    @property
    def first_word_index(self) -> int:
        return self.word_positions[0] if self.word_positions else self.anchor

    @property
    def last_word_index(self) -> int:
        return self.word_positions[-1] if self.word_positions else self.anchor

    def __contains__(self, position: object) -> bool:
        return self._slot(position) is not None

    def _slot(self, position) -> Optional[int]:
        i = bisect_left(self.word_positions, position)
        if i < len(self.word_positions) and self.word_positions[i] == position:
            return i
        return None

    def word(self, position: int) -> Optional[str]:
        slot = self._slot(position)
        return None if slot is None else self.words[slot]

    def offset_of(self, position: int) -> Optional[int]:
        slot = self._slot(position)
        return None if slot is None else self.offsets[slot]

    def after(self, position: int) -> Optional[int]:
        i = bisect_left(self.word_positions, position + 1)
        return self.word_positions[i] if i < len(self.word_positions) else None

    def before(self, position: int) -> Optional[int]:
        i = bisect_left(self.word_positions, position)
        return self.word_positions[i - 1] if i > 0 else None


def is_indexable(token: str, policy: SegmentationPolicy) -> bool:
    if policy is SegmentationPolicy.ALPHABETIC:
        return any(ch.isalpha() for ch in token)
    return bool(token)


def index_lines(text: str, policy: SegmentationPolicy = SegmentationPolicy.WHITESPACE) -> List[Line]:
    lines: List[Line] = []
    next_position = 0
    for raw in text.splitlines():
        if not raw.strip():
            continue
        kept = [(offset, token) for offset, token in enumerate(raw.split()) if is_indexable(token, policy)]
        lines.append(
            Line(
                index=len(lines),
                word_positions=tuple(range(next_position, next_position + len(kept))),
                words=tuple(token for _, token in kept),
                offsets=tuple(offset for offset, _ in kept),
                text=raw,
                anchor=max(0, next_position - 1),
            )
        )
        next_position += len(kept)
    return lines


def line_containing(lines: List[Line], position: int) -> Optional[Line]:
    for line in lines:
        if position in line:
            return line
    return None


# -------------------------------
# RSVP helpers
# -------------------------------

def compute_orp_index(word: str) -> int:
    """Index of the optimal recognition point, the letter the eye fixates on."""
    if not word:
        return 0
    core = re.sub(r"^[^\w]+|[^\w]+$", "", word, flags=re.UNICODE)
    core_len = len(core) if core else len(word)

    if core_len <= 1:
        idx = 0
    elif core_len <= 5:
        idx = 1
    elif core_len <= 9:
        idx = 2
    elif core_len <= 13:
        idx = 3
    else:
        idx = 4

    leading = 0
    for ch in word:
        if ch.isalnum():
            break
        leading += 1

    return max(0, min(leading + idx, max(0, len(word) - 1)))


def split_word(word: str) -> Tuple[str, str, str]:
    if not word:
        return "", "", ""
    pivot = compute_orp_index(word)
    return word[:pivot], word[pivot], word[pivot + 1:]


def estimate_pause_multiplier(word: Optional[str], comma_mult: float, sentence_mult: float) -> float:
    if not word:
        return 1.0

    mult = 1.0
    if re.search(r"[.!?](?:['”’)\]]+)?$", word):
        mult = max(mult, sentence_mult)
    elif re.search(r"[,;:](?:['”’)\]]+)?$", word):
        mult = max(mult, comma_mult)

    if "..." in word:
        mult = max(mult, comma_mult + 0.25)
    return mult
