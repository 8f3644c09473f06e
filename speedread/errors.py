from __future__ import annotations

from typing import Optional


class SpeedreadError(Exception):
    """Base class for errors raised by speedread."""


class DocumentOpenError(SpeedreadError):
    """The document container could not be opened or is not supported."""


class SectionDecodeError(SpeedreadError):
    """A section payload is not decodable text."""

    def __init__(self, index: Optional[int], reason: str) -> None:
        self.index = index
        self.reason = reason
        where = "section" if index is None else f"section {index}"
        super().__init__(f"{where} unavailable: {reason}")
