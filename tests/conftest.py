from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from speedread.documents import Document, TocEntry
from speedread.render import MARKUP_TEXT


class FakeDocument(Document):
    """In-memory document whose sections are plain text payloads."""

    markup = MARKUP_TEXT

    def __init__(
        self,
        sections: List[bytes],
        toc: Optional[List[TocEntry]] = None,
        identifier: str = "fake-doc",
    ) -> None:
        super().__init__(Path("fake.txt"))
        self.sections = sections
        self.toc = toc or []
        self.identifier = identifier
        self.fetches: Dict[int, int] = {}

    def section_count(self) -> int:
        return len(self.sections)

    def get_section_raw(self, index: int) -> bytes:
        if not self.has_section(index):
            raise IndexError(index)
        self.fetches[index] = self.fetches.get(index, 0) + 1
        return self.sections[index]

    def unique_identifier(self) -> str:
        return self.identifier

    def table_of_contents(self) -> List[TocEntry]:
        return self.toc


@pytest.fixture()
def three_sections() -> FakeDocument:
    return FakeDocument(
        [
            b"Alpha beta gamma.\n\nDelta epsilon.",
            b"Zeta eta theta iota kappa lambda mu nu xi omicron.",
            b"Pi rho sigma tau.",
        ],
        toc=[
            TocEntry("One", 0),
            TocEntry("Two", 1, [TocEntry("Two.a", 1), TocEntry("Two.b", 2)]),
        ],
    )
