from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from speedread.config import DEFAULT_WIDTH
from speedread.documents import Document, TocEntry
from speedread.errors import SectionDecodeError
from speedread.render import render
from speedread.section import Renderer, SectionCursor
from speedread.segmentation import Line, SegmentationPolicy
from speedread.state import DocState

log = logging.getLogger(__name__)


@dataclass
class TocNode:
    target: int
    label: str
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)
    depth: int = 0


class TocTable:
    """Table of contents flattened into a node list in reading order.

    Nodes refer to each other by index into ``nodes``.
    """

    def __init__(self, nodes: Optional[List[TocNode]] = None) -> None:
        self.nodes: List[TocNode] = nodes or []
        self.roots: List[int] = [i for i, n in enumerate(self.nodes) if n.parent is None]

    @classmethod
    def from_entries(cls, entries: List[TocEntry]) -> "TocTable":
        nodes: List[TocNode] = []
        # (entry, parent index, depth), children pushed in reverse for pre-order.
        stack = [(e, None, 0) for e in reversed(entries)]
        while stack:
            entry, parent, depth = stack.pop()
            nodes.append(TocNode(target=entry.target, label=entry.label, parent=parent, depth=depth))
            me = len(nodes) - 1
            if parent is not None:
                nodes[parent].children.append(me)
            stack.extend((child, me, depth + 1) for child in reversed(entry.children))
        return cls(nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> TocNode:
        return self.nodes[index]

    def path_for(self, section_index: int) -> List[int]:
        """Indices of the nodes covering ``section_index``, root first.

        A node covers sections from its own target up to (excluding) the
        target of its next sibling; the last sibling's range is open.
        """
        path: List[int] = []
        level = self.roots
        while level:
            chosen = None
            for pos, node_index in enumerate(level):
                start = self.nodes[node_index].target
                end = self.nodes[level[pos + 1]].target if pos + 1 < len(level) else None
                if start <= section_index and (end is None or section_index < end):
                    chosen = node_index
                    break
            if chosen is None:
                break
            path.append(chosen)
            level = self.nodes[chosen].children
        return path

    def labels(self, path: List[int]) -> List[str]:
        return [self.nodes[i].label for i in path]


class DocumentCursor:
    """Owns a document and the one materialised section being read."""

    def __init__(
        self,
        document: Document,
        state: Optional[DocState] = None,
        width: int = DEFAULT_WIDTH,
        renderer: Renderer = render,
        policy: SegmentationPolicy = SegmentationPolicy.WHITESPACE,
    ) -> None:
        self.document = document
        self.identifier = state.identifier if state else document.unique_identifier()
        self.width = width
        self.policy = policy
        self._renderer = renderer
        self.toc = TocTable.from_entries(document.table_of_contents())

        section_index = state.section_index if state else 0
        word_index = state.word_index if state else 0
        if document.section_count() == 0:
            log.warning("%s has no sections", document.path)
            self.current_section = SectionCursor.unavailable(0, "document has no sections", width)
            return
        if not document.has_section(section_index):
            if state is not None:
                log.info("saved section %d out of range, starting at 0", section_index)
            # Word numbering belongs to the lost section.
            section_index, word_index = 0, 0
        self.current_section = self._load(section_index)
        if word_index:
            self.current_section.seek_word(word_index)

    def _load(self, index: int) -> SectionCursor:
        try:
            raw = self.document.get_section_raw(index)
            return SectionCursor(
                index,
                raw,
                self.width,
                markup=self.document.markup,
                renderer=self._renderer,
                policy=self.policy,
            )
        except SectionDecodeError as e:
            log.warning("section %d unavailable: %s", index, e.reason)
            return SectionCursor.unavailable(index, e.reason, self.width)

    # ----- queries -----

    @property
    def section_index(self) -> int:
        return self.current_section.index

    @property
    def section_count(self) -> int:
        return self.document.section_count()

    def current_section_or_resize(self, width: int) -> SectionCursor:
        if width != self.current_section.width:
            self.current_section.reflow(width)
            self.width = width
        return self.current_section

    def current_word(self) -> Optional[str]:
        return self.current_section.current_word()

    def current_line(self) -> Optional[Line]:
        return self.current_section.current_line()

    def toc_index(self) -> List[int]:
        return self.toc.path_for(self.section_index)

    def doc_state(self) -> DocState:
        return DocState(
            identifier=self.identifier,
            section_index=self.section_index,
            word_index=self.current_section.word_index,
        )

    # ----- section moves -----

    def goto_section(self, index: int) -> bool:
        if not self.document.has_section(index):
            return False
        self.current_section = self._load(index)
        return True

    def next_section(self) -> bool:
        return self.goto_section(self.section_index + 1)

    def prev_section(self) -> bool:
        if self.section_index == 0:
            return False
        return self.goto_section(self.section_index - 1)

    # ----- word / line moves crossing sections -----

    def next_word(self) -> bool:
        if self.current_section.next_word():
            return True
        return self.next_section()

    def prev_word(self) -> bool:
        if self.current_section.prev_word():
            return True
        if not self.prev_section():
            return False
        self.current_section.seek_end()
        return True

    def next_line(self) -> bool:
        if self.current_section.next_line():
            return True
        return self.next_section()

    def prev_line(self) -> bool:
        if self.current_section.prev_line():
            return True
        if not self.prev_section():
            return False
        self.current_section.seek_end()
        return True
