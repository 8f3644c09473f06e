"""
Document adapters.

A document is an ordered sequence of sections addressed by 0-based index,
each with a raw byte payload, plus a stable identifier and a table of
contents whose entries point at section indices.

- EPUB: one section per spine item (ebooklib); payload is XHTML.
- PDF: one section per page (pypdf); payload is the extracted page text.
- Plain text: one section per form-feed separated block.
"""

from __future__ import annotations

import hashlib
import logging
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import unquote

import ebooklib
from ebooklib import epub
from pypdf import PdfReader

from speedread.errors import DocumentOpenError, SectionDecodeError
from speedread.render import MARKUP_HTML, MARKUP_TEXT

log = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".epub", ".pdf", ".txt"}
TOC_LABEL_CHARS = 60


@dataclass
class TocEntry:
    label: str
    target: int
    children: List["TocEntry"] = field(default_factory=list)


def file_digest(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(1 << 16), b""):
            h.update(block)
    return f"sha256:{h.hexdigest()}"


class Document:
    """Interface shared by the adapters."""

    markup = MARKUP_TEXT

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.title = self.path.stem

    def section_count(self) -> int:
        raise NotImplementedError

    def get_section_raw(self, index: int) -> bytes:
        raise NotImplementedError

    def unique_identifier(self) -> str:
        return file_digest(self.path)

    def table_of_contents(self) -> List[TocEntry]:
        return []

    def has_section(self, index: int) -> bool:
        return 0 <= index < self.section_count()


class EpubDocument(Document):
    markup = MARKUP_HTML

    def __init__(self, path: Path) -> None:
        super().__init__(path)
        try:
            self.book = epub.read_epub(str(self.path))
        except Exception as e:
            raise DocumentOpenError(f"Invalid EPUB file {self.path}: {e}") from e

        self.spine = []
        for idref, _linear in self.book.spine:
            item = self.book.get_item_with_id(idref)
            if item is None or item.get_type() != ebooklib.ITEM_DOCUMENT:
                continue
            self.spine.append(item)
        self._spine_index: Dict[str, int] = {
            posixpath.normpath(item.get_name()): i for i, item in enumerate(self.spine)
        }

        titles = self.book.get_metadata("DC", "title")
        if titles and titles[0][0]:
            self.title = titles[0][0]

    def section_count(self) -> int:
        return len(self.spine)

    def get_section_raw(self, index: int) -> bytes:
        if not self.has_section(index):
            raise IndexError(index)
        return self.spine[index].get_content()

    def unique_identifier(self) -> str:
        identifiers = self.book.get_metadata("DC", "identifier")
        for value, _attrs in identifiers:
            if value and value.strip():
                return value.strip()
        return super().unique_identifier()

    def resolve_href(self, href: Optional[str]) -> Optional[int]:
        if not href:
            return None
        name = posixpath.normpath(unquote(href.split("#", 1)[0]))
        return self._spine_index.get(name)

    def table_of_contents(self) -> List[TocEntry]:
        return self._toc_entries(self.book.toc)

    def _toc_entries(self, nodes) -> List[TocEntry]:
        entries: List[TocEntry] = []
        for node in nodes:
            if isinstance(node, (tuple, list)):
                head, children = node
                kids = self._toc_entries(children)
            else:
                head, kids = node, []
            label = getattr(head, "title", "") or ""
            target = self.resolve_href(getattr(head, "href", None))
            if target is None and kids:
                target = kids[0].target
            if target is None:
                log.debug("dropping toc entry %r: href not in spine", label)
                continue
            entries.append(TocEntry(label=label, target=target, children=kids))
        return entries


class PdfDocument(Document):
    def __init__(self, path: Path) -> None:
        super().__init__(path)
        try:
            self.reader = PdfReader(str(self.path))
            self._pages = len(self.reader.pages)
        except Exception as e:
            raise DocumentOpenError(f"Invalid PDF file {self.path}: {e}") from e

        meta = self.reader.metadata
        if meta is not None and meta.title:
            self.title = str(meta.title)

    def section_count(self) -> int:
        return self._pages

    def get_section_raw(self, index: int) -> bytes:
        if not self.has_section(index):
            raise IndexError(index)
        try:
            text = self.reader.pages[index].extract_text() or ""
        except Exception as e:
            raise SectionDecodeError(index, f"text extraction failed: {e}") from e
        return text.encode("utf-8")

    def table_of_contents(self) -> List[TocEntry]:
        try:
            return self._outline_entries(self.reader.outline)
        except Exception as e:
            log.warning("ignoring unreadable PDF outline in %s: %s", self.path, e)
            return []

    def _outline_entries(self, outline) -> List[TocEntry]:
        # pypdf nests children as a list following their parent destination.
        entries: List[TocEntry] = []
        for node in outline:
            if isinstance(node, list):
                if entries:
                    entries[-1].children.extend(self._outline_entries(node))
                else:
                    entries.extend(self._outline_entries(node))
                continue
            page = self.reader.get_destination_page_number(node)
            if page is None:
                continue
            entries.append(TocEntry(label=str(node.title), target=page))
        return entries


class TextDocument(Document):
    def __init__(self, path: Path) -> None:
        super().__init__(path)
        try:
            data = self.path.read_bytes()
        except OSError as e:
            raise DocumentOpenError(f"Cannot read {self.path}: {e}") from e
        blocks = [b for b in data.split(b"\f") if b.strip()]
        self.sections = blocks or [b""]

    def section_count(self) -> int:
        return len(self.sections)

    def get_section_raw(self, index: int) -> bytes:
        if not self.has_section(index):
            raise IndexError(index)
        return self.sections[index]

    def table_of_contents(self) -> List[TocEntry]:
        if len(self.sections) < 2:
            return []
        entries = []
        for i, block in enumerate(self.sections):
            first = next((ln for ln in block.decode("utf-8", errors="replace").splitlines() if ln.strip()), "")
            label = " ".join(first.split())[:TOC_LABEL_CHARS] or f"Section {i + 1}"
            entries.append(TocEntry(label=label, target=i))
        return entries


def open_document(path) -> Document:
    path = Path(path)
    if not path.is_file():
        raise DocumentOpenError(f"No such file: {path}")
    ext = path.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise DocumentOpenError(f"Unsupported file type: {ext} (expected .epub, .pdf or .txt)")
    if ext == ".epub":
        doc: Document = EpubDocument(path)
    elif ext == ".pdf":
        doc = PdfDocument(path)
    else:
        doc = TextDocument(path)
    if doc.section_count() == 0:
        raise DocumentOpenError(f"{path} has no readable sections")
    log.info("opened %s: %d sections", path, doc.section_count())
    return doc
