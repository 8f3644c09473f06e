"""
Section rendering: raw section payload -> wrapped plain text.

Wrapping never splits or joins tokens, so the whitespace-delimited words of
a section are the same at every width. The line indexer relies on this to
keep word positions stable across reflows.
"""

from __future__ import annotations

import logging
import re
import textwrap
from typing import List

from bs4 import BeautifulSoup

from speedread.config import MIN_WIDTH
from speedread.errors import SectionDecodeError

log = logging.getLogger(__name__)

MARKUP_HTML = "html"
MARKUP_TEXT = "text"

BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "li", "ol", "p", "pre", "section", "table", "td", "th",
    "tr", "ul",
]

# Private separators used while flattening markup; both are whitespace to
# str.split(), so they are resolved before whitespace is collapsed.
_ROW_BREAK = "\u2028"
_PARAGRAPH_BREAK = "\u2029"


def decode_payload(raw: bytes) -> str:
    if b"\x00" in raw:
        raise SectionDecodeError(None, "binary payload")
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise SectionDecodeError(None, f"not UTF-8 text ({e.reason} at byte {e.start})") from e


def wrap_rows(rows: List[str], width: int) -> List[str]:
    out: List[str] = []
    for row in rows:
        row = " ".join(row.split())
        if not row:
            continue
        out.extend(
            textwrap.wrap(
                row,
                width=max(MIN_WIDTH, width),
                break_long_words=False,
                break_on_hyphens=False,
            )
        )
    return out


def html_to_paragraphs(markup: str) -> List[List[str]]:
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(["script", "style", "head", "nav"]):
        tag.decompose()
    for br in soup.find_all("br"):
        br.replace_with(_ROW_BREAK)
    for tag in soup.find_all(BLOCK_TAGS):
        tag.insert_before(_PARAGRAPH_BREAK)
        tag.insert_after(_PARAGRAPH_BREAK)

    text = soup.get_text()
    return [p.split(_ROW_BREAK) for p in text.split(_PARAGRAPH_BREAK)]


def text_to_paragraphs(text: str) -> List[List[str]]:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    # Hard line breaks inside a paragraph are soft wraps of the source.
    return [[" ".join(block.split("\n"))] for block in re.split(r"\n[ \t]*\n", text)]


def render(raw: bytes, width: int, markup: str = MARKUP_HTML) -> str:
    """Render ``raw`` to plain text wrapped at ``width`` columns.

    Paragraphs are separated by one blank line. Raises ``SectionDecodeError``
    when the payload is not text.
    """
    source = decode_payload(raw)
    if markup == MARKUP_HTML:
        paragraphs = html_to_paragraphs(source)
    elif markup == MARKUP_TEXT:
        paragraphs = text_to_paragraphs(source)
    else:
        raise ValueError(f"Unsupported markup: {markup}")

    blocks = []
    for rows in paragraphs:
        wrapped = wrap_rows(rows, width)
        if wrapped:
            blocks.append("\n".join(wrapped))
    log.debug("rendered %d paragraphs at width %d", len(blocks), width)
    return "\n\n".join(blocks) + "\n" if blocks else ""
