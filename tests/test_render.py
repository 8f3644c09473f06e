"""Tests for speedread.render: markup/text to wrapped plain text."""
from __future__ import annotations

import pytest

from speedread.errors import SectionDecodeError
from speedread.render import MARKUP_HTML, MARKUP_TEXT, render

XHTML = b"""<?xml version="1.0" encoding="utf-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
<head><title>Ignored title</title><style>p { color: red; }</style></head>
<body>
  <h1>Chapter One</h1>
  <p>It was a <em>bright</em> cold day in April,
     and the clocks were striking thirteen.</p>
  <p>First row<br/>second row</p>
  <script>var hidden = 1;</script>
</body>
</html>
"""


def test_html_paragraphs_and_blocks() -> None:
    text = render(XHTML, 200, MARKUP_HTML)
    assert text == (
        "Chapter One\n\n"
        "It was a bright cold day in April, and the clocks were striking thirteen.\n\n"
        "First row\nsecond row\n"
    )


def test_html_drops_head_script_and_style() -> None:
    text = render(XHTML, 80, MARKUP_HTML)
    assert "Ignored" not in text
    assert "hidden" not in text
    assert "color" not in text


def test_wrapping_keeps_tokens_identical_across_widths() -> None:
    words = render(XHTML, 200).split()
    for width in (1, 5, 13, 40):
        text = render(XHTML, width)
        assert text.split() == words
        for row in text.splitlines():
            # Only single tokens may exceed the width.
            assert len(row) <= width or " " not in row


def test_text_markup_joins_soft_wraps() -> None:
    raw = "one two\nthree\n\nfour".encode("utf-8")
    assert render(raw, 80, MARKUP_TEXT) == "one two three\n\nfour\n"
    assert render(raw, 7, MARKUP_TEXT) == "one two\nthree\n\nfour\n"


def test_empty_payload_renders_empty() -> None:
    assert render(b"", 80, MARKUP_TEXT) == ""
    assert render(b"<html><body>  </body></html>", 80) == ""


@pytest.mark.parametrize("raw", [b"\xff\xfe\xfa bad", b"PK\x03\x04\x00\x00binary"])
def test_undecodable_payload_raises(raw: bytes) -> None:
    with pytest.raises(SectionDecodeError):
        render(raw, 80)


def test_unknown_markup_rejected() -> None:
    with pytest.raises(ValueError):
        render(b"x", 80, "rtf")


def test_width_below_one_wraps_one_token_per_row() -> None:
    assert render(b"one two", 0, MARKUP_TEXT) == "one\ntwo\n"
