"""String-level insertion of fragments into word/document.xml.

Works on the raw markup instead of an ElementTree round-trip, which would
rewrite namespace prefixes and break strict OOXML readers.
"""

from __future__ import annotations

import re

from ..errors import StructureError

BODY_CLOSE = "</w:body>"

_SECT_PR_TAG = re.compile(r"<w:sectPr\b[^>]*?(/?)>|</w:sectPr>")


def splice_fragment(body_markup: str, offset: int, fragment: str) -> str:
    """Return ``body[:offset] + fragment + body[offset:]``."""
    if not 0 <= offset <= len(body_markup):
        raise ValueError(f"Offset {offset} outside 0..{len(body_markup)}")
    return body_markup[:offset] + fragment + body_markup[offset:]


def _trailing_sect_pr_start(body_markup: str, close: int) -> int:
    """Start of a ``<w:sectPr>`` element ending right before ``close``, or -1.

    Walks the sectPr tags backwards so a sectPr nested in
    ``<w:sectPrChange>`` is matched to its own opening tag.
    """
    end = len(body_markup[:close].rstrip())
    tags = list(_SECT_PR_TAG.finditer(body_markup, 0, end))
    if not tags or tags[-1].end() != end:
        return -1

    last = tags[-1]
    if last.group(0).startswith("<w:sectPr"):
        # Self-closing <w:sectPr/>; an unclosed open tag here is malformed
        return last.start() if last.group(1) else -1

    depth = 0
    for tag in reversed(tags):
        if tag.group(0) == "</w:sectPr>":
            depth += 1
        elif not tag.group(1):
            depth -= 1
            if depth == 0:
                return tag.start()
    return -1


def body_close_offset(body_markup: str) -> int:
    """Offset at which content appended to the end of the body belongs.

    That is just before ``</w:body>``, or before the trailing body-level
    ``<w:sectPr>`` (which the schema requires to stay the last child).

    Raises:
        StructureError: If there is not exactly one ``</w:body>``.
    """
    count = body_markup.count(BODY_CLOSE)
    if count != 1:
        raise StructureError(f"Expected exactly one {BODY_CLOSE}, found {count}")

    close = body_markup.find(BODY_CLOSE)
    sect_pr = _trailing_sect_pr_start(body_markup, close)
    return sect_pr if sect_pr != -1 else close


def append_before_body_close(body_markup: str, fragment: str) -> str:
    """Insert ``fragment`` as the last content of the document body."""
    return splice_fragment(body_markup, body_close_offset(body_markup), fragment)
