"""Locate insertion points in word/document.xml by heuristic text matching.

Heading text in real lesson plans is split across runs and wrapped in
arbitrary formatting, so we look for a stable keyword inside character
data and then walk forward to the end of the enclosing paragraph. The
forward scan is bounded so a keyword never pairs with a ``</w:p>`` that
belongs to some unrelated block far away.

Matching happens on an NFC view of the markup: Vietnamese documents are
often saved with decomposed diacritics, while patterns and activity names
arrive composed. Offsets are mapped back to the original markup.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Sequence
from xml.sax.saxutils import escape

from ..config.settings import DEFAULT_GOAL_PATTERNS
from ..models import Anchor

logger = logging.getLogger(__name__)

PARAGRAPH_CLOSE = "</w:p>"
DEFAULT_LOOKAHEAD = 3000

# Half-open [start, end) ranges of the markup that must not be matched
Span = tuple[int, int]


def nfc_view(markup: str) -> tuple[str, list[int] | None]:
    """Return ``(normalized, index_map)`` for ``markup``.

    ``index_map[i]`` is the offset in ``markup`` of the character cluster
    that produced ``normalized[i]``, with one extra entry for the end.
    The map is None when ``markup`` is already NFC.
    """
    if unicodedata.is_normalized("NFC", markup):
        return markup, None

    pieces: list[str] = []
    index_map: list[int] = []
    start = 0
    for pos in range(1, len(markup) + 1):
        if pos < len(markup) and unicodedata.combining(markup[pos]):
            continue
        cluster = unicodedata.normalize("NFC", markup[start:pos])
        pieces.append(cluster)
        index_map.extend([start] * len(cluster))
        start = pos
    index_map.append(len(markup))
    return "".join(pieces), index_map


def _in_character_data(markup: str, pos: int) -> bool:
    """True if ``pos`` sits between tags rather than inside one."""
    return markup.rfind("<", 0, pos) <= markup.rfind(">", 0, pos)


def _in_spans(pos: int, skip: Sequence[Span]) -> bool:
    return any(start <= pos < end for start, end in skip)


def _first_text_match(
    markup: str,
    regex: re.Pattern,
    index_map: list[int] | None = None,
    skip: Sequence[Span] = (),
) -> re.Match | None:
    for match in regex.finditer(markup):
        if not _in_character_data(markup, match.start()):
            continue
        original = index_map[match.start()] if index_map else match.start()
        if _in_spans(original, skip):
            continue
        return match
    return None


def _close_after(markup: str, start: int, lookahead: int) -> int:
    """Offset just past the first ``</w:p>`` within the window, or -1."""
    window_end = min(len(markup), start + lookahead)
    idx = markup.find(PARAGRAPH_CLOSE, start, window_end)
    if idx == -1:
        return -1
    return idx + len(PARAGRAPH_CLOSE)


def _locate(
    view: tuple[str, list[int] | None],
    regex: re.Pattern,
    lookahead: int,
    skip: Sequence[Span] = (),
) -> Anchor:
    markup, index_map = view
    match = _first_text_match(markup, regex, index_map, skip)
    if match is None:
        return Anchor.not_found()

    offset = _close_after(markup, match.end(), lookahead)
    if offset == -1:
        logger.debug(
            "Pattern %r matched at %d but no %s within %d chars",
            regex.pattern, match.start(), PARAGRAPH_CLOSE, lookahead,
        )
        return Anchor.not_found()
    if index_map:
        offset = index_map[offset]
    return Anchor(offset=offset, found=True, pattern=regex.pattern)


def _compile(pattern: str) -> re.Pattern:
    return re.compile(unicodedata.normalize("NFC", pattern), re.IGNORECASE)


def locate_goals_anchor(
    body_markup: str,
    patterns: list[str] | None = None,
    lookahead: int | None = None,
) -> Anchor:
    """Find where the competency goals section should go.

    Patterns are tried in order; for each, only its first match inside
    character data counts. When that match has no paragraph close within
    ``lookahead`` characters the pattern is treated as unmatched and the
    next pattern is tried, rather than reporting not-found straight away:
    a lower-ranked heading is a better home than the end of the body.

    Args:
        body_markup: Full text of word/document.xml.
        patterns: Ordered regex strings, matched case-insensitively.
            Defaults to DEFAULT_GOAL_PATTERNS.
        lookahead: Max characters scanned past the match for ``</w:p>``.

    Returns:
        Anchor just after the enclosing paragraph, or a not-found Anchor.
    """
    if patterns is None:
        patterns = DEFAULT_GOAL_PATTERNS
    if lookahead is None:
        lookahead = DEFAULT_LOOKAHEAD

    view = nfc_view(body_markup)
    for pattern in patterns:
        anchor = _locate(view, _compile(pattern), lookahead)
        if anchor.found:
            logger.debug("Goals anchor via %r at %d", pattern, anchor.offset)
            return anchor
    return Anchor.not_found()


def activity_name_pattern(activity_name: str) -> str | None:
    """Regex matching the activity name as it appears in character data.

    ``&``/``<``/``>`` are entity-escaped in the XML, and runs of whitespace
    in the name match any whitespace run. Returns None for blank names.
    """
    words = unicodedata.normalize("NFC", activity_name).split()
    if not words:
        return None
    return r"\s+".join(re.escape(escape(word)) for word in words)


def locate_activity_anchor(
    body_markup: str,
    activity_name: str,
    lookahead: int | None = None,
    skip: Sequence[Span] = (),
) -> Anchor:
    """Find the end of the paragraph holding an activity's name.

    Same bounded ``</w:p>`` lookahead as :func:`locate_goals_anchor`,
    anchored on the literal activity name (case-insensitive). Matches
    starting inside one of the ``skip`` spans (content inserted earlier
    in the same export) are ignored.
    """
    if lookahead is None:
        lookahead = DEFAULT_LOOKAHEAD

    pattern = activity_name_pattern(activity_name)
    if pattern is None:
        return Anchor.not_found()
    return _locate(nfc_view(body_markup), _compile(pattern), lookahead, skip)
