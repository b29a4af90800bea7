"""Build WordprocessingML paragraphs for inserted competency content.

Fragments are bare ``<w:p>`` sequences using the ``w:`` prefix declared on
the host ``<w:document>`` root, so they can be spliced anywhere a
paragraph is allowed (body, table cell). Text lines come from the
``*_lines`` helpers, which the plain-text export shares.
"""

from __future__ import annotations

import re

from ..models import DigitalCompetencyGoal, LessonPart

# ---------------------------------------------------------------------------
# Visual conventions: red = inserted NLS content, blue = AI content
# ---------------------------------------------------------------------------
NLS_COLOR = "DC2626"
AI_COLOR = "2563EB"
HEADER_INDENT_TWIPS = 360
ITEM_INDENT_TWIPS = 720

# ---------------------------------------------------------------------------
# Fixed texts
# ---------------------------------------------------------------------------
GOALS_HEADER = "Năng lực số:"
AI_HEADER = "Năng lực trí tuệ nhân tạo (AI):"

DEFAULT_GOAL_LINES = (
    "[1.1.TC1a] Tìm kiếm, đánh giá và lựa chọn thông tin, dữ liệu số phục vụ bài học",
    "[2.2.TC1a] Sử dụng công cụ số để chia sẻ, giao tiếp và hợp tác trong học tập",
)

AI_GOAL_LINES = (
    "[AI.1.1] Nhận biết và sử dụng các công cụ AI hỗ trợ học tập một cách có trách nhiệm",
    "[AI.2.1] Biết đánh giá và kiểm chứng thông tin do các công cụ AI cung cấp",
)

# Characters XML 1.0 forbids outright, even escaped, plus lone surrogates
# (JSON "\ud800" escapes) which cannot be encoded as UTF-8
_XML_ILLEGAL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

ACTIVITY_LABEL = "Hoạt động số: "
TOOLS_LABEL = "Công cụ số: "
AI_ACTIVITY_LINE = (
    "Tích hợp AI: Học sinh có thể sử dụng công cụ AI để hỗ trợ tìm kiếm thông tin, "
    "tạo ý tưởng hoặc kiểm tra kết quả."
)


def strip_illegal_chars(text):
    """Drop characters that cannot appear in XML 1.0 or in UTF-8 output."""
    return _XML_ILLEGAL_CHARS.sub("", text)


def escape_xml(text):
    """Escape XML reserved characters."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


# ---------------------------------------------------------------------------
# Text lines
# ---------------------------------------------------------------------------

def format_goal(goal: DigitalCompetencyGoal) -> str:
    description = " ".join(goal.description.split())
    if goal.framework_ref:
        return f"[{goal.framework_ref}] {description}".rstrip()
    return description


def goal_lines(goals: list[DigitalCompetencyGoal]) -> list[str]:
    """One line per goal, or the built-in defaults when there are none."""
    lines = [line for line in (format_goal(g) for g in goals) if line]
    return lines or list(DEFAULT_GOAL_LINES)


def ai_goal_lines() -> list[str]:
    return list(AI_GOAL_LINES)


def _activity_entries(activity: LessonPart, include_ai: bool) -> list[tuple[str, str]]:
    """(label, text) pairs behind the activity annotation lines."""
    if not activity.has_digital_content:
        return []

    entries = []
    digital_activity = " ".join(activity.digital_activity.split())
    if digital_activity:
        entries.append((ACTIVITY_LABEL, digital_activity))
    if activity.tools:
        entries.append((TOOLS_LABEL, ", ".join(activity.tools)))
    if include_ai:
        entries.append(("", AI_ACTIVITY_LINE))
    return entries


def activity_lines(activity: LessonPart, include_ai: bool) -> list[str]:
    """Up to three annotation lines; empty when the activity has no digital content."""
    return [label + text for label, text in _activity_entries(activity, include_ai)]


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------

def _run_xml(text, color, bold=False, italic=False):
    rpr = ""
    if bold:
        rpr += "<w:b/><w:bCs/>"
    if italic:
        rpr += "<w:i/><w:iCs/>"
    rpr += f'<w:color w:val="{color}"/>'
    return (
        f"<w:r><w:rPr>{rpr}</w:rPr>"
        f'<w:t xml:space="preserve">{escape_xml(strip_illegal_chars(text))}</w:t></w:r>'
    )


def _paragraph_xml(runs, indent):
    return (
        f'<w:p><w:pPr><w:ind w:left="{indent}"/></w:pPr>'
        f'{"".join(runs)}</w:p>'
    )


def _header_paragraph(text, color):
    return _paragraph_xml([_run_xml(text, color, bold=True)], HEADER_INDENT_TWIPS)


def _item_paragraph(text, color, italic=False):
    return _paragraph_xml([_run_xml(text, color, italic=italic)], ITEM_INDENT_TWIPS)


def build_goals_fragment(goals: list[DigitalCompetencyGoal], include_ai: bool) -> str:
    """Header plus one indented paragraph per goal, and the AI block if requested."""
    parts = [_header_paragraph(GOALS_HEADER, NLS_COLOR)]
    parts.extend(_item_paragraph(f"- {line}", NLS_COLOR) for line in goal_lines(goals))

    if include_ai:
        parts.append(_header_paragraph(AI_HEADER, AI_COLOR))
        parts.extend(
            _item_paragraph(f"- {line}", AI_COLOR, italic=True)
            for line in ai_goal_lines()
        )
    return "".join(parts)


def build_activity_fragment(activity: LessonPart, include_ai: bool) -> str:
    """Annotation paragraphs for one activity, or "" if there is nothing to add.

    The label of each line is bold; the AI suggestion is blue italic.
    """
    parts = []
    for label, text in _activity_entries(activity, include_ai):
        if not label:
            parts.append(_item_paragraph(text, AI_COLOR, italic=True))
            continue
        runs = [
            _run_xml(label, NLS_COLOR, bold=True),
            _run_xml(text, NLS_COLOR),
        ]
        parts.append(_paragraph_xml(runs, ITEM_INDENT_TWIPS))
    return "".join(parts)
