"""Plain-text rendering of the competency content.

Used as the fallback download when the original document cannot be
modified, and as the clipboard payload. Built from the same line helpers
as the DOCX fragments so both outputs list identical content.
"""

from __future__ import annotations

from ..docx.fragments import activity_lines, ai_goal_lines, goal_lines, strip_illegal_chars
from ..models import LessonPlanData

DOCUMENT_TITLE = "KẾ HOẠCH BÀI DẠY TÍCH HỢP NĂNG LỰC SỐ"
UNKNOWN = "Chưa xác định"

GOALS_SECTION = "MỤC TIÊU NĂNG LỰC SỐ"
AI_SECTION = "NĂNG LỰC TRÍ TUỆ NHÂN TẠO"
ACTIVITIES_SECTION = "CÁC HOẠT ĐỘNG HỌC TẬP"
TOOLS_SECTION = "CÔNG CỤ SỐ KHUYẾN NGHỊ"

_ROMAN = ("I", "II", "III", "IV", "V", "VI")


def _info_lines(data: LessonPlanData) -> list[str]:
    lines = [
        DOCUMENT_TITLE,
        f"Môn học: {data.subject.strip() or UNKNOWN}",
        f"Khối lớp: {data.grade.strip() or UNKNOWN}",
        f"Bài học: {data.title.strip() or UNKNOWN}",
    ]
    if data.summary.strip():
        lines.append("")
        lines.append(data.summary.strip())
    return lines


def render_reference_text(data: LessonPlanData, include_ai: bool) -> str:
    """Render the lesson's competency content under numbered section headers."""
    sections: list[tuple[str, list[str]]] = []

    sections.append((GOALS_SECTION, [f"- {line}" for line in goal_lines(data.digital_goals)]))

    if include_ai:
        sections.append((AI_SECTION, [f"- {line}" for line in ai_goal_lines()]))

    activity_body = []
    number = 0
    for activity in data.activities:
        lines = activity_lines(activity, include_ai)
        if not lines:
            continue
        number += 1
        activity_body.append(f"{number}. {activity.name.strip() or activity.id}")
        activity_body.extend(f"   - {line}" for line in lines)
    if activity_body:
        sections.append((ACTIVITIES_SECTION, activity_body))

    tools = [t.strip() for t in data.recommended_tools if t and t.strip()]
    if tools:
        sections.append((TOOLS_SECTION, [f"{i}. {tool}" for i, tool in enumerate(tools, 1)]))

    out = _info_lines(data)
    for numeral, (header, body) in zip(_ROMAN, sections):
        out.append("")
        out.append(f"{numeral}. {header}")
        out.extend(body)
    return strip_illegal_chars("\n".join(out) + "\n")
