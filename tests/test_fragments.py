import pytest

from conftest import W_NS, wrap_fragment
from lesson_nls.docx.fragments import (
    AI_ACTIVITY_LINE,
    AI_COLOR,
    AI_GOAL_LINES,
    AI_HEADER,
    DEFAULT_GOAL_LINES,
    GOALS_HEADER,
    NLS_COLOR,
    TOOLS_LABEL,
    activity_lines,
    build_activity_fragment,
    build_goals_fragment,
    escape_xml,
    goal_lines,
)
from lesson_nls.models import DigitalCompetencyGoal, LessonPart

HOSTILE = "a < b && c > d \"quoted\" 'single' </w:t></w:r></w:p>"


def _texts(fragment: str) -> list[str]:
    root = wrap_fragment(fragment)
    return [
        "".join(t.text or "" for t in p.iter(f"{{{W_NS}}}t"))
        for p in root.iter(f"{{{W_NS}}}p")
    ]


def test_escape_xml_escapes_all_reserved_characters() -> None:
    assert escape_xml("&<>\"'") == "&amp;&lt;&gt;&quot;&apos;"


def test_goals_fragment_header_and_one_line_per_goal() -> None:
    goals = [
        DigitalCompetencyGoal(id="1", description="Tra cứu tài liệu", framework_ref="1.3.TC1a"),
        DigitalCompetencyGoal(id="2", description="Thuyết trình trực tuyến"),
    ]
    texts = _texts(build_goals_fragment(goals, include_ai=False))
    assert texts == [
        GOALS_HEADER,
        "- [1.3.TC1a] Tra cứu tài liệu",
        "- Thuyết trình trực tuyến",
    ]


def test_goals_fragment_uses_defaults_for_empty_goal_list() -> None:
    texts = _texts(build_goals_fragment([], include_ai=False))
    assert texts == [GOALS_HEADER] + [f"- {line}" for line in DEFAULT_GOAL_LINES]
    assert len(DEFAULT_GOAL_LINES) == 2


@pytest.mark.parametrize(
    "goals",
    [
        [],
        [DigitalCompetencyGoal(id="x", description=HOSTILE, framework_ref="<&>")],
        [DigitalCompetencyGoal(id=str(i), description=HOSTILE * i) for i in range(1, 4)],
    ],
)
@pytest.mark.parametrize("include_ai", [True, False])
def test_goals_fragment_is_well_formed_and_escaped(goals, include_ai) -> None:
    fragment = build_goals_fragment(goals, include_ai)
    root = wrap_fragment(fragment)
    assert len(root) > 0
    assert "&&" not in fragment
    assert "a < b" not in fragment
    assert HOSTILE not in fragment
    joined = "".join(_texts(fragment))
    for goal in goals:
        assert HOSTILE in joined


def test_goals_fragment_ai_block_only_when_requested() -> None:
    without_ai = build_goals_fragment([], include_ai=False)
    with_ai = build_goals_fragment([], include_ai=True)

    assert AI_HEADER not in without_ai
    assert AI_COLOR not in without_ai
    for line in AI_GOAL_LINES:
        assert escape_xml(line) not in without_ai

    texts = _texts(with_ai)
    assert AI_HEADER in texts
    assert [f"- {line}" for line in AI_GOAL_LINES] == texts[-2:]


def test_goals_fragment_uses_named_colors() -> None:
    fragment = build_goals_fragment([], include_ai=True)
    assert f'<w:color w:val="{NLS_COLOR}"/>' in fragment
    assert f'<w:color w:val="{AI_COLOR}"/>' in fragment
    assert "<w:b/>" in fragment


def test_control_characters_are_dropped() -> None:
    goal = DigitalCompetencyGoal(id="1", description="Dòng\x0bmột\x01")
    root = wrap_fragment(build_goals_fragment([goal], include_ai=False))
    assert root is not None


def test_blank_framework_ref_is_omitted() -> None:
    goal = DigitalCompetencyGoal(id="1", description="Mô tả", framework_ref="  ")
    assert goal_lines([goal]) == ["Mô tả"]


def test_activity_fragment_three_lines_with_ai() -> None:
    activity = LessonPart(
        id="a",
        name="Khởi động",
        digital_activity="Trả lời câu hỏi trên Quizizz",
        digital_tools=["Quizizz", "  ", "Padlet"],
    )
    texts = _texts(build_activity_fragment(activity, include_ai=True))
    assert texts == [
        "Hoạt động số: Trả lời câu hỏi trên Quizizz",
        f"{TOOLS_LABEL}Quizizz, Padlet",
        AI_ACTIVITY_LINE,
    ]


def test_activity_fragment_omits_tools_line_without_tools() -> None:
    activity = LessonPart(id="a", name="Luyện tập", digital_activity="Làm bài trên Azota")
    lines = activity_lines(activity, include_ai=False)
    assert lines == ["Hoạt động số: Làm bài trên Azota"]


def test_activity_fragment_tools_only() -> None:
    activity = LessonPart(id="a", name="Vận dụng", digital_tools=["Canva"])
    assert activity_lines(activity, include_ai=False) == [f"{TOOLS_LABEL}Canva"]


@pytest.mark.parametrize("include_ai", [True, False])
def test_activity_without_digital_content_yields_empty_fragment(include_ai: bool) -> None:
    activity = LessonPart(id="a", name="Luyện tập", digital_activity="   ", digital_tools=[""])
    assert build_activity_fragment(activity, include_ai) == ""


def test_activity_fragment_escapes_user_text() -> None:
    activity = LessonPart(id="a", name="X", digital_activity=HOSTILE, digital_tools=["A&B"])
    fragment = build_activity_fragment(activity, include_ai=False)
    texts = _texts(fragment)
    assert texts[0].endswith(HOSTILE)
    assert texts[1].endswith("A&B")
    assert "A&B" not in fragment


def test_lone_surrogates_are_stripped_from_fragments() -> None:
    goals = [DigitalCompetencyGoal(id="g", description="x\ud800y\udfffz")]
    activity = LessonPart(id="a", name="Khởi động", digital_activity="Chơi\udc80 Kahoot")

    for fragment in (build_goals_fragment(goals, True), build_activity_fragment(activity, True)):
        fragment.encode("utf-8")
        wrap_fragment(fragment)

    assert "- xyz" in build_goals_fragment(goals, False)
    assert "Chơi Kahoot" in build_activity_fragment(activity, False)
