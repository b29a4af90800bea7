from __future__ import annotations

import io
import zipfile
from xml.etree import ElementTree as ET

import pytest

from lesson_nls.models import DigitalCompetencyGoal, LessonPart, LessonPlanData

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

CONTENT_TYPES_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
    '<Default Extension="xml" ContentType="application/xml"/>'
    '<Default Extension="png" ContentType="image/png"/>'
    '<Override PartName="/word/document.xml" '
    'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
    "</Types>"
)

RELS_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    '<Relationship Id="rId1" '
    'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" '
    'Target="word/document.xml"/>'
    "</Relationships>"
)

STYLES_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    f'<w:styles xmlns:w="{W_NS}"><w:style w:type="paragraph" w:styleId="Normal">'
    '<w:name w:val="Normal"/></w:style></w:styles>'
)

# Not a real PNG; only needs to survive byte-for-byte
MEDIA_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4

SECT_PR = '<w:sectPr><w:pgSz w:w="11906" w:h="16838"/></w:sectPr>'


def para(*runs: str, bold: bool = False) -> str:
    """A paragraph with one run per text piece, like Word splits headings."""
    rpr = "<w:rPr><w:b/></w:rPr>" if bold else ""
    body = "".join(
        f'<w:r>{rpr}<w:t xml:space="preserve">{text}</w:t></w:r>' for text in runs
    )
    return f"<w:p>{body}</w:p>"


def document_xml(*paragraphs: str, sect_pr: bool = True) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f'<w:document xmlns:w="{W_NS}" xmlns:r="{R_NS}"><w:body>'
        + "".join(paragraphs)
        + (SECT_PR if sect_pr else "")
        + "</w:body></w:document>"
    )


def build_docx(document: str | None, include_content_types: bool = True) -> bytes:
    """Zip a synthetic DOCX; ``document=None`` leaves out word/document.xml."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as z:
        if include_content_types:
            z.writestr("[Content_Types].xml", CONTENT_TYPES_XML)
        z.writestr("_rels/.rels", RELS_XML)
        if document is not None:
            z.writestr("word/document.xml", document)
        z.writestr("word/styles.xml", STYLES_XML)
        z.writestr(
            zipfile.ZipInfo("word/media/image1.png", date_time=(2024, 9, 5, 7, 30, 0)),
            MEDIA_BYTES,
        )
    return buffer.getvalue()


def read_document(data: bytes) -> str:
    with zipfile.ZipFile(io.BytesIO(data)) as z:
        return z.read("word/document.xml").decode("utf-8")


def paragraph_texts(document: str) -> list[str]:
    """Text of every paragraph in document order."""
    root = ET.fromstring(document.encode("utf-8"))
    texts = []
    for p in root.iter(f"{{{W_NS}}}p"):
        texts.append("".join(t.text or "" for t in p.iter(f"{{{W_NS}}}t")))
    return texts


def wrap_fragment(fragment: str) -> ET.Element:
    """Parse a fragment inside a root declaring the w: prefix."""
    return ET.fromstring(f'<root xmlns:w="{W_NS}">{fragment}</root>'.encode("utf-8"))


ACTIVITY_NAMES = [
    "Khởi động",
    "Hình thành kiến thức mới",
    "Luyện tập",
    "Vận dụng",
]


def lesson_document_xml() -> str:
    return document_xml(
        para("KẾ HOẠCH BÀI DẠY", bold=True),
        para("Bài 5: Phân số"),
        para("I. ", "MỤC TIÊU", bold=True),
        para("1. Về kiến thức"),
        para("Học sinh nhận biết được phân số."),
        para("2. ", "Về năng lực", bold=True),
        para("Năng lực chung: tự chủ và tự học."),
        para("3. Về phẩm chất"),
        para("Chăm chỉ, trách nhiệm."),
        para("II. THIẾT BỊ DẠY HỌC"),
        para("III. TIẾN TRÌNH DẠY HỌC"),
        para("Hoạt động 1: ", ACTIVITY_NAMES[0], bold=True),
        para("Giáo viên tổ chức trò chơi."),
        para("Hoạt động 2: ", ACTIVITY_NAMES[1], bold=True),
        para("Học sinh đọc sách giáo khoa."),
        para("Hoạt động 3: ", ACTIVITY_NAMES[2], bold=True),
        para("Học sinh làm bài tập."),
        para("Hoạt động 4: ", ACTIVITY_NAMES[3], bold=True),
        para("Học sinh liên hệ thực tế."),
    )


@pytest.fixture
def lesson_xml() -> str:
    return lesson_document_xml()


@pytest.fixture
def lesson_docx(lesson_xml: str) -> bytes:
    return build_docx(lesson_xml)


@pytest.fixture
def lesson_plan() -> LessonPlanData:
    return LessonPlanData(
        title="Phân số",
        grade="4",
        subject="Toán",
        summary="Bài học giới thiệu khái niệm phân số.",
        digital_goals=[
            DigitalCompetencyGoal(
                id="g1",
                description="Tìm kiếm thông tin về phân số trên Internet",
                framework_ref="1.1.TC1a",
            ),
            DigitalCompetencyGoal(
                id="g2",
                description="Trình bày kết quả bằng công cụ số",
            ),
        ],
        activities=[
            LessonPart(
                id="a1",
                name="Khởi động",
                digital_activity="Chơi trò chơi trắc nghiệm trên Kahoot",
                digital_tools=["Kahoot"],
            ),
            LessonPart(
                id="a2",
                name="Hình thành kiến thức mới",
                digital_activity="Xem video mô phỏng chia bánh",
                digital_tools=["YouTube", "GeoGebra"],
            ),
            LessonPart(id="a3", name="Luyện tập"),
            LessonPart(
                id="a4",
                name="Vận dụng",
                digital_tools=["Padlet"],
            ),
        ],
        recommended_tools=["Kahoot", "GeoGebra", "Padlet"],
    )
