"""DOCX package codec, fragment builder, anchor locator and splicer."""

from .anchors import locate_activity_anchor, locate_goals_anchor
from .container import Container, DocxCodec, SerializeConfig
from .fragments import build_activity_fragment, build_goals_fragment
from .splice import append_before_body_close, splice_fragment
from .validate import validate_docx

__all__ = [
    "Container",
    "DocxCodec",
    "SerializeConfig",
    "append_before_body_close",
    "build_activity_fragment",
    "build_goals_fragment",
    "locate_activity_anchor",
    "locate_goals_anchor",
    "splice_fragment",
    "validate_docx",
]
