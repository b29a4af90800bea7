"""Export driver and plain-text reference rendering."""

from .driver import (
    DOCX_MIME,
    TEXT_MIME,
    DownloadArtifact,
    ExportDriver,
    ExportResult,
    ExportState,
    inject_competencies,
)
from .reference import render_reference_text

__all__ = [
    "DOCX_MIME",
    "TEXT_MIME",
    "DownloadArtifact",
    "ExportDriver",
    "ExportResult",
    "ExportState",
    "inject_competencies",
    "render_reference_text",
]
