"""Export driver: re-inject competency content into the original DOCX.

Pipeline per export: open package -> read word/document.xml -> splice the
goals fragment (anchor or end of body) -> splice each activity fragment
at its own anchor, re-locating against the already modified markup ->
write back -> re-pack -> validate. Any ``ExportError`` on the way, or a
missing/unrecognized original, downgrades the export to a plain-text
reference document; the caller always gets a file.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

import pyperclip

from ..config.settings import Settings, settings
from ..docx.anchors import locate_activity_anchor, locate_goals_anchor
from ..docx.container import DocxCodec, SerializeConfig
from ..docx.fragments import build_activity_fragment, build_goals_fragment
from ..docx.splice import body_close_offset, splice_fragment
from ..docx.validate import validate_docx
from ..errors import ExportError, StructureError
from ..models import LessonPlanData
from ..utils import derive_output_name
from .reference import render_reference_text

logger = logging.getLogger(__name__)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME = "text/plain; charset=utf-8"


class ExportState(str, Enum):
    IDLE = "idle"
    EXPORTING = "exporting"
    SUCCEEDED = "succeeded"
    FAILED_SOFT = "failed_soft"


@dataclass(frozen=True)
class DownloadArtifact:
    """A file handed to the download sink."""

    filename: str
    mime_type: str
    data: bytes


@dataclass
class InjectionReport:
    """Outcome of splicing one lesson plan into a document body."""

    body: str
    goals_anchor_found: bool = False
    activities_inserted: list[str] = field(default_factory=list)
    activities_skipped: list[str] = field(default_factory=list)


@dataclass
class ExportResult:
    state: ExportState
    artifact: DownloadArtifact
    goals_anchor_found: bool = False
    activities_inserted: list[str] = field(default_factory=list)
    activities_skipped: list[str] = field(default_factory=list)
    fallback_reason: Optional[str] = None


DownloadSink = Callable[[DownloadArtifact], Union[Awaitable[None], None]]
ClipboardWriter = Callable[[str], Union[Awaitable[None], None]]


async def _maybe_await(result) -> None:
    if inspect.isawaitable(result):
        await result


async def pyperclip_writer(text: str) -> None:
    """Default clipboard writer; raises pyperclip.PyperclipException when unavailable."""
    await asyncio.to_thread(pyperclip.copy, text)


def _record_insert(spans: list[tuple[int, int]], offset: int, length: int) -> None:
    """Shift spans at or after ``offset`` and record the new one."""
    for i, (start, end) in enumerate(spans):
        if start >= offset:
            spans[i] = (start + length, end + length)
    spans.append((offset, offset + length))


def inject_competencies(
    body_markup: str,
    data: LessonPlanData,
    include_ai: bool,
    patterns: list[str] | None = None,
    lookahead: int | None = None,
) -> InjectionReport:
    """Splice goals and per-activity fragments into a document body.

    Goals go after the located heading paragraph, or at the end of the body
    when no heading matches. Activities whose name cannot be found are
    skipped; they are never appended elsewhere. Activity names are only
    matched against the original document text, never against fragments
    inserted earlier in the same call.

    Raises:
        StructureError: If the goals need the end-of-body fallback and the
            body has no single ``</w:body>``.
    """
    report = InjectionReport(body=body_markup)
    inserted: list[tuple[int, int]] = []

    goals_fragment = build_goals_fragment(data.digital_goals, include_ai)
    anchor = locate_goals_anchor(report.body, patterns, lookahead)
    if anchor.found:
        logger.info("Goals anchor found via %r at offset %d", anchor.pattern, anchor.offset)
        offset = anchor.offset
        report.goals_anchor_found = True
    else:
        logger.warning("Goals anchor not found; appending goals at end of document body")
        offset = body_close_offset(report.body)
    report.body = splice_fragment(report.body, offset, goals_fragment)
    _record_insert(inserted, offset, len(goals_fragment))

    for activity in data.activities:
        fragment = build_activity_fragment(activity, include_ai)
        if not fragment:
            continue

        anchor = locate_activity_anchor(report.body, activity.name, lookahead, skip=inserted)
        if not anchor.found:
            logger.warning("Activity anchor not found, skipping: %r", activity.name)
            report.activities_skipped.append(activity.name)
            continue

        report.body = splice_fragment(report.body, anchor.offset, fragment)
        _record_insert(inserted, anchor.offset, len(fragment))
        report.activities_inserted.append(activity.name)

    return report


class ExportDriver:
    """Runs exports for one document instance.

    Not re-entrant: callers must not start an export while another one on
    the same driver is in flight.

    Args:
        codec: Package codec (default: DocxCodec for the configured entry).
        download: Called with every produced artifact; sync or async.
        clipboard: Clipboard writer for copy_to_clipboard; sync or async.
        config: Settings instance (default: global settings).
    """

    def __init__(
        self,
        codec: DocxCodec | None = None,
        download: DownloadSink | None = None,
        clipboard: ClipboardWriter | None = None,
        config: Settings | None = None,
    ):
        self._settings = config or settings
        self._codec = codec or DocxCodec(self._settings.primary_entry)
        self._download = download
        self._clipboard = clipboard or pyperclip_writer
        self.state = ExportState.IDLE

    async def export(
        self,
        data: LessonPlanData,
        include_ai: bool,
        original_bytes: bytes | None = None,
        original_name: str | None = None,
    ) -> ExportResult:
        """Produce the enriched document, or the plain-text fallback.

        Returns:
            ExportResult in state SUCCEEDED (DOCX artifact) or FAILED_SOFT
            (text artifact, with fallback_reason set).

        Raises:
            RuntimeError: If another export on this driver is in flight.
        """
        if self.state is ExportState.EXPORTING:
            raise RuntimeError("An export is already in progress on this driver")

        self.state = ExportState.EXPORTING
        try:
            result = await self._run(data, include_ai, original_bytes, original_name)
        except BaseException:
            self.state = ExportState.IDLE
            raise
        self.state = result.state

        logger.info(
            "Export %s: %s (%d bytes)",
            result.state.value, result.artifact.filename, len(result.artifact.data),
        )
        if self._download is not None:
            await _maybe_await(self._download(result.artifact))
        return result

    async def copy_to_clipboard(self, data: LessonPlanData, include_ai: bool) -> bool:
        """Copy the plain-text rendering; False if the clipboard refused it."""
        text = render_reference_text(data, include_ai)
        try:
            await _maybe_await(self._clipboard(text))
        except Exception as e:
            logger.warning("Clipboard write failed: %s", e)
            return False
        return True

    async def _run(self, data, include_ai, original_bytes, original_name) -> ExportResult:
        if not original_bytes:
            return self._fallback(data, include_ai, original_name, "no original document")
        if not self._codec.is_container(original_bytes):
            return self._fallback(data, include_ai, original_name, "original is not a DOCX package")

        try:
            artifact, report = await self._modify_original(
                data, include_ai, original_bytes, original_name,
            )
        except ExportError as e:
            return self._fallback(data, include_ai, original_name, str(e))

        return ExportResult(
            state=ExportState.SUCCEEDED,
            artifact=artifact,
            goals_anchor_found=report.goals_anchor_found,
            activities_inserted=report.activities_inserted,
            activities_skipped=report.activities_skipped,
        )

    async def _modify_original(self, data, include_ai, original_bytes, original_name):
        primary = self._codec.primary_entry
        container = await asyncio.to_thread(self._codec.open, original_bytes)
        body = await asyncio.to_thread(container.read_entry, primary)

        report = inject_competencies(
            body,
            data,
            include_ai,
            patterns=self._settings.goal_anchor_patterns,
            lookahead=self._settings.anchor_lookahead,
        )
        container.write_entry(primary, report.body)

        output = await asyncio.to_thread(
            container.serialize,
            SerializeConfig(compression_level=self._settings.compression_level),
        )
        is_valid, errors = await asyncio.to_thread(
            validate_docx, output, primary, container.replaced,
        )
        if not is_valid:
            raise StructureError("Modified document failed validation: " + "; ".join(errors))

        filename = derive_output_name(
            original_name,
            ".docx",
            self._settings.output_suffix,
            self._settings.default_output_stem,
            data.title,
        )
        return DownloadArtifact(filename=filename, mime_type=DOCX_MIME, data=output), report

    def _fallback(self, data, include_ai, original_name, reason) -> ExportResult:
        logger.warning("Falling back to plain-text export: %s", reason)
        text = render_reference_text(data, include_ai)
        filename = derive_output_name(
            original_name,
            ".txt",
            self._settings.output_suffix,
            self._settings.default_output_stem,
            data.title,
        )
        return ExportResult(
            state=ExportState.FAILED_SOFT,
            artifact=DownloadArtifact(
                filename=filename, mime_type=TEXT_MIME, data=text.encode("utf-8"),
            ),
            fallback_reason=reason,
        )
