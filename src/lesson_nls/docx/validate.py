"""Structural validation of a re-packed DOCX.

Checks ZIP integrity, required entries, XML well-formedness of every
``.xml`` part and the ``w:document``/``w:body`` shape of the primary entry.
"""

from __future__ import annotations

import io
import zipfile
from typing import Iterable
from xml.etree import ElementTree as ET

from ..config.settings import settings

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

CONTENT_TYPES_ENTRY = "[Content_Types].xml"


def _check_structure(content: bytes) -> list[str]:
    errors = []
    root = ET.fromstring(content)
    if root.tag != f"{{{W_NS}}}document":
        errors.append(f"Root element is '{root.tag}', expected w:document")
    elif root.find(f"{{{W_NS}}}body") is None:
        errors.append("w:body element not found")
    return errors


def validate_docx(
    data: bytes,
    primary_entry: str | None = None,
    entries: Iterable[str] | None = None,
) -> tuple[bool, list[str]]:
    """Validate DOCX bytes.

    Args:
        data: Archive bytes.
        primary_entry: Main document part (default: settings.primary_entry).
        entries: Restrict the well-formedness check to these parts
            (default: every .xml part).

    Returns:
        A tuple of (is_valid, error_messages). is_valid is True when
        error_messages is empty.
    """
    primary_entry = primary_entry or settings.primary_entry
    errors: list[str] = []

    try:
        with zipfile.ZipFile(io.BytesIO(data), "r") as z:
            bad = z.testzip()
            if bad is not None:
                return False, [f"Corrupt ZIP entry: {bad}"]

            names = z.namelist()
            for required in (CONTENT_TYPES_ENTRY, primary_entry):
                if required not in names:
                    errors.append(f"Missing required file: {required}")

            checked = set(entries) if entries is not None else None
            for name in names:
                if not name.endswith(".xml"):
                    continue
                if checked is not None and name not in checked:
                    continue
                content = z.read(name)
                try:
                    if name == primary_entry:
                        errors.extend(_check_structure(content))
                    else:
                        ET.fromstring(content)
                except ET.ParseError as e:
                    errors.append(f"{name}: {e}")

    except zipfile.BadZipFile:
        return False, ["Invalid ZIP/DOCX format"]

    return len(errors) == 0, errors
