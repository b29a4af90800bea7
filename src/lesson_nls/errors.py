"""Exceptions raised by the document re-injection pipeline.

Only the export driver catches these; each one downgrades an export to
the plain-text reference document instead of failing it.
"""


class ExportError(Exception):
    """Base class for errors that abort the modify-original path."""


class FormatError(ExportError):
    """Bytes are not an openable DOCX package."""


class MissingEntryError(FormatError):
    """A required entry is absent from the package."""

    def __init__(self, name: str):
        super().__init__(f"Missing entry: {name}")
        self.name = name


class StructureError(ExportError):
    """The primary markup stream is not shaped like a document body."""
