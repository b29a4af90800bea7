"""In-memory DOCX package codec.

Opens the uploaded bytes as a ZIP archive, exposes entries for read and
replace, and re-packs the archive. Entry order and ``ZipInfo`` metadata
are preserved; entries that were not replaced are written back with
their original content (styles, media, fonts, ...).
"""

from __future__ import annotations

import io
import logging
import warnings
import zipfile
import zlib
from dataclasses import dataclass

from ..config.settings import settings
from ..errors import FormatError, MissingEntryError

logger = logging.getLogger(__name__)

ZIP_MAGIC = b"PK\x03\x04"


@dataclass(frozen=True)
class SerializeConfig:
    """Options for :meth:`Container.serialize`.

    compression_level: 0 (fastest, largest) to 9 (slowest, smallest).
    """

    compression_level: int = 6

    def __post_init__(self):
        if not 0 <= self.compression_level <= 9:
            raise ValueError(
                f"compression_level must be in 0..9, got {self.compression_level}"
            )


class Container:
    """A loaded DOCX package. Build with :meth:`DocxCodec.open`.

    ``contents[i]`` holds the bytes of ``infos[i]``. When an archive
    repeats a name, lookups by name resolve to the last copy, as
    :mod:`zipfile` does, and every copy is written back.
    """

    def __init__(self, infos: list[zipfile.ZipInfo], contents: list[bytes],
                 comment: bytes = b""):
        self._infos = infos
        self._contents = contents
        self._comment = comment
        self._index = {info.filename: i for i, info in enumerate(infos)}
        self._replaced: set[str] = set()

    def names(self) -> list[str]:
        """Entry names in original archive order."""
        return [info.filename for info in self._infos]

    def has_entry(self, name: str) -> bool:
        return name in self._index

    def read_bytes(self, name: str) -> bytes:
        if name not in self._index:
            raise MissingEntryError(name)
        return self._contents[self._index[name]]

    def read_entry(self, name: str) -> str:
        """Return an entry decoded as UTF-8.

        Raises:
            MissingEntryError: If the entry does not exist.
            FormatError: If the entry is not valid UTF-8.
        """
        raw = self.read_bytes(name)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatError(f"{name} is not UTF-8: {e}") from e

    def write_entry(self, name: str, text: str) -> None:
        """Replace an existing entry's content; metadata is left untouched."""
        if name not in self._index:
            raise MissingEntryError(name)
        self._contents[self._index[name]] = text.encode("utf-8")
        self._replaced.add(name)

    @property
    def replaced(self) -> frozenset[str]:
        return frozenset(self._replaced)

    def serialize(self, config: SerializeConfig | None = None) -> bytes:
        """Re-pack every entry, in original order, into new archive bytes."""
        if config is None:
            config = SerializeConfig(compression_level=settings.compression_level)

        buffer = io.BytesIO()
        with warnings.catch_warnings():
            # Duplicate names are carried over from the original as-is
            warnings.filterwarnings("ignore", message="Duplicate name", category=UserWarning)
            with zipfile.ZipFile(buffer, "w") as output_zip:
                for info, content in zip(self._infos, self._contents):
                    # Stored entries ignore compresslevel
                    output_zip.writestr(info, content, compresslevel=config.compression_level)
                output_zip.comment = self._comment

        data = buffer.getvalue()
        logger.debug(
            "Serialized %d entries (%d replaced, level %d): %d bytes",
            len(self._infos), len(self._replaced), config.compression_level, len(data),
        )
        return data


class DocxCodec:
    """Opens DOCX bytes into a :class:`Container`.

    Passed to the export driver explicitly rather than looked up globally.
    """

    def __init__(self, primary_entry: str | None = None):
        self.primary_entry = primary_entry or settings.primary_entry

    def is_container(self, data: bytes | None) -> bool:
        """Cheap check: does this look like a ZIP package at all?"""
        return bool(data) and data[:4] == ZIP_MAGIC

    def open(self, data: bytes) -> Container:
        """Load archive bytes.

        Raises:
            FormatError: If the bytes are not a readable ZIP archive.
            MissingEntryError: If the primary entry is absent.
        """
        if not self.is_container(data):
            raise FormatError("Not a ZIP/DOCX package")

        try:
            with zipfile.ZipFile(io.BytesIO(data), "r") as original_zip:
                infos = original_zip.infolist()
                contents = [original_zip.read(info) for info in infos]
                comment = original_zip.comment
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, zlib.error,
                NotImplementedError, RuntimeError) as e:
            # RuntimeError: encrypted members; NotImplementedError: unknown compression
            raise FormatError(f"Invalid ZIP/DOCX format: {e}") from e

        if all(info.filename != self.primary_entry for info in infos):
            raise MissingEntryError(self.primary_entry)

        logger.debug("Opened package with %d entries", len(infos))
        return Container(infos, contents, comment)
