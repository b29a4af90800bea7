"""Logging setup and output filename helpers."""

import logging
import os
import re
import sys
from typing import Optional

from .config.settings import settings

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(
    level: int | None = None,
    format_string: Optional[str] = None,
) -> None:
    """Set up global logging configuration.

    Args:
        level: Logging level override (default: from settings.log_level)
        format_string: Custom format string (optional)
    """
    if level is None:
        level = LOG_LEVEL_MAP.get(settings.log_level.upper(), logging.INFO)

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__ of the module)
        level: Optional logging level override

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(level)

    return logger


# ---------------------------------------------------------------------------
# Output filenames
# ---------------------------------------------------------------------------

# Keeps ASCII letters/digits plus Latin-1 Supplement, Latin Extended and
# Latin Extended Additional (Vietnamese) letters.
_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9À-ɏḀ-ỿ]+")


def sanitize_stem(text: str) -> str:
    """Collapse anything that is not a letter or digit into single underscores."""
    return _UNSAFE_NAME_CHARS.sub("_", text).strip("_")


def derive_output_name(
    original_name: str | None,
    extension: str,
    suffix: str,
    default_stem: str,
    title: str = "",
) -> str:
    """Build ``<original-stem><suffix><extension>`` for an export.

    Without an original name the stem is ``default_stem``, followed by the
    sanitized lesson title when there is one.

    Args:
        original_name: Uploaded file name, possibly with directories.
        extension: Extension including the dot, e.g. ".docx".
        suffix: Fixed marker inserted before the extension, e.g. "_NLS".
        default_stem: Stem used when original_name is missing.
        title: Lesson title used to disambiguate default names.

    Returns:
        File name without directories.
    """
    if original_name:
        stem = os.path.splitext(os.path.basename(original_name))[0]
        if stem:
            return f"{stem}{suffix}{extension}"

    stem = default_stem
    title_part = sanitize_stem(title)
    if title_part:
        stem = f"{stem}_{title_part}"
    return f"{stem}{extension}"
