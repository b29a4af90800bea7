"""Re-inject digital competency (NLS) content into original lesson-plan DOCX files."""

from .errors import ExportError, FormatError, MissingEntryError, StructureError
from .export import DownloadArtifact, ExportDriver, ExportResult, ExportState
from .models import Anchor, DigitalCompetencyGoal, LessonPart, LessonPlanData

__version__ = "0.1.0"

__all__ = [
    "Anchor",
    "DigitalCompetencyGoal",
    "DownloadArtifact",
    "ExportDriver",
    "ExportError",
    "ExportResult",
    "ExportState",
    "FormatError",
    "LessonPart",
    "LessonPlanData",
    "MissingEntryError",
    "StructureError",
]
