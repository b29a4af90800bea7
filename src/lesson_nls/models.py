"""Lesson plan data model.

The analysis step emits camelCase JSON (``digitalGoals``, ``frameworkRef``,
...). Models accept either the camelCase aliases or the snake_case field
names and are frozen: editing produces a new copy via ``model_copy``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class DigitalCompetencyGoal(_CamelModel):
    """One digital-skill objective, optionally tagged with a framework code."""

    id: str
    description: str = ""
    framework_ref: Optional[str] = Field(
        default=None,
        description="Framework code such as 1.3.TC1a; echoed, never validated",
    )

    @field_validator("framework_ref")
    @classmethod
    def _blank_ref_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class LessonPart(_CamelModel):
    """A lesson activity; ``name`` is the key used to find it in the document."""

    id: str
    name: str = ""
    digital_activity: str = ""
    digital_tools: list[str] = Field(default_factory=list)
    original_content: Optional[str] = None

    @property
    def tools(self) -> list[str]:
        """Tool names with blanks dropped."""
        return [t.strip() for t in self.digital_tools if t and t.strip()]

    @property
    def has_digital_content(self) -> bool:
        return bool(self.digital_activity.strip() or self.tools)


class LessonPlanData(_CamelModel):
    """Everything the analysis step produced for one lesson plan."""

    title: str = ""
    grade: str = ""
    subject: str = ""
    summary: str = ""
    original_full_text: str = ""
    digital_goals: list[DigitalCompetencyGoal] = Field(default_factory=list)
    activities: list[LessonPart] = Field(default_factory=list)
    recommended_tools: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _goal_ids_unique(self) -> "LessonPlanData":
        seen: set[str] = set()
        for goal in self.digital_goals:
            if goal.id in seen:
                raise ValueError(f"Duplicate digital goal id: {goal.id}")
            seen.add(goal.id)
        return self


@dataclass(frozen=True)
class Anchor:
    """Insertion point in the primary markup stream.

    ``offset`` is -1 when ``found`` is False. ``pattern`` records which
    matcher produced the hit, for logging.
    """

    offset: int
    found: bool
    pattern: str | None = None

    @classmethod
    def not_found(cls) -> "Anchor":
        return cls(offset=-1, found=False)
