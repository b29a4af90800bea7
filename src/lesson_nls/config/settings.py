"""Application settings using Pydantic Settings."""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Ordered most specific first. Matched case-insensitively against the
# character data of word/document.xml.
DEFAULT_GOAL_PATTERNS = [
    r"Về năng lực",
    r"Năng lực số",
    r"\d\.\s*Năng lực",
    r"MỤC TIÊU",
    r"Objectives?",
]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "lesson_nls"
    log_level: str = "INFO"

    # Container
    primary_entry: str = "word/document.xml"
    compression_level: int = Field(default=6, ge=0, le=9)

    # Output naming
    output_suffix: str = "_NLS"
    default_output_stem: str = "Giao_an_NLS"

    # Anchor matching (env: GOAL_ANCHOR_PATTERNS='["Về năng lực", ...]')
    anchor_lookahead: int = Field(default=3000, gt=0)
    goal_anchor_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GOAL_PATTERNS)
    )

    @field_validator("goal_anchor_patterns")
    @classmethod
    def _patterns_compile(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid anchor pattern {pattern!r}: {e}") from e
        return patterns


# Global settings instance
settings = Settings()
