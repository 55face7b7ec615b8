from __future__ import annotations

import logging
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, validator


class ParserConfig(BaseModel):
    """Markup conventions recognised by the content parser."""

    word_bank_labels: List[str] = Field(
        default_factory=lambda: ["Word bank"],
        description="Line prefixes (case-insensitive) that introduce a fill-in-the-blank word bank.",
    )

    @validator("word_bank_labels")
    def labels_not_blank(cls, value: List[str]) -> List[str]:
        """Drop surrounding whitespace and reject an empty label list."""
        labels = [label.strip() for label in value if label.strip()]
        if not labels:
            raise ValueError("word_bank_labels must contain at least one label")
        return labels


class GradingConfig(BaseModel):
    """Comparison policy for free-text answers."""

    case_sensitive_matching: bool = False
    case_sensitive_mistake: bool = False


class ScoringConfig(BaseModel):
    """Which adventure metric becomes the history entry's headline score."""

    primary_metric: Literal["first_try", "completion"] = "first_try"


class LoggingConfig(BaseModel):
    """Controls for logging output and format."""

    model_config = ConfigDict(populate_by_name=True)

    level: str = Field("INFO")
    use_json: bool = Field(False, alias="json")

    @validator("level")
    def level_is_known(cls, value: str) -> str:
        if not isinstance(logging.getLevelName(value.upper()), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return value.upper()


class Settings(BaseModel):
    """Top-level project configuration aggregating all sub-settings."""

    project_name: str = Field("Interactive Lesson Engine")
    parser: ParserConfig = Field(default_factory=ParserConfig)
    grading: GradingConfig = Field(default_factory=GradingConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
