"""
Pydantic Schemas for records entering the engine.

The outer application hands over raw records (form posts,
document-store rows). These schemas validate them and convert
them to the engine's frozen dataclasses.
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from .questionnaire import MAX_ANSWER, MIN_ANSWER, QUESTIONS_PER_THEME, THEME_COUNT
from .types import (
    ProbabilityAssessment,
    ProbabilitySource,
    SurveyResponse,
    ThemeAnnotation,
)


MAX_QUESTION_ID = THEME_COUNT * QUESTIONS_PER_THEME


# =============================================================
# SURVEY RESPONSES
# =============================================================

class SurveyResponseIn(BaseModel):
    """A submitted questionnaire as stored by the application."""
    id: str
    company_id: str
    sector_id: Optional[str] = None
    job_function: str = ""
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    answers: Dict[int, int] = Field(default_factory=dict)

    @field_validator("answers")
    @classmethod
    def check_answers(cls, answers: Dict[int, int]) -> Dict[int, int]:
        for question_id, value in answers.items():
            if not 1 <= question_id <= MAX_QUESTION_ID:
                raise ValueError(f"Unknown question id: {question_id}")
            if not MIN_ANSWER <= value <= MAX_ANSWER:
                raise ValueError(
                    f"Answer for question {question_id} out of range: {value}"
                )
        return answers

    @field_validator("sector_id")
    @classmethod
    def blank_sector_is_none(cls, sector_id: Optional[str]) -> Optional[str]:
        return sector_id or None

    def to_domain(self) -> SurveyResponse:
        return SurveyResponse(
            response_id=self.id,
            company_id=self.company_id,
            sector_id=self.sector_id,
            job_function=self.job_function,
            completed_at=self.completed_at,
            answers=dict(self.answers),
        )


# =============================================================
# PROBABILITY OVERRIDES
# =============================================================

class ProbabilityOverrideIn(BaseModel):
    """A probability entered by the reviewer for one theme."""
    company_id: str
    sector_id: str
    theme_index: int = Field(ge=0, lt=THEME_COUNT)
    value: int = Field(ge=1, le=4)

    def to_domain(self) -> ProbabilityAssessment:
        return ProbabilityAssessment(value=self.value, source=ProbabilitySource.HUMAN)


class ProbabilityEntryIn(BaseModel):
    """One persisted probability entry as read back from storage."""
    value: int = Field(ge=1, le=4)
    source: ProbabilitySource = ProbabilitySource.AUTO

    def to_domain(self) -> ProbabilityAssessment:
        return ProbabilityAssessment(value=self.value, source=self.source)


# =============================================================
# REPORT ANNOTATIONS
# =============================================================

class ThemeAnnotationIn(BaseModel):
    """Reviewer texts for one theme."""
    source: str = ""
    health_effects: str = ""
    control_measures: str = ""

    def to_domain(self) -> ThemeAnnotation:
        return ThemeAnnotation(
            source=self.source,
            health_effects=self.health_effects,
            control_measures=self.control_measures,
        )


class ReportAnnotationsIn(BaseModel):
    """Annotations keyed by theme index, plus the signing reviewer."""
    themes: Dict[int, ThemeAnnotationIn] = Field(default_factory=dict)
    reviewer_name: Optional[str] = None

    @field_validator("themes")
    @classmethod
    def check_theme_indices(cls, themes: Dict[int, ThemeAnnotationIn]) -> Dict[int, ThemeAnnotationIn]:
        for idx in themes:
            if not 0 <= idx < THEME_COUNT:
                raise ValueError(f"Theme index out of range: {idx}")
        return themes

    def to_domain(self) -> Dict[int, ThemeAnnotation]:
        return {idx: annotation.to_domain() for idx, annotation in self.themes.items()}
