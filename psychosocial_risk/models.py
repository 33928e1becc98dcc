"""
Psychosocial Risk Engine - ORM Models.

============================================================
TABLES
============================================================

1. survey_responses         submitted questionnaires
2. probability_assessments  one row per (company, sector, theme)
3. diagnostic_reports       append-only report history

Answers, sources and theme snapshots are stored as JSON.
JSON object keys come back as strings; the repository turns
them into ints again.

============================================================
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, JSON,
    Index, UniqueConstraint,
)

from .database.engine import Base


def utc_now():
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


# =============================================================
# 1. SURVEY RESPONSES
# =============================================================

class SurveyResponseRecord(Base):
    """
    A submitted 90-question questionnaire.

    Answers: {"question_id": value 0-4}
    """
    __tablename__ = "survey_responses"

    id = Column(String(64), primary_key=True)
    company_id = Column(String(64), nullable=False, index=True)
    sector_id = Column(String(64), nullable=True)
    job_function = Column(String(255), nullable=False, default="")

    answers = Column(JSON, nullable=False, default=dict)

    completed_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        Index("idx_survey_responses_company_sector", "company_id", "sector_id"),
    )


# =============================================================
# 2. PROBABILITY ASSESSMENTS
# =============================================================

class ProbabilityAssessmentRecord(Base):
    """
    Persisted probability for one theme of a (company, sector).

    source: "human" for reviewer overrides, "auto" for derived values
    """
    __tablename__ = "probability_assessments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(String(64), nullable=False)
    sector_id = Column(String(64), nullable=False)
    theme_index = Column(Integer, nullable=False)

    value = Column(Integer, nullable=False)
    source = Column(String(16), nullable=False, default="auto")

    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    __table_args__ = (
        UniqueConstraint("company_id", "sector_id", "theme_index", name="uq_probability_theme"),
        Index("idx_probability_company", "company_id"),
    )


# =============================================================
# 3. DIAGNOSTIC REPORTS
# =============================================================

class DiagnosticReportRecord(Base):
    """
    One saved report version. Only the latest carries is_main.
    """
    __tablename__ = "diagnostic_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(String(64), nullable=False)
    sector_id = Column(String(64), nullable=False)

    timestamp = Column(DateTime(timezone=True), nullable=False)
    author = Column(String(255), nullable=False)
    health_effects = Column(Text, nullable=False, default="")
    control_measures = Column(Text, nullable=False, default="")

    sources = Column(JSON, nullable=False, default=dict)
    themes = Column(JSON, nullable=False, default=list)

    is_main = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        Index("idx_reports_company_sector", "company_id", "sector_id", "id"),
    )
