"""
Psychosocial Risk Engine - Database Repository.

============================================================
PURPOSE
============================================================
SQLAlchemy implementations of the storage collaborators:

- SqlAlchemyResponseSource: survey_responses
- SqlAlchemyProbabilityStore: probability_assessments
- SqlAlchemyReportStore: diagnostic_reports

Every call runs in its own transaction_scope. Failures
surface as DatabasePersistenceError.

============================================================
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import sessionmaker

from .database.engine import get_session_factory, transaction_scope
from .models import (
    DiagnosticReportRecord,
    ProbabilityAssessmentRecord,
    SurveyResponseRecord,
)
from .schemas import ProbabilityEntryIn
from .stores import ProbabilityStore, ReportStore, ResponseSource
from .types import (
    DiagnosticReport,
    ProbabilityAssessment,
    ProbabilityMap,
    ProbabilitySource,
    RiskLevel,
    SurveyResponse,
    ThemeMetrics,
)


logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================
# SURVEY RESPONSES
# =============================================================


class SqlAlchemyResponseSource(ResponseSource):
    """Survey responses read from the database."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory or get_session_factory()

    def save(self, response: SurveyResponse) -> None:
        """Insert or replace one submitted questionnaire."""
        with transaction_scope(self._session_factory) as session:
            session.merge(SurveyResponseRecord(
                id=response.response_id,
                company_id=response.company_id,
                sector_id=response.sector_id,
                job_function=response.job_function,
                answers={str(k): v for k, v in response.answers.items()},
                completed_at=response.completed_at,
            ))
        logger.debug(f"Saved survey response {response.response_id}")

    def list_responses(
        self,
        company_id: str,
        sector_id: Optional[str] = None,
    ) -> List[SurveyResponse]:
        stmt = select(SurveyResponseRecord).where(
            SurveyResponseRecord.company_id == company_id
        )
        if sector_id is not None:
            stmt = stmt.where(SurveyResponseRecord.sector_id == sector_id)
        stmt = stmt.order_by(SurveyResponseRecord.completed_at)

        with transaction_scope(self._session_factory) as session:
            records = session.execute(stmt).scalars().all()
            return [self._to_domain(r) for r in records]

    @staticmethod
    def _to_domain(record: SurveyResponseRecord) -> SurveyResponse:
        return SurveyResponse(
            response_id=record.id,
            company_id=record.company_id,
            sector_id=record.sector_id,
            job_function=record.job_function or "",
            completed_at=_as_utc(record.completed_at),
            answers={int(k): int(v) for k, v in (record.answers or {}).items()},
        )


# =============================================================
# PROBABILITY ASSESSMENTS
# =============================================================


class SqlAlchemyProbabilityStore(ProbabilityStore):
    """
    Probability maps stored one row per theme.

    write_map replaces the whole map: rows are updated in place
    when their value or source changed, inserted when new and
    deleted when the theme is absent from the new map.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory or get_session_factory()

    def read_map(self, company_id: str, sector_id: str) -> ProbabilityMap:
        stmt = select(ProbabilityAssessmentRecord).where(
            ProbabilityAssessmentRecord.company_id == company_id,
            ProbabilityAssessmentRecord.sector_id == sector_id,
        )
        with transaction_scope(self._session_factory) as session:
            return {
                r.theme_index: self._to_domain(r)
                for r in session.execute(stmt).scalars()
            }

    def write_map(
        self,
        company_id: str,
        sector_id: str,
        assessments: Mapping[int, ProbabilityAssessment],
    ) -> None:
        stmt = select(ProbabilityAssessmentRecord).where(
            ProbabilityAssessmentRecord.company_id == company_id,
            ProbabilityAssessmentRecord.sector_id == sector_id,
        )

        changed = 0
        with transaction_scope(self._session_factory) as session:
            existing = {r.theme_index: r for r in session.execute(stmt).scalars()}

            for theme_index, entry in assessments.items():
                record = existing.pop(theme_index, None)
                if record is None:
                    session.add(ProbabilityAssessmentRecord(
                        company_id=company_id,
                        sector_id=sector_id,
                        theme_index=theme_index,
                        value=entry.value,
                        source=entry.source.value,
                    ))
                    changed += 1
                elif record.value != entry.value or record.source != entry.source.value:
                    record.value = entry.value
                    record.source = entry.source.value
                    changed += 1

            for record in existing.values():
                session.delete(record)
                changed += 1

        logger.debug(f"Probability map for {company_id}/{sector_id}: {changed} rows changed")

    def read_company(self, company_id: str) -> Dict[str, ProbabilityMap]:
        stmt = select(ProbabilityAssessmentRecord).where(
            ProbabilityAssessmentRecord.company_id == company_id
        )
        maps: Dict[str, ProbabilityMap] = {}
        with transaction_scope(self._session_factory) as session:
            for record in session.execute(stmt).scalars():
                maps.setdefault(record.sector_id, {})[record.theme_index] = self._to_domain(record)
        return maps

    @staticmethod
    def _to_domain(record: ProbabilityAssessmentRecord) -> ProbabilityAssessment:
        return ProbabilityEntryIn(value=record.value, source=record.source).to_domain()


# =============================================================
# DIAGNOSTIC REPORTS
# =============================================================


class SqlAlchemyReportStore(ReportStore):
    """Append-only report history; the newest row is the main one."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory or get_session_factory()

    def append(self, report: DiagnosticReport) -> None:
        with transaction_scope(self._session_factory) as session:
            session.execute(
                update(DiagnosticReportRecord)
                .where(
                    DiagnosticReportRecord.company_id == report.company_id,
                    DiagnosticReportRecord.sector_id == report.sector_id,
                    DiagnosticReportRecord.is_main.is_(True),
                )
                .values(is_main=False)
            )
            session.add(DiagnosticReportRecord(
                company_id=report.company_id,
                sector_id=report.sector_id,
                timestamp=report.timestamp,
                author=report.author,
                health_effects=report.health_effects,
                control_measures=report.control_measures,
                sources={str(k): v for k, v in report.sources.items()},
                themes=[t.to_dict() for t in report.themes],
                is_main=report.is_main,
            ))

        logger.info(f"Appended report for {report.company_id}/{report.sector_id}")

    def history(self, company_id: str, sector_id: str) -> List[DiagnosticReport]:
        stmt = (
            select(DiagnosticReportRecord)
            .where(
                DiagnosticReportRecord.company_id == company_id,
                DiagnosticReportRecord.sector_id == sector_id,
            )
            .order_by(DiagnosticReportRecord.id)
        )
        with transaction_scope(self._session_factory) as session:
            return [self._to_domain(r) for r in session.execute(stmt).scalars()]

    @staticmethod
    def _to_domain(record: DiagnosticReportRecord) -> DiagnosticReport:
        return DiagnosticReport(
            company_id=record.company_id,
            sector_id=record.sector_id,
            timestamp=_as_utc(record.timestamp),
            author=record.author,
            health_effects=record.health_effects or "",
            control_measures=record.control_measures or "",
            sources={int(k): v for k, v in (record.sources or {}).items()},
            themes=tuple(_theme_from_dict(t) for t in (record.themes or [])),
            is_main=record.is_main,
        )


def _theme_from_dict(data: Mapping[str, Any]) -> ThemeMetrics:
    return ThemeMetrics(
        theme_index=int(data["theme_index"]),
        label=data["label"],
        avg_gravity=float(data["avg_gravity"]),
        probability=data["probability"],
        risk_level=RiskLevel(data["risk_level"]),
        sample_count=int(data.get("sample_count", 0)),
        probability_source=ProbabilitySource(data.get("probability_source", "auto")),
    )
