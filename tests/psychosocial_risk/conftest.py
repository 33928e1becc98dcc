"""
Shared fixtures for the psychosocial risk engine tests.
"""

import itertools
from datetime import datetime, timezone
from typing import Dict, Optional

import pytest

from psychosocial_risk.database.engine import (
    create_all_tables,
    create_database_engine,
    get_session_factory,
)
from psychosocial_risk.engine import PsychosocialRiskEngine
from psychosocial_risk.questionnaire import QUESTIONS_PER_THEME, THEME_COUNT
from psychosocial_risk.stores import (
    InMemoryProbabilityStore,
    InMemoryReportStore,
    InMemoryResponseSource,
)
from psychosocial_risk.types import Question, SurveyResponse


FIXED_NOW = datetime(2025, 3, 10, 14, 30, tzinfo=timezone.utc)

COMPANY = "acme"
SECTOR_A = "sector-a"
SECTOR_B = "sector-b"


# =============================================================
# QUESTION TABLES
# =============================================================

@pytest.fixture
def plain_questions():
    """90 questions, none inverted: answer 4 -> 3, 2 -> 2, 0 -> 1."""
    return tuple(
        Question(qid, f"Pergunta {qid}", False)
        for qid in range(1, THEME_COUNT * QUESTIONS_PER_THEME + 1)
    )


@pytest.fixture
def inverted_questions():
    """90 questions, all inverted."""
    return tuple(
        Question(qid, f"Pergunta {qid}", True)
        for qid in range(1, THEME_COUNT * QUESTIONS_PER_THEME + 1)
    )


# =============================================================
# RESPONSES
# =============================================================

@pytest.fixture
def make_response():
    """Factory for SurveyResponse with sequential ids."""
    counter = itertools.count(1)

    def _make(
        answers: Dict[int, int],
        company_id: str = COMPANY,
        sector_id: Optional[str] = SECTOR_A,
    ) -> SurveyResponse:
        return SurveyResponse(
            response_id=f"resp-{next(counter)}",
            company_id=company_id,
            sector_id=sector_id,
            answers=dict(answers),
            completed_at=FIXED_NOW,
        )

    return _make


@pytest.fixture
def uniform_answers():
    """Same answer for every one of the 90 questions."""
    def _answers(value: int) -> Dict[int, int]:
        return {qid: value for qid in range(1, THEME_COUNT * QUESTIONS_PER_THEME + 1)}
    return _answers


@pytest.fixture
def theme_answers():
    """Answers for one theme only, in question order."""
    def _answers(theme_index: int, values) -> Dict[int, int]:
        first = theme_index * QUESTIONS_PER_THEME + 1
        return {first + offset: value for offset, value in enumerate(values)}
    return _answers


# =============================================================
# ENGINE
# =============================================================

@pytest.fixture
def response_source():
    return InMemoryResponseSource()


@pytest.fixture
def probability_store():
    return InMemoryProbabilityStore()


@pytest.fixture
def report_store():
    return InMemoryReportStore()


@pytest.fixture
def engine(response_source, probability_store, report_store, plain_questions):
    return PsychosocialRiskEngine(
        responses=response_source,
        probabilities=probability_store,
        reports=report_store,
        questions=plain_questions,
        clock=lambda: FIXED_NOW,
    )


# =============================================================
# DATABASE
# =============================================================

@pytest.fixture
def session_factory():
    """Fresh in-memory SQLite database per test."""
    db_engine = create_database_engine("sqlite:///:memory:")
    create_all_tables(db_engine)
    yield get_session_factory(db_engine)
    db_engine.dispose()
