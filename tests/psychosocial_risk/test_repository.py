"""
Tests for the SQLAlchemy storage collaborators (SQLite in memory).
"""

from datetime import datetime, timezone

import pytest

from psychosocial_risk.database.engine import DatabasePersistenceError
from psychosocial_risk.engine import PsychosocialRiskEngine
from psychosocial_risk.repository import (
    SqlAlchemyProbabilityStore,
    SqlAlchemyReportStore,
    SqlAlchemyResponseSource,
)
from psychosocial_risk.types import (
    DiagnosticReport,
    ProbabilityAssessment,
    ProbabilitySource,
    ReconciliationStatus,
    RiskLevel,
    ThemeMetrics,
)


def human(value):
    return ProbabilityAssessment(value, ProbabilitySource.HUMAN)


def auto(value):
    return ProbabilityAssessment(value, ProbabilitySource.AUTO)


def make_report(author, sector_id="sector-a"):
    return DiagnosticReport(
        company_id="acme",
        sector_id=sector_id,
        timestamp=datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc),
        author=author,
        health_effects="Fadiga",
        control_measures="Pausas",
        sources={0: "Gestão", 3: "Clima"},
        themes=(ThemeMetrics(0, "Assédio e Violência", 2.5, 3, RiskLevel.ALTO, 4),),
    )


# =============================================================
# TEST: Responses
# =============================================================

class TestSqlAlchemyResponseSource:

    def test_save_and_list(self, session_factory, make_response, theme_answers):
        source = SqlAlchemyResponseSource(session_factory)
        source.save(make_response(theme_answers(0, [4, 3]), sector_id="sector-a"))
        source.save(make_response(theme_answers(0, [1]), sector_id="sector-b"))

        all_sectors = source.list_responses("acme")
        sector_a = source.list_responses("acme", "sector-a")

        assert len(all_sectors) == 2
        assert len(sector_a) == 1
        assert sector_a[0].answers == {1: 4, 2: 3}
        assert sector_a[0].completed_at.tzinfo is not None

    def test_other_company_excluded(self, session_factory, make_response, theme_answers):
        source = SqlAlchemyResponseSource(session_factory)
        source.save(make_response(theme_answers(0, [4]), company_id="other"))

        assert source.list_responses("acme") == []


# =============================================================
# TEST: Probability maps
# =============================================================

class TestSqlAlchemyProbabilityStore:

    def test_round_trip(self, session_factory):
        store = SqlAlchemyProbabilityStore(session_factory)

        store.write_map("acme", "sector-a", {0: auto(3), 5: human(1)})

        assert store.read_map("acme", "sector-a") == {0: auto(3), 5: human(1)}
        assert store.read_map("acme", "sector-b") == {}

    def test_write_replaces_whole_map(self, session_factory):
        store = SqlAlchemyProbabilityStore(session_factory)
        store.write_map("acme", "sector-a", {0: auto(3), 1: auto(2)})

        store.write_map("acme", "sector-a", {1: human(4), 2: auto(2)})

        assert store.read_map("acme", "sector-a") == {1: human(4), 2: auto(2)}

    def test_read_company(self, session_factory):
        store = SqlAlchemyProbabilityStore(session_factory)
        store.write_map("acme", "sector-a", {0: auto(3)})
        store.write_map("acme", "sector-b", {0: human(1)})
        store.write_map("other", "sector-a", {0: auto(2)})

        assert store.read_company("acme") == {
            "sector-a": {0: auto(3)},
            "sector-b": {0: human(1)},
        }


# =============================================================
# TEST: Reports
# =============================================================

class TestSqlAlchemyReportStore:

    def test_append_demotes_previous(self, session_factory):
        store = SqlAlchemyReportStore(session_factory)
        store.append(make_report("Ana"))
        store.append(make_report("Bruno"))
        store.append(make_report("Outro", sector_id="sector-b"))

        history = store.history("acme", "sector-a")

        assert [r.author for r in history] == ["Ana", "Bruno"]
        assert [r.is_main for r in history] == [False, True]
        assert store.current("acme", "sector-a").author == "Bruno"
        assert store.current("acme", "sector-b").is_main

    def test_round_trip_fields(self, session_factory):
        store = SqlAlchemyReportStore(session_factory)
        report = make_report("Ana")

        store.append(report)
        loaded = store.current("acme", "sector-a")

        assert loaded == report

    def test_current_without_reports(self, session_factory):
        assert SqlAlchemyReportStore(session_factory).current("acme", "sector-a") is None


# =============================================================
# TEST: Engine over the database
# =============================================================

class TestEngineWithDatabase:

    def test_reconcile_is_idempotent(
        self, session_factory, plain_questions, make_response, uniform_answers
    ):
        responses = SqlAlchemyResponseSource(session_factory)
        probabilities = SqlAlchemyProbabilityStore(session_factory)
        responses.save(make_response(uniform_answers(4)))
        engine = PsychosocialRiskEngine(
            responses=responses,
            probabilities=probabilities,
            reports=SqlAlchemyReportStore(session_factory),
            questions=plain_questions,
        )

        first = engine.reconcile_probabilities("acme", "sector-a")
        second = engine.reconcile_probabilities("acme", "sector-a")

        assert first.status == ReconciliationStatus.WRITTEN
        assert second.status == ReconciliationStatus.UNCHANGED
        assert probabilities.read_map("acme", "sector-a") == {i: auto(3) for i in range(9)}

    def test_override_and_report(self, session_factory, plain_questions, make_response, uniform_answers):
        responses = SqlAlchemyResponseSource(session_factory)
        responses.save(make_response(uniform_answers(4)))
        engine = PsychosocialRiskEngine(
            responses=responses,
            probabilities=SqlAlchemyProbabilityStore(session_factory),
            reports=SqlAlchemyReportStore(session_factory),
            questions=plain_questions,
        )

        engine.set_probability_override("acme", "sector-a", 0, 1)
        report = engine.assemble_report("acme", "sector-a", {}, reviewer_name="Ana")

        assert report.themes[0].probability == 1
        assert report.themes[0].risk_level == RiskLevel.MEDIO
        assert engine.current_report("acme", "sector-a").author == "Ana"


class TestTransactionScope:

    def test_failure_raises_persistence_error(self, session_factory):
        from psychosocial_risk.database.engine import transaction_scope
        from psychosocial_risk.models import ProbabilityAssessmentRecord

        with pytest.raises(DatabasePersistenceError):
            with transaction_scope(session_factory) as session:
                for _ in range(2):
                    session.add(ProbabilityAssessmentRecord(
                        company_id="acme", sector_id="a", theme_index=0, value=2, source="auto",
                    ))
                    session.flush()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
