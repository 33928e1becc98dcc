"""
Tests for diagnostic report assembly and the printable inventory.
"""

from datetime import datetime, timezone

import pytest

from psychosocial_risk.config import EngineConfig, ReportConfig
from psychosocial_risk.report import (
    DiagnosticReportAssembler,
    build_inventory_rows,
    join_theme_texts,
)
from psychosocial_risk.types import (
    InvalidSectorSelectionError,
    ProbabilitySource,
    RiskLevel,
    ThemeAnnotation,
    ThemeMetrics,
)


NOW = datetime(2025, 1, 2, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def metrics():
    return [
        ThemeMetrics(0, "Assédio e Violência", 3.0, 3, RiskLevel.CRITICO, 10),
        ThemeMetrics(1, "Carga de Trabalho", 1.0, 2, RiskLevel.BAIXO, 0, ProbabilitySource.HUMAN),
    ]


@pytest.fixture
def assembler():
    return DiagnosticReportAssembler(clock=lambda: NOW)


class TestJoinThemeTexts:

    def test_theme_order_and_blanks(self):
        texts = {3: "c", 0: "a", 1: "  ", 2: " b "}
        assert join_theme_texts(texts) == "a; b; c"

    def test_empty(self):
        assert join_theme_texts({}) == ""


class TestDiagnosticReportAssembler:

    def test_assemble(self, assembler, metrics):
        annotations = {
            1: ThemeAnnotation("Sobrecarga", "Fadiga", "Redistribuir tarefas"),
            0: ThemeAnnotation("Liderança", "", "Canal de denúncia"),
        }

        report = assembler.assemble("acme", "sector-a", metrics, annotations, "Carla")

        assert report.timestamp == NOW
        assert report.author == "Carla"
        assert report.health_effects == "Fadiga"
        assert report.control_measures == "Canal de denúncia; Redistribuir tarefas"
        assert report.sources == {0: "Liderança", 1: "Sobrecarga"}
        assert report.themes == tuple(metrics)
        assert report.is_main

    def test_author_is_trimmed(self, assembler, metrics):
        assert assembler.assemble("acme", "a", metrics, {}, "  Carla  ").author == "Carla"

    def test_custom_fallback(self, metrics):
        config = EngineConfig(report=ReportConfig(author_fallback="Responsável Técnico"))
        assembler = DiagnosticReportAssembler(config, clock=lambda: NOW)

        assert assembler.assemble("acme", "a", metrics, {}).author == "Responsável Técnico"

    def test_aggregate_rejected(self, assembler, metrics):
        with pytest.raises(InvalidSectorSelectionError) as exc_info:
            assembler.assemble("acme", "all", metrics, {})

        assert str(exc_info.value) == "Selecione um setor específico para salvar o laudo."
        assert exc_info.value.company_id == "acme"

    def test_to_dict(self, assembler, metrics):
        data = assembler.assemble("acme", "a", metrics, {2: ThemeAnnotation(source="x")}).to_dict()

        assert data["timestamp"] == NOW.isoformat()
        assert data["sources"] == {"2": "x"}
        assert data["themes"][0]["risk_level"] == "Crítico"
        assert data["themes"][1]["probability_source"] == "human"


class TestInventoryRows:

    def test_defaults_fill_blank_fields(self, metrics):
        rows = build_inventory_rows(metrics, {0: ThemeAnnotation(source="Gestão")})
        defaults = ReportConfig()

        assert len(rows) == 2
        assert rows[0].source == "Gestão"
        assert rows[0].health_effects == defaults.default_health_effects
        assert rows[1].source == defaults.default_source
        assert rows[1].control_measures == defaults.default_control_measures
        assert rows[0].risk_level == RiskLevel.CRITICO


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
