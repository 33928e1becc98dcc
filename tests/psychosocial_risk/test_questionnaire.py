"""
Tests for the question table and engine configuration.
"""

import dataclasses

import pytest

from psychosocial_risk.config import EngineConfig, get_default_config, load_config_from_env
from psychosocial_risk.questionnaire import (
    ANSWER_OPTIONS,
    QUESTIONS,
    THEME_NAMES,
    questions_for_theme,
    theme_label,
    theme_of,
    validate_question_table,
)
from psychosocial_risk.types import Question, QuestionTableError


# =============================================================
# TEST: Question table
# =============================================================

class TestQuestionTable:

    def test_layout(self):
        assert len(QUESTIONS) == 90
        assert len(THEME_NAMES) == 9
        assert [q.question_id for q in QUESTIONS] == list(range(1, 91))
        assert sorted(ANSWER_OPTIONS) == [0, 1, 2, 3, 4]

    def test_validate_default_table(self):
        assert len(validate_question_table(QUESTIONS)) == 90

    def test_mixed_inversion(self):
        flags = {q.is_inverted for q in QUESTIONS}
        assert flags == {True, False}
        assert not QUESTIONS[0].is_inverted
        assert QUESTIONS[1].is_inverted

    def test_questions_for_theme(self):
        block = questions_for_theme(2)
        assert [q.question_id for q in block] == list(range(21, 31))

    def test_theme_of(self):
        assert theme_of(1) == 0
        assert theme_of(90) == 8
        with pytest.raises(KeyError):
            theme_of(91)

    def test_theme_label(self):
        assert theme_label(8) == "Equilíbrio Vida Pessoal"

    def test_duplicate_ids_rejected(self):
        questions = list(QUESTIONS)
        questions[-1] = Question(1, "dup", False)

        with pytest.raises(QuestionTableError):
            validate_question_table(questions)

    def test_wrong_size_rejected(self):
        with pytest.raises(QuestionTableError):
            validate_question_table(QUESTIONS[:-1])


# =============================================================
# TEST: Configuration
# =============================================================

class TestConfig:

    def test_defaults(self):
        config = get_default_config()

        assert config.aggregate_sector_id == "all"
        assert config.is_aggregate("all")
        assert not config.is_aggregate("sector-a")
        assert config.probability.aggregate_probability == 2
        assert config.report.author_fallback == "RT"
        assert config.to_dict()["matrix"]["low_max_score"] == 2.5

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            EngineConfig().engine_version = "2"

    def test_load_from_env(self, monkeypatch):
        monkeypatch.setenv("PSYCHOSOCIAL_AGGREGATE_SECTOR", "todos")
        monkeypatch.setenv("PSYCHOSOCIAL_AGGREGATE_PROBABILITY", "3")
        monkeypatch.setenv("PSYCHOSOCIAL_REPORT_AUTHOR_FALLBACK", "Responsável Técnico")

        config = load_config_from_env()

        assert config.is_aggregate("todos")
        assert config.probability.aggregate_probability == 3
        assert config.report.author_fallback == "Responsável Técnico"

    def test_load_from_env_rejects_out_of_range(self, monkeypatch):
        monkeypatch.setenv("PSYCHOSOCIAL_AGGREGATE_PROBABILITY", "7")

        with pytest.raises(ValueError):
            load_config_from_env()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
