"""
Tests for answer normalization and theme aggregation.
"""

import random

import pytest

from psychosocial_risk.aggregator import ThemeAggregator, filter_responses
from psychosocial_risk.questionnaire import QUESTIONS
from psychosocial_risk.normalizer import ScoreNormalizer, normalize_answer
from psychosocial_risk.types import Question, SeverityLevel


# =============================================================
# TEST: ScoreNormalizer
# =============================================================

class TestScoreNormalizer:
    """Raw answer -> severity bucket."""

    @pytest.mark.parametrize("value,expected", [
        (0, SeverityLevel.LOW),
        (1, SeverityLevel.LOW),
        (2, SeverityLevel.MEDIUM),
        (3, SeverityLevel.HIGH),
        (4, SeverityLevel.HIGH),
    ])
    def test_direct_questions(self, value, expected):
        assert normalize_answer(value, is_inverted=False) == expected

    @pytest.mark.parametrize("value,expected", [
        (0, SeverityLevel.HIGH),
        (1, SeverityLevel.HIGH),
        (2, SeverityLevel.MEDIUM),
        (3, SeverityLevel.LOW),
        (4, SeverityLevel.LOW),
    ])
    def test_inverted_questions(self, value, expected):
        assert normalize_answer(value, is_inverted=True) == expected

    def test_output_always_in_range(self):
        normalizer = ScoreNormalizer()
        for value in range(0, 5):
            for inverted in (True, False):
                assert normalizer.normalize(value, inverted) in (1, 2, 3)

    def test_monotonic_in_answer(self):
        direct = [normalize_answer(v, False) for v in range(5)]
        inverted = [normalize_answer(v, True) for v in range(5)]

        assert direct == sorted(direct)
        assert inverted == sorted(inverted, reverse=True)

    def test_normalize_for_uses_question_flag(self):
        normalizer = ScoreNormalizer()
        assert normalizer.normalize_for(Question(2, "x", True), 4) == SeverityLevel.LOW
        assert normalizer.normalize_for(Question(1, "x", False), 4) == SeverityLevel.HIGH

    def test_severity_labels(self):
        assert SeverityLevel.LOW.label == "Baixa"
        assert SeverityLevel.HIGH.label == "Alta"


# =============================================================
# TEST: ThemeAggregator
# =============================================================

class TestThemeAggregator:
    """Average gravity per theme."""

    def test_inverted_theme_with_low_answers_is_high(
        self, inverted_questions, make_response, theme_answers
    ):
        """Answers [0,0,1,0,...] on inverted questions average 3.0."""
        aggregator = ThemeAggregator(questions=inverted_questions)
        response = make_response(theme_answers(0, [0, 0, 1, 0, 0, 0, 0, 0, 0, 0]))

        result = aggregator.aggregate(0, [response])

        assert result.avg_gravity == 3.0
        assert result.sample_count == 10

    def test_theme_without_answers_defaults_to_one(self, plain_questions):
        aggregator = ThemeAggregator(questions=plain_questions)

        result = aggregator.aggregate(4, [])

        assert result.avg_gravity == 1.0
        assert result.sample_count == 0
        assert not result.has_data

    def test_missing_answers_are_skipped(self, plain_questions, make_response, theme_answers):
        """Only answered questions contribute to the average."""
        aggregator = ThemeAggregator(questions=plain_questions)
        response = make_response(theme_answers(1, [4, 2]))

        result = aggregator.aggregate(1, [response])

        assert result.sample_count == 2
        assert result.avg_gravity == pytest.approx(2.5)

    def test_average_spans_responses(self, plain_questions, make_response, uniform_answers):
        aggregator = ThemeAggregator(questions=plain_questions)
        responses = [make_response(uniform_answers(4)), make_response(uniform_answers(0))]

        result = aggregator.aggregate(2, responses)

        assert result.sample_count == 20
        assert result.avg_gravity == pytest.approx(2.0)

    def test_aggregate_all_returns_nine_in_order(self, plain_questions, make_response, uniform_answers):
        aggregator = ThemeAggregator(questions=plain_questions)

        results = aggregator.aggregate_all([make_response(uniform_answers(2))])

        assert [r.theme_index for r in results] == list(range(9))
        assert all(1.0 <= r.avg_gravity <= 3.0 for r in results)

    def test_independent_of_response_order(self, make_response):
        """Shuffling the responses leaves every theme average unchanged."""
        rng = random.Random(2024)
        responses = [
            make_response({qid: rng.randint(0, 4) for qid in range(1, 91) if rng.random() < 0.8})
            for _ in range(25)
        ]
        shuffled = list(responses)
        rng.shuffle(shuffled)
        aggregator = ThemeAggregator(questions=QUESTIONS)

        original = [a.avg_gravity for a in aggregator.aggregate_all(responses)]
        reordered = [a.avg_gravity for a in aggregator.aggregate_all(shuffled)]

        assert shuffled != responses
        assert reordered == original

    def test_out_of_range_theme_rejected(self, plain_questions):
        with pytest.raises(IndexError):
            ThemeAggregator(questions=plain_questions).aggregate(9, [])


class TestFilterResponses:
    """Company and sector selection."""

    def test_sector_filter(self, make_response, uniform_answers):
        a = make_response(uniform_answers(1), sector_id="a")
        b = make_response(uniform_answers(1), sector_id="b")
        other = make_response(uniform_answers(1), company_id="other", sector_id="a")

        assert filter_responses([a, b, other], "acme", "a") == [a]

    def test_aggregate_keeps_every_sector_of_company(self, make_response, uniform_answers):
        a = make_response(uniform_answers(1), sector_id="a")
        b = make_response(uniform_answers(1), sector_id=None)
        other = make_response(uniform_answers(1), company_id="other")

        assert filter_responses([a, b, other], "acme", "all") == [a, b]
        assert filter_responses([a, b, other], "acme", None) == [a, b]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
