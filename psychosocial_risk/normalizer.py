"""
Psychosocial Risk Engine - Score Normalizer.

Maps one raw answer (0-4) to a severity bucket (1-3).

    risk = 4 - answer  if the question is inverted
    risk = answer      otherwise

    risk >= 3 -> HIGH
    risk == 2 -> MEDIUM
    else      -> LOW
"""

from .questionnaire import MAX_ANSWER
from .types import Question, SeverityLevel


class ScoreNormalizer:
    """Pure answer -> severity mapping."""

    def normalize(self, value: int, is_inverted: bool) -> SeverityLevel:
        """
        Normalize a raw answer.

        Args:
            value: Raw answer in [0, 4]. Callers only pass answers
                   that exist in the response.
            is_inverted: True when a high answer means lower risk

        Returns:
            SeverityLevel bucket
        """
        risk_value = MAX_ANSWER - value if is_inverted else value

        if risk_value >= 3:
            return SeverityLevel.HIGH
        if risk_value == 2:
            return SeverityLevel.MEDIUM
        return SeverityLevel.LOW

    def normalize_for(self, question: Question, value: int) -> SeverityLevel:
        return self.normalize(value, question.is_inverted)


_default_normalizer = ScoreNormalizer()


def normalize_answer(value: int, is_inverted: bool) -> SeverityLevel:
    """Module-level shortcut for ScoreNormalizer().normalize()."""
    return _default_normalizer.normalize(value, is_inverted)
