"""
Psychosocial Risk Engine - Risk Matrix Classifier.

============================================================
NR-01 MATRIX
============================================================
Gravity (1-3) x Probability (1-4), score range 1..12.

Both inputs are clamped before the product so out-of-range
values never fail the classification.

    1 - 2.5   Baixo
    2.5 - 5.5 Médio
    5.5 - 8.5 Alto
    8.5 - 12  Crítico

============================================================
"""

from typing import Optional

from .config import RiskMatrixConfig
from .types import RiskLevel


class RiskMatrixClassifier:
    """Gravity x probability -> RiskLevel."""

    def __init__(self, config: Optional[RiskMatrixConfig] = None):
        self.config = config or RiskMatrixConfig()

    def clamp_gravity(self, gravity: float) -> float:
        return max(self.config.min_gravity, min(self.config.max_gravity, gravity))

    def clamp_probability(self, probability: float) -> float:
        return max(self.config.min_probability, min(self.config.max_probability, probability))

    def score(self, gravity: float, probability: float) -> float:
        """Matrix score after clamping both factors."""
        return self.clamp_gravity(gravity) * self.clamp_probability(probability)

    def classify(self, gravity: float, probability: float) -> RiskLevel:
        """
        Classify a (gravity, probability) pair.

        Args:
            gravity: Average gravity, expected in [1, 3]
            probability: Probability, expected in [1, 4]

        Returns:
            RiskLevel for the clamped product
        """
        score = self.score(gravity, probability)

        if score <= self.config.low_max_score:
            return RiskLevel.BAIXO
        elif score <= self.config.medium_max_score:
            return RiskLevel.MEDIO
        elif score <= self.config.high_max_score:
            return RiskLevel.ALTO
        return RiskLevel.CRITICO

    def level_from_average(self, average: float) -> RiskLevel:
        """
        Textual level for a plain average, without probability.

        Used by dashboards that show a single averaged value.
        """
        if average < self.config.average_low_below:
            return RiskLevel.BAIXO
        elif average < self.config.average_medium_below:
            return RiskLevel.MEDIO
        elif average < self.config.average_high_below:
            return RiskLevel.ALTO
        return RiskLevel.CRITICO


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


_default_classifier = RiskMatrixClassifier()


def classify_risk(gravity: float, probability: float) -> RiskLevel:
    """Classify with the default NR-01 matrix."""
    return _default_classifier.classify(gravity, probability)


def level_from_average(average: float) -> RiskLevel:
    return _default_classifier.level_from_average(average)
