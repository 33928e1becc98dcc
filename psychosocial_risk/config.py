"""
Psychosocial Risk Engine - Configuration.

============================================================
PURPOSE
============================================================
Threshold values and constants for the NR-01 risk matrix.

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable configurations
- Every threshold documented next to its value
- Defaults reproduce the NR-01 matrix used in the signed report

============================================================
MATRIX
============================================================
Gravity (1-3) x Probability (1-4) = score 1..12

    score <= 2.5  -> Baixo
    score <= 5.5  -> Médio
    score <= 8.5  -> Alto
    otherwise     -> Crítico

============================================================
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


# ============================================================
# PROBABILITY CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class ProbabilityConfig:
    """
    Configuration for probability resolution.

    ============================================================
    DERIVATION FROM GRAVITY
    ============================================================
    gravity <= 2.0        -> 2
    2.0 < gravity <= 3.0  -> 3
    gravity > 3.0         -> 4

    ============================================================
    """

    # Sector id that denotes the all-sectors view
    aggregate_sector_id: str = "all"

    # Probability used for the all-sectors view
    aggregate_probability: int = 2

    # Gravity thresholds for the derived value
    medium_gravity_threshold: float = 2.0   # <= this -> low_probability
    high_gravity_threshold: float = 3.0     # <= this -> medium_probability

    low_probability: int = 2
    medium_probability: int = 3
    high_probability: int = 4

    # Probability counted for a theme a sector never assessed (overview)
    unassessed_probability: int = 2

    min_probability: int = 1
    max_probability: int = 4

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aggregate_sector_id": self.aggregate_sector_id,
            "aggregate_probability": self.aggregate_probability,
            "medium_gravity_threshold": self.medium_gravity_threshold,
            "high_gravity_threshold": self.high_gravity_threshold,
            "low_probability": self.low_probability,
            "medium_probability": self.medium_probability,
            "high_probability": self.high_probability,
            "unassessed_probability": self.unassessed_probability,
            "min_probability": self.min_probability,
            "max_probability": self.max_probability,
        }


# ============================================================
# RISK MATRIX CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class RiskMatrixConfig:
    """Clamping ranges and score bands for the classifier."""

    min_gravity: float = 1.0
    max_gravity: float = 3.0
    min_probability: float = 1.0
    max_probability: float = 4.0

    # Upper bound (inclusive) of each band
    low_max_score: float = 2.5
    medium_max_score: float = 5.5
    high_max_score: float = 8.5

    # Textual level from a plain average (exclusive upper bounds)
    average_low_below: float = 1.5
    average_medium_below: float = 2.5
    average_high_below: float = 3.5

    # Gravity reported when a theme has no contributing answers
    empty_gravity: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min_gravity": self.min_gravity,
            "max_gravity": self.max_gravity,
            "min_probability": self.min_probability,
            "max_probability": self.max_probability,
            "low_max_score": self.low_max_score,
            "medium_max_score": self.medium_max_score,
            "high_max_score": self.high_max_score,
            "average_low_below": self.average_low_below,
            "average_medium_below": self.average_medium_below,
            "average_high_below": self.average_high_below,
            "empty_gravity": self.empty_gravity,
        }


# ============================================================
# REPORT CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class ReportConfig:
    """Report assembly defaults."""

    author_fallback: str = "RT"
    join_separator: str = "; "

    # Texts printed when the reviewer left a field empty
    default_source: str = "Exposição rotineira ao ambiente de trabalho."
    default_health_effects: str = "Ansiedade, fadiga, estresse ocupacional."
    default_control_measures: str = "Monitoramento preventivo e manutenção de clima saudável."

    def to_dict(self) -> Dict[str, Any]:
        return {
            "author_fallback": self.author_fallback,
            "join_separator": self.join_separator,
            "default_source": self.default_source,
            "default_health_effects": self.default_health_effects,
            "default_control_measures": self.default_control_measures,
        }


# ============================================================
# MASTER CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class EngineConfig:
    """Master configuration for the engine."""

    probability: ProbabilityConfig = field(default_factory=ProbabilityConfig)
    matrix: RiskMatrixConfig = field(default_factory=RiskMatrixConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    engine_version: str = "1.0.0"

    @property
    def aggregate_sector_id(self) -> str:
        return self.probability.aggregate_sector_id

    def is_aggregate(self, sector_id: str) -> bool:
        return sector_id == self.probability.aggregate_sector_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "probability": self.probability.to_dict(),
            "matrix": self.matrix.to_dict(),
            "report": self.report.to_dict(),
            "engine_version": self.engine_version,
        }


# ============================================================
# FACTORIES
# ============================================================


def get_default_config() -> EngineConfig:
    """Return the default NR-01 configuration."""
    return EngineConfig()


def load_config_from_env() -> EngineConfig:
    """
    Build a configuration from environment variables.

    Reads `.env` first. Unset variables keep their defaults.

    Variables:
        PSYCHOSOCIAL_AGGREGATE_SECTOR
        PSYCHOSOCIAL_AGGREGATE_PROBABILITY
        PSYCHOSOCIAL_REPORT_AUTHOR_FALLBACK
    """
    load_dotenv()

    probability_defaults = ProbabilityConfig()
    report_defaults = ReportConfig()

    aggregate_sector = os.getenv(
        "PSYCHOSOCIAL_AGGREGATE_SECTOR", probability_defaults.aggregate_sector_id
    )
    aggregate_probability = int(os.getenv(
        "PSYCHOSOCIAL_AGGREGATE_PROBABILITY", str(probability_defaults.aggregate_probability)
    ))
    if not probability_defaults.min_probability <= aggregate_probability <= probability_defaults.max_probability:
        raise ValueError(
            f"PSYCHOSOCIAL_AGGREGATE_PROBABILITY must be between "
            f"{probability_defaults.min_probability} and {probability_defaults.max_probability}, "
            f"got {aggregate_probability}"
        )

    author_fallback = os.getenv(
        "PSYCHOSOCIAL_REPORT_AUTHOR_FALLBACK", report_defaults.author_fallback
    )

    config = EngineConfig(
        probability=ProbabilityConfig(
            aggregate_sector_id=aggregate_sector,
            aggregate_probability=aggregate_probability,
        ),
        report=ReportConfig(author_fallback=author_fallback),
    )
    logger.debug(f"Loaded engine configuration: aggregate_sector={aggregate_sector}")
    return config
