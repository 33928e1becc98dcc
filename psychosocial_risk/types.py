"""
Psychosocial Risk Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for the NR-01 psychosocial risk matrix engine.

This module defines the enums, dataclasses and exceptions
shared by every component of the engine. Other modules only
exchange these types.

============================================================
DESIGN PRINCIPLES
============================================================
- All types are immutable (frozen dataclasses)
- Enums for discrete ordinal values
- Clear separation between input records and derived output

============================================================
SCALES
============================================================
Severity (gravity) per answer: LOW (1), MEDIUM (2), HIGH (3)
Probability per theme:          1 .. 4
Risk level (gravity x prob):    Baixo, Médio, Alto, Crítico

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional, Tuple


# ============================================================
# ENUMS
# ============================================================


class SeverityLevel(IntEnum):
    """
    Severity bucket for one normalized answer.

    Values are the numbers averaged into a theme's gravity.
    """

    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def label(self) -> str:
        return {1: "Baixa", 2: "Média", 3: "Alta"}[self.value]


class RiskLevel(str, Enum):
    """
    NR-01 risk matrix classification.

    Values are the labels printed on the compliance report.
    """

    BAIXO = "Baixo"
    MEDIO = "Médio"
    ALTO = "Alto"
    CRITICO = "Crítico"

    @property
    def severity_order(self) -> int:
        """Numeric ordering for severity comparison."""
        return {
            "Baixo": 0,
            "Médio": 1,
            "Alto": 2,
            "Crítico": 3,
        }[self.value]


class ProbabilitySource(str, Enum):
    """Provenance of a persisted probability value."""

    HUMAN = "human"      # Entered by the technical reviewer (RT)
    AUTO = "auto"        # Derived from the theme's average gravity
    DEFAULT = "default"  # Aggregate view constant, never persisted
    SECTOR_MEAN = "sector_mean"  # Company overview mean of sector values, never persisted


class ReconciliationStatus(str, Enum):
    """Outcome of one reconciliation pass."""

    WRITTEN = "written"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


# ============================================================
# INPUT RECORDS
# ============================================================


@dataclass(frozen=True)
class Question:
    """One questionnaire item."""

    question_id: int
    text: str
    is_inverted: bool = False


@dataclass(frozen=True)
class SurveyResponse:
    """
    One completed questionnaire.

    `answers` maps question id to a raw answer in [0, 4].
    Responses are never modified after submission.
    """

    response_id: str
    company_id: str
    sector_id: Optional[str]
    answers: Mapping[int, int]
    job_function: str = ""
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def answer_for(self, question_id: int) -> Optional[int]:
        return self.answers.get(question_id)


@dataclass(frozen=True)
class ProbabilityAssessment:
    """A persisted probability value for one (company, sector, theme)."""

    value: int
    source: ProbabilitySource = ProbabilitySource.AUTO

    @property
    def is_human(self) -> bool:
        return self.source == ProbabilitySource.HUMAN


@dataclass(frozen=True)
class ThemeAnnotation:
    """Free-text fields written by the reviewer for one theme."""

    source: str = ""
    health_effects: str = ""
    control_measures: str = ""


# ============================================================
# OUTPUT CONTRACTS
# ============================================================


@dataclass(frozen=True)
class ThemeAggregate:
    """Average gravity for one theme over a filtered response set."""

    theme_index: int
    avg_gravity: float
    sample_count: int

    @property
    def has_data(self) -> bool:
        return self.sample_count > 0


@dataclass(frozen=True)
class ProbabilityResolution:
    """Resolved probability and where it came from."""

    value: int
    source: ProbabilitySource


@dataclass(frozen=True)
class ThemeMetrics:
    """
    Complete matrix entry for one theme.

    This is the contract consumed by dashboards, the print
    report and the report assembler.
    """

    theme_index: int
    label: str
    avg_gravity: float
    probability: float
    risk_level: RiskLevel
    sample_count: int = 0
    probability_source: ProbabilitySource = ProbabilitySource.AUTO

    def to_dict(self) -> Dict[str, Any]:
        return {
            "theme_index": self.theme_index,
            "label": self.label,
            "avg_gravity": self.avg_gravity,
            "probability": self.probability,
            "risk_level": self.risk_level.value,
            "sample_count": self.sample_count,
            "probability_source": self.probability_source.value,
        }


@dataclass(frozen=True)
class CompanyOverview:
    """Company-wide dashboard view across all sectors."""

    company_id: str
    response_count: int
    themes: Tuple[ThemeMetrics, ...]

    @property
    def highest_risk(self) -> Optional[RiskLevel]:
        if not self.themes:
            return None
        return max((t.risk_level for t in self.themes), key=lambda r: r.severity_order)


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of one check-then-write pass."""

    company_id: str
    sector_id: str
    status: ReconciliationStatus
    changed_themes: Tuple[int, ...] = ()
    error: Optional[str] = None

    @property
    def wrote(self) -> bool:
        return self.status == ReconciliationStatus.WRITTEN


@dataclass(frozen=True)
class DiagnosticReport:
    """
    Signed technical report snapshot for one (company, sector).

    ============================================================
    BOUNDARY CONTRACT
    ============================================================
    The same object is handed to the report store and to the
    print consumer. `to_dict()` is the persisted shape.

    ============================================================
    """

    company_id: str
    sector_id: str
    timestamp: datetime
    author: str
    health_effects: str
    control_measures: str
    sources: Mapping[int, str] = field(default_factory=dict)
    themes: Tuple[ThemeMetrics, ...] = ()
    is_main: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "company_id": self.company_id,
            "sector_id": self.sector_id,
            "timestamp": self.timestamp.isoformat(),
            "author": self.author,
            "health_effects": self.health_effects,
            "control_measures": self.control_measures,
            "sources": {str(k): v for k, v in self.sources.items()},
            "themes": [t.to_dict() for t in self.themes],
            "is_main": self.is_main,
        }


@dataclass(frozen=True)
class InventoryRow:
    """One printable risk inventory row (one per theme)."""

    theme_index: int
    label: str
    avg_gravity: float
    probability: float
    risk_level: RiskLevel
    source: str
    health_effects: str
    control_measures: str


# ============================================================
# ERROR TYPES
# ============================================================


class PsychosocialRiskError(Exception):
    """Base exception for engine errors."""

    def __init__(
        self,
        message: str,
        company_id: Optional[str] = None,
        sector_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.company_id = company_id
        self.sector_id = sector_id


class InvalidSectorSelectionError(PsychosocialRiskError):
    """
    Raised when a sector-bound operation targets the aggregate view.

    The message is meant to be shown to the reviewer as is.
    """
    pass


class StalePersistedStateError(PsychosocialRiskError):
    """
    A probability write failed at the storage boundary.

    The engine keeps its last known persisted map untouched so
    the next pass retries the same diff.
    """
    pass


class ReportPersistenceError(PsychosocialRiskError):
    """Raised when an explicit report save fails at the store."""
    pass


class QuestionTableError(PsychosocialRiskError):
    """Raised when the question table does not match the theme layout."""
    pass


ProbabilityMap = Dict[int, ProbabilityAssessment]
