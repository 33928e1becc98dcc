"""
Psychosocial Risk Engine - Package.

============================================================
PURPOSE
============================================================
Computes the NR-01 psychosocial risk matrix of a company from
its employees' questionnaire answers, keeps the per-sector
probability map in sync with the live data, and assembles the
signed diagnostic report.

============================================================
NINE THEMES
============================================================
Each theme groups 10 consecutive questions (90 in total).
Answers 0-4 normalize to a gravity of 1 (low), 2 (medium)
or 3 (high), inverted for positively worded questions.

============================================================
MATRIX
============================================================
score = gravity (1-3) x probability (1-4)

- BAIXO   (score <= 2.5)
- MÉDIO   (score <= 5.5)
- ALTO    (score <= 8.5)
- CRÍTICO (score >  8.5)

Probability precedence:
1. Aggregate view ("all"): fixed default
2. Reviewer override for the theme
3. Derived from gravity

============================================================
USAGE
============================================================
    from psychosocial_risk import (
        PsychosocialRiskEngine,
        InMemoryResponseSource,
        InMemoryProbabilityStore,
        InMemoryReportStore,
        format_metrics_summary,
    )

    engine = PsychosocialRiskEngine(
        responses=InMemoryResponseSource(responses),
        probabilities=InMemoryProbabilityStore(),
        reports=InMemoryReportStore(),
    )

    metrics = engine.refresh("company-1", "sector-a")
    print(format_metrics_summary(metrics))

    report = engine.assemble_report(
        "company-1", "sector-a", annotations, reviewer_name="Ana",
    )

============================================================
"""

# Types
from .types import (
    SeverityLevel,
    RiskLevel,
    ProbabilitySource,
    ReconciliationStatus,
    Question,
    SurveyResponse,
    ProbabilityAssessment,
    ThemeAnnotation,
    ThemeAggregate,
    ProbabilityResolution,
    ThemeMetrics,
    CompanyOverview,
    ReconciliationResult,
    DiagnosticReport,
    InventoryRow,
    PsychosocialRiskError,
    InvalidSectorSelectionError,
    StalePersistedStateError,
    ReportPersistenceError,
    QuestionTableError,
)

# Configuration
from .config import (
    ProbabilityConfig,
    RiskMatrixConfig,
    ReportConfig,
    EngineConfig,
    get_default_config,
    load_config_from_env,
)

# Questionnaire
from .questionnaire import (
    THEME_COUNT,
    QUESTIONS_PER_THEME,
    THEME_NAMES,
    ANSWER_OPTIONS,
    QUESTIONS,
    questions_for_theme,
    theme_of,
    theme_label,
    validate_question_table,
)

# Components
from .normalizer import ScoreNormalizer, normalize_answer
from .aggregator import ThemeAggregator, filter_responses
from .resolver import ProbabilityResolver
from .classifier import RiskMatrixClassifier, classify_risk, level_from_average
from .reconciliation import ReconciliationWriter, diff_probability_maps
from .report import DiagnosticReportAssembler, build_inventory_rows, join_theme_texts

# Storage
from .stores import (
    ResponseSource,
    ProbabilityStore,
    ReportStore,
    InMemoryResponseSource,
    InMemoryProbabilityStore,
    InMemoryReportStore,
)

# Engine
from .engine import (
    PsychosocialRiskEngine,
    score_themes,
    probability_map_from_values,
    format_metrics_summary,
)

# Boundary schemas
from .schemas import (
    SurveyResponseIn,
    ProbabilityOverrideIn,
    ProbabilityEntryIn,
    ThemeAnnotationIn,
    ReportAnnotationsIn,
)

# Persistence
from .repository import (
    SqlAlchemyResponseSource,
    SqlAlchemyProbabilityStore,
    SqlAlchemyReportStore,
)


__all__ = [
    # Types
    "SeverityLevel",
    "RiskLevel",
    "ProbabilitySource",
    "ReconciliationStatus",
    "Question",
    "SurveyResponse",
    "ProbabilityAssessment",
    "ThemeAnnotation",
    "ThemeAggregate",
    "ProbabilityResolution",
    "ThemeMetrics",
    "CompanyOverview",
    "ReconciliationResult",
    "DiagnosticReport",
    "InventoryRow",
    "PsychosocialRiskError",
    "InvalidSectorSelectionError",
    "StalePersistedStateError",
    "ReportPersistenceError",
    "QuestionTableError",

    # Configuration
    "ProbabilityConfig",
    "RiskMatrixConfig",
    "ReportConfig",
    "EngineConfig",
    "get_default_config",
    "load_config_from_env",

    # Questionnaire
    "THEME_COUNT",
    "QUESTIONS_PER_THEME",
    "THEME_NAMES",
    "ANSWER_OPTIONS",
    "QUESTIONS",
    "questions_for_theme",
    "theme_of",
    "theme_label",
    "validate_question_table",

    # Components
    "ScoreNormalizer",
    "normalize_answer",
    "ThemeAggregator",
    "filter_responses",
    "ProbabilityResolver",
    "RiskMatrixClassifier",
    "classify_risk",
    "level_from_average",
    "ReconciliationWriter",
    "diff_probability_maps",
    "DiagnosticReportAssembler",
    "build_inventory_rows",
    "join_theme_texts",

    # Storage
    "ResponseSource",
    "ProbabilityStore",
    "ReportStore",
    "InMemoryResponseSource",
    "InMemoryProbabilityStore",
    "InMemoryReportStore",

    # Engine
    "PsychosocialRiskEngine",
    "score_themes",
    "probability_map_from_values",
    "format_metrics_summary",

    # Boundary schemas
    "SurveyResponseIn",
    "ProbabilityOverrideIn",
    "ProbabilityEntryIn",
    "ThemeAnnotationIn",
    "ReportAnnotationsIn",

    # Persistence
    "SqlAlchemyResponseSource",
    "SqlAlchemyProbabilityStore",
    "SqlAlchemyReportStore",
]


__version__ = "1.0.0"
