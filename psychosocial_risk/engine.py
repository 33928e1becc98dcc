"""
Psychosocial Risk Engine - Main Orchestrator.

============================================================
PURPOSE
============================================================
The PsychosocialRiskEngine is the entry point used by the
application. It orchestrates:

1. Response filtering (company, optional sector)
2. Theme aggregation (average gravity per theme)
3. Probability resolution (aggregate / human / derived)
4. Risk matrix classification
5. Probability reconciliation against the store
6. Diagnostic report assembly

============================================================
DESIGN PRINCIPLES
============================================================
- Every pass reads a fresh snapshot from the collaborators
- Human overrides are re-read on every pass, never cached
- No blocking, no locks: snapshot reads over append-only data
- Reconciliation writes only when the map actually changed

============================================================
USAGE
============================================================
    from psychosocial_risk import (
        PsychosocialRiskEngine,
        InMemoryResponseSource,
        InMemoryProbabilityStore,
        InMemoryReportStore,
    )

    engine = PsychosocialRiskEngine(
        responses=InMemoryResponseSource(responses),
        probabilities=InMemoryProbabilityStore(),
        reports=InMemoryReportStore(),
    )

    metrics = engine.refresh("company-1", "sector-a")
    print(format_metrics_summary(metrics))

============================================================
"""

import logging
from datetime import datetime
from statistics import mean
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .aggregator import ThemeAggregator, filter_responses
from .classifier import RiskMatrixClassifier
from .config import EngineConfig
from .normalizer import ScoreNormalizer
from .questionnaire import QUESTIONS, theme_label, validate_question_table
from .reconciliation import ReconciliationWriter
from .report import DiagnosticReportAssembler, _utcnow
from .resolver import ProbabilityResolver
from .schemas import ProbabilityOverrideIn
from .stores import (
    InMemoryProbabilityStore,
    InMemoryReportStore,
    InMemoryResponseSource,
    ProbabilityStore,
    ReportStore,
    ResponseSource,
)
from .types import (
    CompanyOverview,
    DiagnosticReport,
    InvalidSectorSelectionError,
    ProbabilityAssessment,
    ProbabilityMap,
    ProbabilitySource,
    Question,
    ReconciliationResult,
    ReconciliationStatus,
    ReportPersistenceError,
    SurveyResponse,
    ThemeAggregate,
    ThemeAnnotation,
    ThemeMetrics,
)


logger = logging.getLogger(__name__)


class PsychosocialRiskEngine:
    """
    Main orchestrator for the NR-01 risk matrix.

    ============================================================
    STATE
    ============================================================
    The only state held between calls is the reconciliation
    writer's last known persisted map per (company, sector).
    Everything else is recomputed from the collaborators.

    ============================================================
    """

    def __init__(
        self,
        responses: ResponseSource,
        probabilities: ProbabilityStore,
        reports: Optional[ReportStore] = None,
        config: Optional[EngineConfig] = None,
        questions: Sequence[Question] = QUESTIONS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the engine.

        Args:
            responses: Source of submitted questionnaires
            probabilities: Persisted probability maps
            reports: Report history store (required to save reports)
            config: Engine configuration, defaults if not provided
            questions: Static question table (9 x 10 questions)
            clock: Timestamp source for reports

        Raises:
            QuestionTableError: Question table does not fit the layout
        """
        self.config = config or EngineConfig()
        self._questions = validate_question_table(questions)

        self._responses = responses
        self._probabilities = probabilities
        self._reports = reports

        self._aggregator = ThemeAggregator(
            questions=self._questions,
            normalizer=ScoreNormalizer(),
            config=self.config.matrix,
        )
        self._resolver = ProbabilityResolver(self.config.probability)
        self._classifier = RiskMatrixClassifier(self.config.matrix)
        self._writer = ReconciliationWriter(probabilities)
        self._assembler = DiagnosticReportAssembler(self.config, clock=clock)

    # --------------------------------------------------------
    # METRICS
    # --------------------------------------------------------

    def compute_theme_metrics(self, company_id: str, sector_filter: str) -> List[ThemeMetrics]:
        """
        Risk matrix entries for all nine themes.

        Args:
            company_id: Company id
            sector_filter: Concrete sector id or the aggregate id ("all")

        Returns:
            ThemeMetrics list in theme order
        """
        metrics, _, _ = self._evaluate(company_id, sector_filter)
        return metrics

    def refresh(self, company_id: str, sector_filter: str) -> List[ThemeMetrics]:
        """
        Full recomputation pass followed by one reconciliation check.

        Call on every change of company, sector, responses or
        persisted probabilities. Safe to call arbitrarily often.
        """
        metrics, aggregates, persisted = self._evaluate(company_id, sector_filter)
        if not self.config.is_aggregate(sector_filter):
            computed = self._computed_map(aggregates, persisted)
            self._writer.reconcile(company_id, sector_filter, computed, persisted)
        return metrics

    def company_overview(self, company_id: str) -> CompanyOverview:
        """
        Company-wide dashboard view.

        Gravity covers every response of the company. Probability
        per theme is the mean of the values persisted for each
        sector (themes a sector never assessed count as the
        unassessed default).
        """
        responses = self._load_responses(company_id, None)
        aggregates = self._aggregator.aggregate_all(responses)
        sector_maps = self._probabilities.read_company(company_id)
        unassessed = self.config.probability.unassessed_probability

        themes = []
        for aggregate in aggregates:
            if sector_maps:
                probability = mean(
                    entry.value if entry is not None else unassessed
                    for entry in (m.get(aggregate.theme_index) for m in sector_maps.values())
                )
                source = ProbabilitySource.SECTOR_MEAN
            else:
                probability = unassessed
                source = ProbabilitySource.DEFAULT

            themes.append(ThemeMetrics(
                theme_index=aggregate.theme_index,
                label=theme_label(aggregate.theme_index),
                avg_gravity=aggregate.avg_gravity,
                probability=probability,
                risk_level=self._classifier.classify(aggregate.avg_gravity, probability),
                sample_count=aggregate.sample_count,
                probability_source=source,
            ))

        return CompanyOverview(
            company_id=company_id,
            response_count=len(responses),
            themes=tuple(themes),
        )

    # --------------------------------------------------------
    # RECONCILIATION
    # --------------------------------------------------------

    def reconcile_probabilities(self, company_id: str, sector_id: str) -> ReconciliationResult:
        """
        Check-then-write of the derived probability map.

        Idempotent: a second call with no data change performs
        no write. Never raises on a failed write; the result
        carries status FAILED and the next call retries.
        """
        if self.config.is_aggregate(sector_id):
            logger.debug(f"Skipping reconciliation for aggregate view of {company_id}")
            return ReconciliationResult(
                company_id=company_id,
                sector_id=sector_id,
                status=ReconciliationStatus.SKIPPED,
            )

        _, aggregates, persisted = self._evaluate(company_id, sector_id)
        computed = self._computed_map(aggregates, persisted)
        return self._writer.reconcile(company_id, sector_id, computed, persisted)

    # --------------------------------------------------------
    # HUMAN OVERRIDES
    # --------------------------------------------------------

    def set_probability_override(
        self,
        company_id: str,
        sector_id: str,
        theme_index: int,
        value: int,
    ) -> ProbabilityMap:
        """
        Store a reviewer-entered probability for one theme.

        Raises:
            InvalidSectorSelectionError: sector_id is the aggregate view
            pydantic.ValidationError: theme or value out of range
        """
        if self.config.is_aggregate(sector_id):
            raise InvalidSectorSelectionError(
                "Selecione um setor específico para definir a probabilidade.",
                company_id=company_id,
                sector_id=sector_id,
            )

        override = ProbabilityOverrideIn(
            company_id=company_id,
            sector_id=sector_id,
            theme_index=theme_index,
            value=value,
        )

        updated = self._probabilities.read_map(company_id, sector_id)
        updated[override.theme_index] = override.to_domain()
        self._probabilities.write_map(company_id, sector_id, updated)
        self._writer.remember(company_id, sector_id, updated)

        logger.info(
            f"Probability override set: {company_id}/{sector_id} "
            f"theme={override.theme_index} value={override.value}"
        )
        return updated

    def clear_probability_override(
        self,
        company_id: str,
        sector_id: str,
        theme_index: int,
    ) -> ProbabilityMap:
        """Drop a reviewer value; the next pass derives it again."""
        if self.config.is_aggregate(sector_id):
            raise InvalidSectorSelectionError(
                "Selecione um setor específico para definir a probabilidade.",
                company_id=company_id,
                sector_id=sector_id,
            )

        current = self._probabilities.read_map(company_id, sector_id)
        entry = current.get(theme_index)
        if entry is None or not entry.is_human:
            return current

        del current[theme_index]
        self._probabilities.write_map(company_id, sector_id, current)
        self._writer.remember(company_id, sector_id, current)

        logger.info(f"Probability override cleared: {company_id}/{sector_id} theme={theme_index}")
        return current

    # --------------------------------------------------------
    # REPORTS
    # --------------------------------------------------------

    def assemble_report(
        self,
        company_id: str,
        sector_id: str,
        annotations: Mapping[int, ThemeAnnotation],
        reviewer_name: Optional[str] = None,
    ) -> DiagnosticReport:
        """
        Build the diagnostic report and save it as current version.

        Raises:
            InvalidSectorSelectionError: sector_id is the aggregate view
            ReportPersistenceError: The report store rejected the save
        """
        if self.config.is_aggregate(sector_id):
            raise InvalidSectorSelectionError(
                "Selecione um setor específico para salvar o laudo.",
                company_id=company_id,
                sector_id=sector_id,
            )

        metrics = self.compute_theme_metrics(company_id, sector_id)
        report = self._assembler.assemble(
            company_id=company_id,
            sector_id=sector_id,
            metrics=metrics,
            annotations=annotations,
            reviewer_name=reviewer_name,
        )

        if self._reports is not None:
            try:
                self._reports.append(report)
            except Exception as e:
                logger.error(f"Failed to save report for {company_id}/{sector_id}: {e}")
                raise ReportPersistenceError(
                    f"Report save failed: {e}",
                    company_id=company_id,
                    sector_id=sector_id,
                ) from e
            logger.info(f"Report saved for {company_id}/{sector_id} by {report.author}")

        return report

    def current_report(self, company_id: str, sector_id: str) -> Optional[DiagnosticReport]:
        if self._reports is None:
            return None
        return self._reports.current(company_id, sector_id)

    def report_history(self, company_id: str, sector_id: str) -> List[DiagnosticReport]:
        if self._reports is None:
            return []
        return self._reports.history(company_id, sector_id)

    # --------------------------------------------------------
    # INTERNALS
    # --------------------------------------------------------

    def _load_responses(self, company_id: str, sector_filter: Optional[str]) -> List[SurveyResponse]:
        all_sectors = sector_filter is None or self.config.is_aggregate(sector_filter)
        responses = self._responses.list_responses(
            company_id, None if all_sectors else sector_filter
        )
        return filter_responses(
            responses,
            company_id,
            sector_filter,
            aggregate_sector_id=self.config.aggregate_sector_id,
        )

    def _evaluate(
        self,
        company_id: str,
        sector_filter: str,
    ) -> Tuple[List[ThemeMetrics], List[ThemeAggregate], ProbabilityMap]:
        responses = self._load_responses(company_id, sector_filter)
        aggregates = self._aggregator.aggregate_all(responses)

        if self.config.is_aggregate(sector_filter):
            persisted: ProbabilityMap = {}
        else:
            persisted = self._probabilities.read_map(company_id, sector_filter)

        metrics = []
        for aggregate in aggregates:
            resolution = self._resolver.resolve(
                sector_id=sector_filter,
                theme_index=aggregate.theme_index,
                avg_gravity=aggregate.avg_gravity,
                persisted=persisted,
            )
            metrics.append(ThemeMetrics(
                theme_index=aggregate.theme_index,
                label=theme_label(aggregate.theme_index),
                avg_gravity=aggregate.avg_gravity,
                probability=resolution.value,
                risk_level=self._classifier.classify(aggregate.avg_gravity, resolution.value),
                sample_count=aggregate.sample_count,
                probability_source=resolution.source,
            ))

        return metrics, aggregates, persisted

    def _computed_map(
        self,
        aggregates: Iterable[ThemeAggregate],
        persisted: Mapping[int, ProbabilityAssessment],
    ) -> ProbabilityMap:
        """Human entries kept as read, every other theme derived."""
        computed: ProbabilityMap = {}
        for aggregate in aggregates:
            entry = persisted.get(aggregate.theme_index)
            if entry is not None and entry.is_human:
                computed[aggregate.theme_index] = entry
            else:
                computed[aggregate.theme_index] = ProbabilityAssessment(
                    value=self._resolver.derive_from_gravity(aggregate.avg_gravity),
                    source=ProbabilitySource.AUTO,
                )
        return computed


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


def score_themes(
    responses: Iterable[SurveyResponse],
    company_id: str,
    sector_filter: str,
    assessments: Optional[Mapping[int, ProbabilityAssessment]] = None,
    config: Optional[EngineConfig] = None,
) -> List[ThemeMetrics]:
    """
    Compute theme metrics in one call over plain in-memory data.

    For repeated passes prefer a persistent PsychosocialRiskEngine,
    which also reconciles probabilities.
    """
    store = InMemoryProbabilityStore()
    engine_config = config or EngineConfig()
    if assessments and not engine_config.is_aggregate(sector_filter):
        store.write_map(company_id, sector_filter, assessments)

    engine = PsychosocialRiskEngine(
        responses=InMemoryResponseSource(responses),
        probabilities=store,
        reports=InMemoryReportStore(),
        config=engine_config,
    )
    return engine.compute_theme_metrics(company_id, sector_filter)


def probability_map_from_values(
    values: Mapping[int, int],
    source: ProbabilitySource = ProbabilitySource.HUMAN,
) -> Dict[int, ProbabilityAssessment]:
    """Wrap plain {theme: value} maps, e.g. legacy stored scores."""
    return {idx: ProbabilityAssessment(value=v, source=source) for idx, v in values.items()}


def format_metrics_summary(metrics: Sequence[ThemeMetrics]) -> str:
    """
    Format a human-readable risk matrix summary.

    Useful for logging and console output.
    """
    lines = [
        "=" * 60,
        "MATRIZ DE RISCO NR-01",
        "=" * 60,
    ]
    for entry in metrics:
        lines.append(
            f"  {entry.theme_index + 1}. {entry.label:<28} "
            f"G={entry.avg_gravity:.2f} P={entry.probability:g} "
            f"-> {entry.risk_level.value}"
        )
    lines.append("=" * 60)
    return "\n".join(lines)


__all__ = [
    "PsychosocialRiskEngine",
    "score_themes",
    "probability_map_from_values",
    "format_metrics_summary",
]
