"""
Psychosocial Risk Engine - Diagnostic Report Assembly.

============================================================
PURPOSE
============================================================
Merges computed theme metrics with the reviewer's free-text
annotations into one immutable DiagnosticReport.

============================================================
ASSEMBLY RULES
============================================================
- timestamp: now (UTC)
- author: reviewer name, fallback "RT"
- health_effects / control_measures: per-theme texts joined
  with "; " in theme order, empty texts skipped
- sources: full per-theme source map
- is_main: True
- aggregate view ("all") is refused: annotations are
  written for one concrete sector

============================================================
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Mapping, Optional, Sequence

from .config import EngineConfig
from .types import (
    DiagnosticReport,
    InvalidSectorSelectionError,
    InventoryRow,
    ThemeAnnotation,
    ThemeMetrics,
)


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def join_theme_texts(texts: Mapping[int, str], separator: str = "; ") -> str:
    """Join per-theme texts in theme order, skipping blank ones."""
    return separator.join(
        texts[idx].strip()
        for idx in sorted(texts)
        if texts[idx] and texts[idx].strip()
    )


class DiagnosticReportAssembler:
    """Builds DiagnosticReport snapshots."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.config = config or EngineConfig()
        self._clock = clock

    def assemble(
        self,
        company_id: str,
        sector_id: str,
        metrics: Sequence[ThemeMetrics],
        annotations: Mapping[int, ThemeAnnotation],
        reviewer_name: Optional[str] = None,
    ) -> DiagnosticReport:
        """
        Assemble a report for one concrete sector.

        Raises:
            InvalidSectorSelectionError: sector_id is the aggregate view
        """
        if self.config.is_aggregate(sector_id):
            raise InvalidSectorSelectionError(
                "Selecione um setor específico para salvar o laudo.",
                company_id=company_id,
                sector_id=sector_id,
            )

        report_config = self.config.report
        author = (reviewer_name or "").strip() or report_config.author_fallback

        health_effects = join_theme_texts(
            {idx: a.health_effects for idx, a in annotations.items()},
            report_config.join_separator,
        )
        control_measures = join_theme_texts(
            {idx: a.control_measures for idx, a in annotations.items()},
            report_config.join_separator,
        )
        sources = {idx: annotations[idx].source for idx in sorted(annotations)}

        report = DiagnosticReport(
            company_id=company_id,
            sector_id=sector_id,
            timestamp=self._clock(),
            author=author,
            health_effects=health_effects,
            control_measures=control_measures,
            sources=sources,
            themes=tuple(metrics),
            is_main=True,
        )
        logger.debug(f"Assembled report for {company_id}/{sector_id} by {author}")
        return report


def build_inventory_rows(
    metrics: Sequence[ThemeMetrics],
    annotations: Mapping[int, ThemeAnnotation],
    config: Optional[EngineConfig] = None,
) -> List[InventoryRow]:
    """
    Printable risk inventory, one row per theme.

    Blank annotation fields are replaced by the standard texts.
    """
    report_config = (config or EngineConfig()).report
    rows = []

    for entry in metrics:
        annotation = annotations.get(entry.theme_index, ThemeAnnotation())
        rows.append(InventoryRow(
            theme_index=entry.theme_index,
            label=entry.label,
            avg_gravity=entry.avg_gravity,
            probability=entry.probability,
            risk_level=entry.risk_level,
            source=annotation.source.strip() or report_config.default_source,
            health_effects=annotation.health_effects.strip() or report_config.default_health_effects,
            control_measures=annotation.control_measures.strip() or report_config.default_control_measures,
        ))

    return rows
