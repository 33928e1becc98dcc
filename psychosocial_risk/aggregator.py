"""
Psychosocial Risk Engine - Theme Aggregator.

============================================================
PURPOSE
============================================================
Averages normalized severities per theme over the responses
selected by the active filter (company, optional sector).

============================================================
AGGREGATION RULE
============================================================
For each question of the theme and each filtered response
that answered it:
    sum   += severity(answer, question.is_inverted)
    count += 1

average = sum / count          (never rounded)
average = empty_gravity (1.0)  when count == 0

Integer severities make the sum exact, so the result does not
depend on response order.

============================================================
"""

import logging
from typing import Iterable, List, Optional, Sequence

from .config import RiskMatrixConfig
from .normalizer import ScoreNormalizer
from .questionnaire import QUESTIONS, THEME_COUNT, questions_for_theme
from .types import Question, SurveyResponse, ThemeAggregate


logger = logging.getLogger(__name__)


def filter_responses(
    responses: Iterable[SurveyResponse],
    company_id: str,
    sector_filter: Optional[str] = None,
    aggregate_sector_id: str = "all",
) -> List[SurveyResponse]:
    """
    Select the responses of a company, optionally of one sector.

    `sector_filter` of None or the aggregate id keeps every sector.
    """
    all_sectors = sector_filter is None or sector_filter == aggregate_sector_id
    return [
        r for r in responses
        if r.company_id == company_id
        and (all_sectors or r.sector_id == sector_filter)
    ]


class ThemeAggregator:
    """Per-theme average gravity over a filtered response set."""

    def __init__(
        self,
        questions: Sequence[Question] = QUESTIONS,
        normalizer: Optional[ScoreNormalizer] = None,
        config: Optional[RiskMatrixConfig] = None,
    ):
        self._questions = questions
        self._normalizer = normalizer or ScoreNormalizer()
        self.config = config or RiskMatrixConfig()

    def aggregate(
        self,
        theme_index: int,
        responses: Sequence[SurveyResponse],
    ) -> ThemeAggregate:
        """
        Average gravity of one theme.

        Args:
            theme_index: 0-based theme index
            responses: Responses already filtered by company/sector

        Returns:
            ThemeAggregate (avg_gravity = empty default when no data)
        """
        total = 0
        count = 0

        for question in questions_for_theme(theme_index, self._questions):
            for response in responses:
                value = response.answer_for(question.question_id)
                if value is None:
                    continue
                total += self._normalizer.normalize_for(question, value)
                count += 1

        if count == 0:
            return ThemeAggregate(
                theme_index=theme_index,
                avg_gravity=self.config.empty_gravity,
                sample_count=0,
            )

        return ThemeAggregate(
            theme_index=theme_index,
            avg_gravity=total / count,
            sample_count=count,
        )

    def aggregate_all(self, responses: Sequence[SurveyResponse]) -> List[ThemeAggregate]:
        """Aggregate every theme, in theme order."""
        aggregates = [self.aggregate(idx, responses) for idx in range(THEME_COUNT)]
        empty = [a.theme_index for a in aggregates if not a.has_data]
        if empty:
            logger.debug(f"Themes without contributing answers: {empty}")
        return aggregates
