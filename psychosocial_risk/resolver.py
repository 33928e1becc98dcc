"""
Psychosocial Risk Engine - Probability Resolver.

============================================================
PRECEDENCE
============================================================
1. Aggregate view (sector == "all")  -> constant 2
2. Human override for the triple      -> used verbatim
3. Otherwise derived from gravity:
       gravity <= 2        -> 2
       2 < gravity <= 3    -> 3
       gravity > 3         -> 4

The resolver holds no state. Overrides are passed in on every
call, so a human value entered after an earlier pass always
wins on the next pass.

============================================================
"""

from typing import Mapping, Optional

from .config import ProbabilityConfig
from .types import (
    ProbabilityAssessment,
    ProbabilityResolution,
    ProbabilitySource,
)


class ProbabilityResolver:
    """Resolve the probability used for one (company, sector, theme)."""

    def __init__(self, config: Optional[ProbabilityConfig] = None):
        self.config = config or ProbabilityConfig()

    def derive_from_gravity(self, avg_gravity: float) -> int:
        """Default probability for a theme without a human value."""
        if avg_gravity <= self.config.medium_gravity_threshold:
            return self.config.low_probability
        elif avg_gravity <= self.config.high_gravity_threshold:
            return self.config.medium_probability
        return self.config.high_probability

    def resolve(
        self,
        sector_id: str,
        theme_index: int,
        avg_gravity: float,
        persisted: Optional[Mapping[int, ProbabilityAssessment]] = None,
    ) -> ProbabilityResolution:
        """
        Resolve the probability for a theme.

        Args:
            sector_id: Concrete sector id or the aggregate id
            theme_index: 0-based theme index
            avg_gravity: Theme's average gravity for the same filter
            persisted: Current persisted map for (company, sector)

        Returns:
            ProbabilityResolution with value and source
        """
        if sector_id == self.config.aggregate_sector_id:
            return ProbabilityResolution(
                value=self.config.aggregate_probability,
                source=ProbabilitySource.DEFAULT,
            )

        entry = (persisted or {}).get(theme_index)
        if entry is not None and entry.is_human:
            return ProbabilityResolution(value=entry.value, source=ProbabilitySource.HUMAN)

        return ProbabilityResolution(
            value=self.derive_from_gravity(avg_gravity),
            source=ProbabilitySource.AUTO,
        )
