"""
Psychosocial Risk Engine - Probability Reconciliation.

============================================================
PURPOSE
============================================================
Writes freshly computed probability maps back to the store
only when they differ from the last known persisted map.

Gravity is recomputed from live responses on every pass and
the derived probability follows it. Writing on every pass
would make each write trigger a new pass. Check-then-write
keeps every pass idempotent against the persisted state.

============================================================
RULES
============================================================
- Comparison is by value over the whole per-theme map
- A write always sends the full map (store contract)
- The store is read again right before the write; its HUMAN
  entries replace the computed ones in the outgoing map
- A failed write leaves the last known map untouched, so the
  next pass finds the same diff and retries it

============================================================
"""

import logging
from typing import Dict, Mapping, Optional, Tuple

from .stores import ProbabilityStore
from .types import (
    ProbabilityAssessment,
    ProbabilityMap,
    ReconciliationResult,
    ReconciliationStatus,
    StalePersistedStateError,
)


logger = logging.getLogger(__name__)


def diff_probability_maps(
    computed: Mapping[int, ProbabilityAssessment],
    persisted: Mapping[int, ProbabilityAssessment],
) -> Tuple[int, ...]:
    """Theme indices whose entry differs between the two maps."""
    themes = set(computed) | set(persisted)
    return tuple(sorted(t for t in themes if computed.get(t) != persisted.get(t)))


class ReconciliationWriter:
    """
    Check-then-write gate in front of a ProbabilityStore.

    Keeps the last map known to be persisted per
    (company, sector).
    """

    def __init__(self, store: ProbabilityStore):
        self._store = store
        self._last_persisted: Dict[Tuple[str, str], ProbabilityMap] = {}

    def last_known(self, company_id: str, sector_id: str) -> Optional[ProbabilityMap]:
        known = self._last_persisted.get((company_id, sector_id))
        return dict(known) if known is not None else None

    def remember(
        self,
        company_id: str,
        sector_id: str,
        assessments: Mapping[int, ProbabilityAssessment],
    ) -> None:
        """Record a map as persisted (e.g. after a direct override write)."""
        self._last_persisted[(company_id, sector_id)] = dict(assessments)

    def forget(self, company_id: str, sector_id: str) -> None:
        self._last_persisted.pop((company_id, sector_id), None)

    def reconcile(
        self,
        company_id: str,
        sector_id: str,
        computed: Mapping[int, ProbabilityAssessment],
        persisted: Optional[Mapping[int, ProbabilityAssessment]] = None,
    ) -> ReconciliationResult:
        """
        Persist `computed` if it differs from the persisted map.

        Args:
            company_id: Company id
            sector_id: Concrete sector id
            computed: Full per-theme map from this pass
            persisted: Snapshot read from the store in this pass.
                       When omitted the last known map is used,
                       and the store is read if there is none.

        Returns:
            ReconciliationResult (WRITTEN, UNCHANGED or FAILED)
        """
        key = (company_id, sector_id)

        if persisted is not None:
            self._last_persisted[key] = dict(persisted)
        elif key not in self._last_persisted:
            self._last_persisted[key] = self._store.read_map(company_id, sector_id)

        baseline = self._last_persisted[key]
        changed = diff_probability_maps(computed, baseline)

        if not changed:
            logger.debug(f"Probabilities unchanged for {company_id}/{sector_id}")
            return ReconciliationResult(
                company_id=company_id,
                sector_id=sector_id,
                status=ReconciliationStatus.UNCHANGED,
            )

        try:
            written = self._write(company_id, sector_id, computed)
        except StalePersistedStateError as e:
            logger.warning(
                f"Probability write failed for {company_id}/{sector_id}, "
                f"will retry on next pass: {e}"
            )
            return ReconciliationResult(
                company_id=company_id,
                sector_id=sector_id,
                status=ReconciliationStatus.FAILED,
                changed_themes=changed,
                error=str(e),
            )

        self._last_persisted[key] = written
        logger.info(
            f"Persisted probabilities for {company_id}/{sector_id}: "
            f"changed themes {list(changed)}"
        )
        return ReconciliationResult(
            company_id=company_id,
            sector_id=sector_id,
            status=ReconciliationStatus.WRITTEN,
            changed_themes=changed,
        )

    def _write(
        self,
        company_id: str,
        sector_id: str,
        computed: Mapping[int, ProbabilityAssessment],
    ) -> ProbabilityMap:
        """Write `computed`, keeping HUMAN entries stored since the pass read."""
        try:
            outgoing = dict(computed)
            for theme_index, entry in self._store.read_map(company_id, sector_id).items():
                if entry.is_human and outgoing.get(theme_index) != entry:
                    logger.info(
                        f"Keeping reviewer probability for {company_id}/{sector_id} "
                        f"theme={theme_index}"
                    )
                    outgoing[theme_index] = entry
            self._store.write_map(company_id, sector_id, outgoing)
            return outgoing
        except Exception as e:
            raise StalePersistedStateError(
                f"Store rejected probability map: {e}",
                company_id=company_id,
                sector_id=sector_id,
            ) from e
