"""
Psychosocial Risk Engine - Storage Collaborators.

============================================================
PURPOSE
============================================================
Interfaces of the external collaborators the engine reads
from and writes to, plus in-memory implementations.

The SQLAlchemy implementations live in `repository.py`.

============================================================
WRITE CONTRACTS
============================================================
- ProbabilityStore.write_map: whole-map replace for one
  (company, sector). Writing the same map twice is a no-op.
- ReportStore.append: adds a report as the current version
  and demotes the previous current version.

============================================================
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .types import (
    DiagnosticReport,
    ProbabilityAssessment,
    ProbabilityMap,
    SurveyResponse,
)


logger = logging.getLogger(__name__)


# ============================================================
# INTERFACES
# ============================================================


class ResponseSource(ABC):
    """Read access to submitted questionnaires."""

    @abstractmethod
    def list_responses(
        self,
        company_id: str,
        sector_id: Optional[str] = None,
    ) -> List[SurveyResponse]:
        """Responses of a company; of one sector when `sector_id` is set."""
        pass


class ProbabilityStore(ABC):
    """Persisted probability maps keyed by (company, sector)."""

    @abstractmethod
    def read_map(self, company_id: str, sector_id: str) -> ProbabilityMap:
        """Return a copy of the persisted map (empty if none)."""
        pass

    @abstractmethod
    def write_map(
        self,
        company_id: str,
        sector_id: str,
        assessments: Mapping[int, ProbabilityAssessment],
    ) -> None:
        """Replace the whole map for (company, sector)."""
        pass

    @abstractmethod
    def read_company(self, company_id: str) -> Dict[str, ProbabilityMap]:
        """All persisted maps of a company, keyed by sector id."""
        pass


class ReportStore(ABC):
    """Append-only diagnostic report history."""

    @abstractmethod
    def append(self, report: DiagnosticReport) -> None:
        pass

    @abstractmethod
    def history(self, company_id: str, sector_id: str) -> List[DiagnosticReport]:
        """Reports for (company, sector), oldest first."""
        pass

    def current(self, company_id: str, sector_id: str) -> Optional[DiagnosticReport]:
        """Flagged main version, else the most recent one."""
        reports = self.history(company_id, sector_id)
        for report in reversed(reports):
            if report.is_main:
                return report
        return reports[-1] if reports else None


# ============================================================
# IN-MEMORY IMPLEMENTATIONS
# ============================================================


class InMemoryResponseSource(ResponseSource):
    """Response list held in process memory."""

    def __init__(self, responses: Optional[Iterable[SurveyResponse]] = None):
        self._responses: List[SurveyResponse] = list(responses or [])

    def add(self, response: SurveyResponse) -> None:
        self._responses.append(response)

    def list_responses(
        self,
        company_id: str,
        sector_id: Optional[str] = None,
    ) -> List[SurveyResponse]:
        return [
            r for r in self._responses
            if r.company_id == company_id
            and (sector_id is None or r.sector_id == sector_id)
        ]


class InMemoryProbabilityStore(ProbabilityStore):
    """
    Probability maps held in process memory.

    `write_count` counts writes that changed stored state.
    """

    def __init__(self) -> None:
        self._maps: Dict[Tuple[str, str], ProbabilityMap] = {}
        self.write_count = 0

    def read_map(self, company_id: str, sector_id: str) -> ProbabilityMap:
        return dict(self._maps.get((company_id, sector_id), {}))

    def write_map(
        self,
        company_id: str,
        sector_id: str,
        assessments: Mapping[int, ProbabilityAssessment],
    ) -> None:
        key = (company_id, sector_id)
        new_map = dict(assessments)
        if self._maps.get(key) == new_map:
            logger.debug(f"Probability map unchanged for {company_id}/{sector_id}")
            return
        self._maps[key] = new_map
        self.write_count += 1

    def read_company(self, company_id: str) -> Dict[str, ProbabilityMap]:
        return {
            sector_id: dict(assessments)
            for (cid, sector_id), assessments in self._maps.items()
            if cid == company_id
        }


class InMemoryReportStore(ReportStore):
    """Report history held in process memory."""

    def __init__(self) -> None:
        self._reports: Dict[Tuple[str, str], List[DiagnosticReport]] = {}

    def append(self, report: DiagnosticReport) -> None:
        key = (report.company_id, report.sector_id)
        previous = [replace(r, is_main=False) for r in self._reports.get(key, [])]
        self._reports[key] = previous + [report]

    def history(self, company_id: str, sector_id: str) -> List[DiagnosticReport]:
        return list(self._reports.get((company_id, sector_id), []))
