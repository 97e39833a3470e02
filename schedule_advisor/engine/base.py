"""Base detector interface that all conflict detectors implement."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from schedule_advisor.config import AdvisorConfig
from schedule_advisor.domain.entities import Assignment, Snapshot
from schedule_advisor.services.availability import VacationLookup

from .conflicts import Conflict, ConflictType

logger = logging.getLogger(__name__)


@dataclass
class DetectionContext:
    """Everything a detector may read during one pass."""

    snapshot: Snapshot
    cfg: AdvisorConfig = field(default_factory=AdvisorConfig)
    vacations: Optional[VacationLookup] = None
    week_start: Optional[date] = None


def group_by_worker_day(
    assignments: List[Assignment],
    timed_only: bool = False,
) -> Dict[Tuple[str, str], List[Assignment]]:
    """
    Group assignments by (worker, day); a crew of N lands in N groups.

    Each group keeps the first occurrence of an assignment id only.
    """
    groups: Dict[Tuple[str, str], List[Assignment]] = {}
    seen: Dict[Tuple[str, str], set] = {}
    for assignment in assignments:
        if assignment.is_cancelled:
            continue
        if timed_only and not assignment.start_time:
            continue
        for name in assignment.workers:
            key = (name, assignment.day)
            ids = seen.setdefault(key, set())
            if assignment.id in ids:
                continue
            ids.add(assignment.id)
            groups.setdefault(key, []).append(assignment)
    return groups


class BaseDetector(ABC):
    """
    Abstract base class for conflict detectors.

    Subclasses implement ``detect`` for one conflict category. Callers use
    ``run``, which isolates faults so one broken detector cannot suppress the
    results of the others.
    """

    conflict_type: ConflictType | None = None

    @abstractmethod
    def detect(self, ctx: DetectionContext) -> List[Conflict]:
        """
        Scan the snapshot for one conflict category.

        Args:
            ctx: Detection context (snapshot, config, optional vacation lookup)

        Returns:
            Conflicts found, each with its candidate resolutions
        """
        pass

    def run(self, ctx: DetectionContext) -> List[Conflict]:
        try:
            conflicts = self.detect(ctx)
        except Exception:
            logger.exception("%s detector failed; returning no conflicts", self.get_name())
            return []
        logger.debug("%s detector found %d conflict(s)", self.get_name(), len(conflicts))
        return conflicts

    def get_name(self) -> str:
        return self.conflict_type.value if self.conflict_type else self.__class__.__name__
