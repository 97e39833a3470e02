"""ConflictEngine - runs every detector over a snapshot and answers queries about the result."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from functools import cached_property
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type

from schedule_advisor.config import AdvisorConfig
from schedule_advisor.domain.entities import Assignment, Site, Snapshot, Worker
from schedule_advisor.services.availability import VacationLookup

from .base import BaseDetector, DetectionContext
from .conflicts import SEVERITY_ORDER, Conflict, Severity
from .detectors import DEFAULT_DETECTORS
from .suggestions import Suggestion, build_suggestions
from .validation import ValidationResult, validate_change

logger = logging.getLogger(__name__)


@dataclass
class ConflictSummary:
    total: int = 0
    counts_by_severity: Dict[str, int] = field(
        default_factory=lambda: {s.value: 0 for s in SEVERITY_ORDER}
    )
    total_time_wasted: float = 0.0
    total_cost_increase: float = 0.0
    avg_efficiency_loss: float = 0.0


def summarize(conflicts: Sequence[Conflict]) -> ConflictSummary:
    """Totals and per-severity counts for a list of conflicts."""
    summary = ConflictSummary(total=len(conflicts))
    for conflict in conflicts:
        summary.counts_by_severity[conflict.severity.value] += 1
        summary.total_time_wasted += conflict.impact.time_wasted
        summary.total_cost_increase += conflict.impact.cost_increase
    if conflicts:
        summary.avg_efficiency_loss = (
            sum(c.impact.efficiency_loss for c in conflicts) / len(conflicts)
        )
    return summary


class ConflictEngine:
    """
    Detection, validation and suggestions over one immutable snapshot.

    Build a new engine whenever assignments, workers or sites change; the
    detection pass is computed once per instance.
    """

    def __init__(
        self,
        assignments: Iterable[Assignment],
        workers: Iterable[Worker] = (),
        sites: Iterable[Site] = (),
        cfg: AdvisorConfig | None = None,
        vacations: VacationLookup | None = None,
        week_start: date | None = None,
        detectors: Sequence[Type[BaseDetector]] | None = None,
    ):
        self.ctx = DetectionContext(
            snapshot=Snapshot(assignments, workers, sites),
            cfg=cfg or AdvisorConfig(),
            vacations=vacations,
            week_start=week_start,
        )
        self.detectors = list(detectors or DEFAULT_DETECTORS)

    @property
    def snapshot(self) -> Snapshot:
        return self.ctx.snapshot

    @cached_property
    def conflicts(self) -> List[Conflict]:
        detected: List[Conflict] = []
        for detector_cls in self.detectors:
            detected.extend(detector_cls().run(self.ctx))
        logger.info(
            "Detected %d conflict(s) across %d assignment(s)",
            len(detected), len(self.snapshot),
        )
        return detected

    def summary(self) -> ConflictSummary:
        return summarize(self.conflicts)

    def validate_change(
        self,
        proposed: Mapping[str, Any],
        existing_id: Optional[str] = None,
    ) -> ValidationResult:
        return validate_change(self.ctx, proposed, existing_id)

    def conflicts_for_assignment(self, assignment_id: str) -> List[Conflict]:
        return [c for c in self.conflicts if assignment_id in c.affected_ids]

    def conflicts_for_worker(self, worker_name: str) -> List[Conflict]:
        return [c for c in self.conflicts if c.involves_worker(worker_name)]

    def conflicts_by_severity(self, severity: Severity | str) -> List[Conflict]:
        try:
            severity = Severity(severity)
        except ValueError:
            return []
        return [c for c in self.conflicts if c.severity is severity]

    def suggestions(self, dismissed_ids: Iterable[str] = ()) -> List[Suggestion]:
        try:
            return build_suggestions(self.conflicts, self.ctx, dismissed_ids)
        except Exception:
            logger.exception("Suggestion generation failed")
            return []

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def has_critical_conflicts(self) -> bool:
        return any(c.severity is Severity.CRITICAL for c in self.conflicts)

    @property
    def has_high_priority_conflicts(self) -> bool:
        return any(c.severity.blocks for c in self.conflicts)


def detect_conflicts(
    assignments: Iterable[Assignment],
    workers: Iterable[Worker] = (),
    sites: Iterable[Site] = (),
    cfg: AdvisorConfig | None = None,
) -> List[Conflict]:
    """Run all five detectors and concatenate their results."""
    try:
        return ConflictEngine(assignments, workers, sites, cfg).conflicts
    except Exception:
        logger.exception("Conflict detection failed")
        return []


def generate_suggestions(
    assignments: Iterable[Assignment],
    workers: Iterable[Worker] = (),
    sites: Iterable[Site] = (),
    dismissed_ids: Iterable[str] = (),
    cfg: AdvisorConfig | None = None,
) -> List[Suggestion]:
    """Ranked suggestions (at most ``cfg.limits.max_suggestions``) for a snapshot."""
    try:
        return ConflictEngine(assignments, workers, sites, cfg).suggestions(dismissed_ids)
    except Exception:
        logger.exception("Suggestion generation failed")
        return []
