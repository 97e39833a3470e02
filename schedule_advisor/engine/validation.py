"""Pre-commit validation gate for a single proposed assignment change."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from schedule_advisor.domain.entities import Assignment, AssignmentStatus
from schedule_advisor.services.availability import on_vacation

from .base import DetectionContext
from .conflicts import Conflict, ConflictType
from .detectors import GATE_DETECTORS

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("day", "site", "client")

# detectors whose conflicts compare two or more assignments
PAIRWISE_TYPES = {ConflictType.DOUBLE_BOOKING, ConflictType.TIME_OVERLAP}


@dataclass
class ValidationResult:
    has_conflicts: bool = False
    conflicts: List[Conflict] = field(default_factory=list)
    can_proceed: bool = True
    warnings: List[str] = field(default_factory=list)

    @property
    def blocking(self) -> List[Conflict]:
        return [c for c in self.conflicts if c.severity.blocks]


def _permissive(*warnings: str) -> ValidationResult:
    return ValidationResult(warnings=list(warnings))


def _is_relevant(conflict: Conflict, candidate_id: str, is_edit: bool) -> bool:
    ids = conflict.affected_ids
    if candidate_id not in ids:
        return False
    if is_edit and conflict.type in PAIRWISE_TYPES:
        return any(i != candidate_id for i in ids)
    return True


def _build_candidate(
    ctx: DetectionContext,
    proposed: Mapping[str, Any],
    existing_id: Optional[str],
):
    snapshot = ctx.snapshot
    if existing_id:
        original = snapshot.get(existing_id)
        if original is None:
            return None, None
        candidate = original.merged({k: v for k, v in proposed.items() if k != "id"})
        assignments = [candidate if a.id == existing_id else a for a in snapshot.assignments]
    else:
        fields = dict(proposed)
        fields["id"] = f"pending-{uuid.uuid4().hex[:12]}"
        fields.setdefault("status", AssignmentStatus.SCHEDULED)
        candidate = Assignment.from_fields(fields)
        assignments = list(snapshot.assignments) + [candidate]
    return candidate, snapshot.with_assignments(assignments)


def validate_change(
    ctx: DetectionContext,
    proposed: Mapping[str, Any],
    existing_id: Optional[str] = None,
) -> ValidationResult:
    """
    Check a proposed create/edit before it is committed.

    Args:
        ctx: Detection context holding the current snapshot
        proposed: Partial assignment fields (day, client, site, workers, hours, ...)
        existing_id: Id of the assignment being edited; None for a new one

    Returns:
        ValidationResult. ``can_proceed`` is False only for critical/high
        conflicts that involve the proposed assignment. Internal failures
        return a permissive result rather than raising.
    """
    try:
        if any(not proposed.get(name) for name in REQUIRED_FIELDS):
            logger.debug("Proposed change is missing required fields; allowing")
            return _permissive()

        candidate, hypothetical = _build_candidate(ctx, proposed, existing_id)
        if candidate is None:
            logger.debug("Assignment %s not found for validation; allowing", existing_id)
            return _permissive()

        scoped_ctx = DetectionContext(hypothetical, ctx.cfg, ctx.vacations, ctx.week_start)
        is_edit = existing_id is not None
        conflicts: List[Conflict] = []
        for detector_cls in GATE_DETECTORS:
            found = detector_cls().run(scoped_ctx)
            conflicts.extend(c for c in found if _is_relevant(c, candidate.id, is_edit))

        blocking = [c for c in conflicts if c.severity.blocks]
        advisory = [c for c in conflicts if not c.severity.blocks]
        warnings = [f"{c.title}: {c.description}" for c in advisory]
        if advisory:
            warnings.insert(0, f"This change will create {len(advisory)} minor scheduling issue(s)")

        for name in candidate.workers:
            record = on_vacation(name, candidate.day, ctx.vacations, ctx.week_start)
            if record is not None:
                warnings.append(
                    f"{name} is on approved leave {record.start_date} to {record.end_date}"
                )

        logger.debug(
            "Validated change to %s: %d conflict(s), %d blocking",
            candidate.id, len(conflicts), len(blocking),
        )
        return ValidationResult(
            has_conflicts=bool(conflicts),
            conflicts=conflicts,
            can_proceed=not blocking,
            warnings=warnings,
        )
    except Exception:
        logger.exception("Validation of proposed change failed")
        return _permissive("Unable to validate changes")
