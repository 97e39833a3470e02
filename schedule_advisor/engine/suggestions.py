"""Ranked scheduling suggestions: conflict fixes plus optimisation heuristics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from schedule_advisor.domain.entities import DAYS, Assignment, AssignmentStatus
from schedule_advisor.services.timeplan import to_minutes
from schedule_advisor.services.workload import classify_workloads

from .base import DetectionContext, group_by_worker_day
from .conflicts import Conflict, FieldChange, Severity
from .detectors import TimeOverlapDetector
from .resolutions import apply_changes, consecutive_slots, free_window_start, workload_resolutions

logger = logging.getLogger(__name__)


class SuggestionType(str, Enum):
    CONFLICT_RESOLUTION = "conflict_resolution"
    TRAVEL_GROUPING = "travel_grouping"
    WORKLOAD_BALANCE = "workload_balance"
    DAY_UTILIZATION = "day_utilization"


class ImpactTier(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"critical": 4, "high": 3, "medium": 2, "low": 1}[self.value]


@dataclass(frozen=True)
class Suggestion:
    id: str
    type: SuggestionType
    title: str
    description: str
    priority: int
    impact: ImpactTier
    changes: Tuple[FieldChange, ...]
    time_saved: float = 0.0
    cost_saved: float = 0.0
    severity: Optional[Severity] = None
    conflict_id: Optional[str] = None

    @property
    def total_savings(self) -> float:
        return self.time_saved + self.cost_saved


_TIER_BY_SEVERITY = {
    Severity.CRITICAL: ImpactTier.CRITICAL,
    Severity.HIGH: ImpactTier.HIGH,
    Severity.MEDIUM: ImpactTier.MEDIUM,
    Severity.LOW: ImpactTier.LOW,
}


def suggestion_rank_key(suggestion: Suggestion):
    """Sort key: conflict fixes first, then priority, impact tier, savings (all descending)."""
    return (
        0 if suggestion.type is SuggestionType.CONFLICT_RESOLUTION else 1,
        -suggestion.priority,
        -suggestion.impact.rank,
        -suggestion.total_savings,
    )


def conflict_suggestions(conflicts: Iterable[Conflict], ctx: DetectionContext) -> List[Suggestion]:
    priorities = ctx.cfg.priorities
    out: List[Suggestion] = []
    for conflict in conflicts:
        priority = priorities.for_conflict(conflict.severity.value, conflict.type.value)
        for resolution in conflict.resolutions:
            out.append(Suggestion(
                id=resolution.id,
                type=SuggestionType.CONFLICT_RESOLUTION,
                title=resolution.title,
                description=f"{conflict.title}: {resolution.description}",
                priority=priority,
                impact=_TIER_BY_SEVERITY[conflict.severity],
                changes=resolution.changes,
                time_saved=resolution.benefit.time_saved,
                cost_saved=resolution.benefit.cost_reduction,
                severity=conflict.severity,
                conflict_id=conflict.id,
            ))
    return out


def _interleaved_clients(ordered: Sequence[Assignment]) -> Dict[str, List[Assignment]]:
    """Clients whose jobs have another client's job between two of their own."""
    positions: Dict[str, List[int]] = {}
    for index, entry in enumerate(ordered):
        positions.setdefault(entry.client, []).append(index)
    out: Dict[str, List[Assignment]] = {}
    for client, idx in positions.items():
        if len(idx) < 2:
            continue
        span = ordered[idx[0]: idx[-1] + 1]
        if any(e.client != client for e in span):
            out[client] = [ordered[i] for i in idx]
    return out


def _adds_overlap(ctx: DetectionContext, changes: Sequence[FieldChange]) -> bool:
    """True if applying the new start times creates a time overlap not already present."""
    moved = apply_changes(ctx.snapshot.assignments, changes)
    detector = TimeOverlapDetector()
    before = {c.id for c in detector.detect(ctx)}
    after = detector.detect(
        DetectionContext(ctx.snapshot.with_assignments(moved), ctx.cfg, ctx.vacations, ctx.week_start)
    )
    return any(c.id not in before for c in after)


def travel_grouping(ctx: DetectionContext) -> List[Suggestion]:
    limit = ctx.cfg.limits.travel
    out: List[Suggestion] = []
    groups = group_by_worker_day(ctx.snapshot.assignments, timed_only=True)
    for (worker_name, day), group in groups.items():
        if len(group) < 3:
            continue
        ordered = sorted(
            (a for a in group if to_minutes(a.start_time) is not None),
            key=lambda a: to_minutes(a.start_time),
        )
        for client, entries in _interleaved_clients(ordered).items():
            others = [a for a in ordered if a.client != client]
            start = free_window_start(entries, others, to_minutes(entries[0].start_time))
            if start is None:
                continue
            changes = tuple(consecutive_slots(entries, start))
            if _adds_overlap(ctx, changes):
                continue
            extra = len(entries) - 1
            out.append(Suggestion(
                id=f"travel-{worker_name}-{day}-{client}",
                type=SuggestionType.TRAVEL_GROUPING,
                title="Optimize Travel Time",
                description=f"Group {client} jobs back-to-back for {worker_name} on {day}",
                priority=ctx.cfg.priorities.travel_grouping,
                impact=ImpactTier.MEDIUM,
                changes=changes,
                time_saved=15 * extra,
                cost_saved=10 * extra,
            ))
            if len(out) >= limit:
                return out
    return out


def workload_balance(ctx: DetectionContext) -> List[Suggestion]:
    balance = classify_workloads(ctx.snapshot, ctx.cfg.soft_imbalance_threshold)
    if balance is None or not balance.is_imbalanced:
        return []
    resolutions = workload_resolutions(
        balance.overloaded, balance.underloaded, ctx, limit=ctx.cfg.limits.workload
    )
    return [
        Suggestion(
            id=f"workload-{r.changes[0].assignment_id}-{r.changes[0].new_worker}",
            type=SuggestionType.WORKLOAD_BALANCE,
            title="Balance Workload",
            description=r.description,
            priority=ctx.cfg.priorities.workload_balance,
            impact=ImpactTier.MEDIUM,
            changes=r.changes,
            time_saved=r.benefit.time_saved,
            cost_saved=r.benefit.cost_reduction,
        )
        for r in resolutions
    ]


def day_utilization(ctx: DetectionContext) -> List[Suggestion]:
    cfg = ctx.cfg
    days = [d for d in DAYS if d in cfg.working_days]
    if not days:
        return []
    counts = {d: 0 for d in days}
    by_day: Dict[str, List[Assignment]] = {d: [] for d in days}
    for entry in ctx.snapshot.live():
        if entry.day in counts:
            counts[entry.day] += 1
            by_day[entry.day].append(entry)

    mean = sum(counts.values()) / len(days)
    if mean == 0:
        return []
    over = sorted(
        (d for d in days if counts[d] > mean * (1 + cfg.utilization_threshold)),
        key=lambda d: -counts[d],
    )
    under = sorted(
        (d for d in days if counts[d] < mean * (1 - cfg.utilization_threshold)),
        key=lambda d: counts[d],
    )

    out: List[Suggestion] = []
    used = set()
    for busy_day in over:
        for quiet_day in under:
            working_quiet = {w for a in by_day[quiet_day] for w in a.workers}
            for entry in by_day[busy_day]:
                if entry.id in used or entry.recurring or entry.status is not AssignmentStatus.SCHEDULED:
                    continue
                if working_quiet.intersection(entry.workers):
                    continue
                used.add(entry.id)
                out.append(Suggestion(
                    id=f"utilization-{entry.id}-{quiet_day}",
                    type=SuggestionType.DAY_UTILIZATION,
                    title="Smooth Daily Load",
                    description=(
                        f"Move {entry.site} from {busy_day} ({counts[busy_day]} jobs) "
                        f"to {quiet_day} ({counts[quiet_day]} jobs)"
                    ),
                    priority=cfg.priorities.day_utilization,
                    impact=ImpactTier.LOW,
                    changes=(FieldChange(entry.id, new_day=quiet_day),),
                ))
                break
            if len(out) >= cfg.limits.utilization:
                return out
    return out


OPTIMIZATIONS: Tuple[Callable[[DetectionContext], List[Suggestion]], ...] = (
    travel_grouping,
    workload_balance,
    day_utilization,
)


def _guarded(family: Callable[[DetectionContext], List[Suggestion]], ctx: DetectionContext) -> List[Suggestion]:
    try:
        return family(ctx)
    except Exception:
        logger.exception("Suggestion family %s failed; skipping", family.__name__)
        return []


def rank_suggestions(
    suggestions: Iterable[Suggestion],
    dismissed_ids: Iterable[str] = (),
    limit: Optional[int] = None,
) -> List[Suggestion]:
    """
    Drop dismissed suggestions, sort, drop duplicates and truncate.

    Duplicates (same id, or same set of changes) are removed after sorting so
    the best-ranked copy is the one kept.
    """
    dismissed = set(dismissed_ids or ())
    ordered = sorted(
        (s for s in suggestions if s.id not in dismissed), key=suggestion_rank_key
    )
    seen_ids = set()
    seen_changes = set()
    kept: List[Suggestion] = []
    for suggestion in ordered:
        if suggestion.id in seen_ids:
            continue
        signature = frozenset(suggestion.changes)
        if signature and signature in seen_changes:
            continue
        seen_ids.add(suggestion.id)
        seen_changes.add(signature)
        kept.append(suggestion)
    return kept if limit is None else kept[:limit]


def build_suggestions(
    conflicts: Sequence[Conflict],
    ctx: DetectionContext,
    dismissed_ids: Iterable[str] = (),
) -> List[Suggestion]:
    """
    Merge conflict-derived fixes with the optimisation families and rank them.

    Args:
        conflicts: Result of a full detection pass over ``ctx.snapshot``
        ctx: Detection context
        dismissed_ids: Suggestion ids the user already dismissed

    Returns:
        At most ``cfg.limits.max_suggestions`` suggestions, best first
    """
    candidates = _guarded(lambda c: conflict_suggestions(conflicts, c), ctx)
    for family in OPTIMIZATIONS:
        candidates.extend(_guarded(family, ctx))
    return rank_suggestions(candidates, dismissed_ids, ctx.cfg.limits.max_suggestions)
