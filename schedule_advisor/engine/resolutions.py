"""Candidate resolutions for each conflict category."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from schedule_advisor.domain.entities import Assignment, Site, Worker, can_access
from schedule_advisor.services.availability import available_workers
from schedule_advisor.services.timeplan import MINUTES_PER_DAY, add_hours_to_time, format_minutes, to_minutes
from schedule_advisor.services.workload import WorkerLoad

from .base import DetectionContext
from .conflicts import Benefit, FieldChange, Resolution, ResolutionType


def double_booking_resolutions(
    worker_name: str,
    group: Sequence[Assignment],
    ctx: DetectionContext,
) -> List[Resolution]:
    """
    Fixes for one worker booked on several assignments the same day.

    The first assignment stays; each later one may be handed to a free
    worker, merged into an earlier job at the same site, or have the
    double-booked worker split off a shared crew.
    """
    cfg = ctx.cfg
    resolutions: List[Resolution] = []
    kept = group[0]
    for entry in group[1:]:
        for worker in available_workers(
            entry, ctx.snapshot, ctx.vacations, ctx.week_start
        )[: cfg.reassign_alternatives]:
            resolutions.append(Resolution(
                id=f"reassign-{entry.id}-{worker.name}",
                type=ResolutionType.REASSIGN,
                title=f"Reassign to {worker.name}",
                description=f"Move {entry.site} shift from {worker_name} to {worker.name}",
                changes=(FieldChange(entry.id, new_worker=worker.name, replaces=worker_name),),
                benefit=Benefit(30, 50, 20),
            ))

        if entry.site_key == kept.site_key:
            resolutions.append(Resolution(
                id=f"merge-{entry.id}-{kept.id}",
                type=ResolutionType.MERGE,
                title="Merge Shifts",
                description=f"Merge the second {entry.site} shift into the first",
                changes=(FieldChange(kept.id, new_hours=kept.hours + entry.hours),
                         FieldChange(entry.id, merge_into=kept.id)),
                benefit=Benefit(30, 50, 20),
            ))

        if len(entry.workers) > 1:
            others = ", ".join(w for w in entry.workers if w != worker_name)
            resolutions.append(Resolution(
                id=f"split-{entry.id}-{worker_name}",
                type=ResolutionType.SPLIT,
                title=f"Split {worker_name} off the crew",
                description=f"Leave {entry.site} to {others} and free {worker_name}",
                changes=(FieldChange(entry.id, remove_worker=worker_name),),
                benefit=Benefit(30, 50, 15),
            ))
    return resolutions[: cfg.max_resolutions]


def time_overlap_resolutions(
    current: Assignment,
    following: Assignment,
    ctx: DetectionContext,
) -> List[Resolution]:
    """Move the later assignment to start when the earlier one ends."""
    if current.start_time and current.hours:
        new_time = add_hours_to_time(current.start_time, current.hours)
    else:
        new_time = ctx.cfg.fallback_reschedule_time
    return [Resolution(
        id=f"reschedule-{following.id}",
        type=ResolutionType.RESCHEDULE,
        title="Reschedule Time",
        description=f"Move {following.site} to {new_time}",
        changes=(FieldChange(following.id, new_time=new_time),),
        benefit=Benefit(60, 100, 25),
    )]


def security_resolutions(
    entry: Assignment,
    site: Site,
    unauthorized: Sequence[str],
    ctx: DetectionContext,
) -> List[Resolution]:
    """Active, cleared workers not already on the job, in roster order."""
    cleared = [
        w for w in ctx.snapshot.active_workers()
        if can_access(w, site) and w.name not in entry.workers
    ]
    replaced = unauthorized[0]
    return [
        Resolution(
            id=f"security-reassign-{entry.id}-{worker.name}",
            type=ResolutionType.REASSIGN,
            title=f"Reassign to {worker.name}",
            description=(
                f"Replace {replaced} with {worker.name} "
                f"({worker.clearance.value.upper()} security)"
            ),
            changes=(FieldChange(entry.id, new_worker=worker.name, replaces=replaced),),
            benefit=Benefit(0, 0, 30),
        )
        for worker in cleared[: min(ctx.cfg.security_alternatives, ctx.cfg.max_resolutions)]
    ]


def movable_assignment(
    source: WorkerLoad,
    target: WorkerLoad,
    ctx: DetectionContext,
) -> Assignment | None:
    """First assignment of ``source`` that ``target`` could take without clashing."""
    target_worker = ctx.snapshot.worker(target.name)
    if target_worker is None:
        return None
    busy_days = target.days()
    for entry in source.assignments:
        if entry.day in busy_days or target.name in entry.workers:
            continue
        if not can_access(target_worker, ctx.snapshot.site_for(entry)):
            continue
        return entry
    return None


def workload_resolutions(
    overloaded: Sequence[WorkerLoad],
    underloaded: Sequence[WorkerLoad],
    ctx: DetectionContext,
    limit: int | None = None,
) -> List[Resolution]:
    """Pair overloaded workers with underloaded ones, one move per pair."""
    limit = ctx.cfg.max_resolutions if limit is None else limit
    resolutions: List[Resolution] = []
    for heavy in overloaded:
        for light in underloaded:
            entry = movable_assignment(heavy, light, ctx)
            if entry is None:
                continue
            resolutions.append(Resolution(
                id=f"rebalance-{entry.id}-{light.name}",
                type=ResolutionType.REASSIGN,
                title="Rebalance Workload",
                description=(
                    f"Move {entry.site} ({entry.hours:g}h, {entry.day}) "
                    f"from {heavy.name} to {light.name}"
                ),
                changes=(FieldChange(entry.id, new_worker=light.name, replaces=heavy.name),),
                benefit=Benefit(0, 25, 15),
            ))
            if len(resolutions) >= limit:
                return resolutions
    return resolutions


def consecutive_slots(entries: Sequence[Assignment], start_minutes: int) -> List[FieldChange]:
    """Back-to-back start times beginning at ``start_minutes``."""
    changes = []
    cursor = start_minutes
    for entry in entries:
        changes.append(FieldChange(entry.id, new_time=format_minutes(cursor)))
        cursor += int(round(entry.hours * 60))
    return changes


def _duration(entry: Assignment) -> int:
    return int(round(entry.hours * 60))


def free_window_start(
    entries: Sequence[Assignment],
    others: Sequence[Assignment],
    earliest: int,
) -> Optional[int]:
    """
    Earliest start, at or after ``earliest``, where ``entries`` fit back-to-back
    without running into any timed job in ``others``.

    Returns None when no such window exists before midnight.
    """
    length = sum(_duration(e) for e in entries)
    busy = sorted(
        (to_minutes(o.start_time), to_minutes(o.start_time) + max(_duration(o), 1))
        for o in others
        if to_minutes(o.start_time) is not None
    )
    candidates = sorted({earliest} | {end for _, end in busy if end > earliest})
    for start in candidates:
        if start + length > MINUTES_PER_DAY:
            break
        if all(start + length <= b_start or start >= b_end for b_start, b_end in busy):
            return start
    return None


def routing_resolutions(
    by_client: Dict[str, List[Assignment]],
    ctx: DetectionContext,
) -> List[Resolution]:
    """
    Schedule each client's jobs consecutively, from the grouping hour or the
    first free window after it that clears the other clients' timed jobs.
    """
    resolutions: List[Resolution] = []
    earliest = ctx.cfg.grouping_start_hour * 60
    for client, entries in by_client.items():
        if len(entries) < 2:
            continue
        others = [e for c, group in by_client.items() if c != client for e in group]
        start = free_window_start(entries, others, earliest)
        if start is None:
            continue
        extra = len(entries) - 1
        resolutions.append(Resolution(
            id=f"group-{client}-{entries[0].day}-{'-'.join(e.id for e in entries)}",
            type=ResolutionType.RESCHEDULE,
            title=f"Group {client} Jobs",
            description=f"Schedule all {client} jobs consecutively",
            changes=tuple(consecutive_slots(entries, start)),
            benefit=Benefit(extra * 20, extra * 15, 10),
        ))
    return resolutions[: ctx.cfg.max_resolutions]


def _apply_change(entry: Assignment, change: FieldChange) -> Assignment:
    workers = list(entry.workers)
    if change.new_worker:
        if change.replaces in workers:
            workers[workers.index(change.replaces)] = change.new_worker
        elif change.new_worker not in workers:
            workers.append(change.new_worker)
    if change.remove_worker in workers:
        workers.remove(change.remove_worker)

    fields: Dict[str, object] = {}
    if tuple(workers) != entry.workers:
        fields["workers"] = tuple(workers)
    if change.new_day:
        fields["day"] = change.new_day
    if change.new_time:
        fields["start_time"] = change.new_time
    if change.new_hours is not None:
        fields["hours"] = change.new_hours
    return entry.merged(fields) if fields else entry


def apply_changes(
    assignments: Sequence[Assignment],
    changes: Sequence[FieldChange],
) -> List[Assignment]:
    """
    The assignments with ``changes`` applied, in their original order.

    An assignment with a ``merge_into`` change is left out of the result.
    """
    pending: Dict[str, List[FieldChange]] = {}
    for change in changes:
        pending.setdefault(change.assignment_id, []).append(change)

    out: List[Assignment] = []
    for entry in assignments:
        edits = pending.get(entry.id, [])
        if any(c.merge_into for c in edits):
            continue
        for change in edits:
            entry = _apply_change(entry, change)
        out.append(entry)
    return out
