"""Worker availability: who is free on a day, and who is on leave."""

from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional, Sequence, Set

from schedule_advisor.domain.entities import DAYS, Assignment, Snapshot, Worker, can_access, normalize_day
from schedule_advisor.domain.vacations import VacationCalendar, VacationLookup, VacationRecord

__all__ = [
    "VacationCalendar",
    "VacationLookup",
    "VacationRecord",
    "available_workers",
    "busy_workers",
    "date_for_day",
    "on_vacation",
]


def date_for_day(week_start: date, day: str) -> date:
    """Calendar date of a weekday within the week starting on ``week_start`` (a Monday)."""
    return week_start + timedelta(days=DAYS.index(normalize_day(day)))


def on_vacation(
    worker_name: str,
    day: str,
    vacations: Optional[VacationLookup],
    week_start: Optional[date],
) -> Optional[VacationRecord]:
    if vacations is None or week_start is None:
        return None
    return vacations(worker_name, date_for_day(week_start, day))


def busy_workers(snapshot: Snapshot, day: str, exclude_id: Optional[str] = None) -> Set[str]:
    """Names of everyone on a non-cancelled assignment that day, except ``exclude_id``."""
    busy: Set[str] = set()
    for assignment in snapshot.live():
        if assignment.day == day and assignment.id != exclude_id:
            busy.update(assignment.workers)
    return busy


def available_workers(
    assignment: Assignment,
    snapshot: Snapshot,
    vacations: Optional[VacationLookup] = None,
    week_start: Optional[date] = None,
    exclude: Sequence[str] = (),
) -> List[Worker]:
    """
    Active roster workers who could take over ``assignment``.

    A candidate is free that day (no other live assignment), not already on
    the crew or excluded, cleared for the site, and not on leave when a
    vacation lookup is wired in. Roster order is preserved.
    """
    busy = busy_workers(snapshot, assignment.day, exclude_id=assignment.id)
    site = snapshot.site_for(assignment)
    candidates = []
    for worker in snapshot.active_workers():
        if worker.name in busy or worker.name in exclude or worker.name in assignment.workers:
            continue
        if not can_access(worker, site):
            continue
        if on_vacation(worker.name, assignment.day, vacations, week_start):
            continue
        candidates.append(worker)
    return candidates
