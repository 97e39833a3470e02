"""Workload attribution and imbalance classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from schedule_advisor.domain.entities import Assignment, Snapshot


def attributed_hours(assignment: Assignment) -> Dict[str, float]:
    """
    Hours each named worker is credited with for an assignment.

    Hours belong to the assignment as a whole and are split evenly across the
    crew. This is the only place the attribution policy lives.
    """
    if not assignment.workers:
        return {}
    share = assignment.hours / len(assignment.workers)
    return {name: share for name in assignment.workers}


@dataclass
class WorkerLoad:
    name: str
    hours: float = 0.0
    assignments: List[Assignment] = field(default_factory=list)

    def days(self) -> set:
        return {a.day for a in self.assignments}


@dataclass
class WorkloadBalance:
    mean_hours: float
    threshold: float
    loads: Dict[str, WorkerLoad]
    overloaded: List[WorkerLoad]
    underloaded: List[WorkerLoad]

    @property
    def is_imbalanced(self) -> bool:
        return bool(self.overloaded) and bool(self.underloaded)


def compute_workloads(snapshot: Snapshot) -> Dict[str, WorkerLoad]:
    """Attributed hours per active worker, in roster order; others are ignored."""
    loads: Dict[str, WorkerLoad] = {}
    for worker in snapshot.active_workers():
        loads.setdefault(worker.name, WorkerLoad(worker.name))

    for assignment in snapshot.live():
        for name, hours in attributed_hours(assignment).items():
            load = loads.get(name)
            if load is not None:
                load.hours += hours
                load.assignments.append(assignment)
    return loads


def classify_workloads(snapshot: Snapshot, threshold: float) -> Optional[WorkloadBalance]:
    """
    Split active workers into overloaded / underloaded sets.

    A worker is overloaded when more than ``threshold`` (a fraction) above the
    mean attributed hours, underloaded when more than ``threshold`` below.
    Returns None when there are no active workers.
    """
    loads = compute_workloads(snapshot)
    if not loads:
        return None

    mean = sum(load.hours for load in loads.values()) / len(loads)
    margin = mean * threshold
    overloaded = [load for load in loads.values() if load.hours > mean + margin]
    underloaded = [load for load in loads.values() if load.hours < mean - margin]
    return WorkloadBalance(
        mean_hours=mean,
        threshold=threshold,
        loads=loads,
        overloaded=overloaded,
        underloaded=underloaded,
    )


def unique_assignments(groups: Iterable[Iterable[Assignment]]) -> List[Assignment]:
    """Flatten assignment groups keeping the first occurrence of each id."""
    seen = set()
    out: List[Assignment] = []
    for group in groups:
        for assignment in group:
            if assignment.id not in seen:
                seen.add(assignment.id)
                out.append(assignment)
    return out
