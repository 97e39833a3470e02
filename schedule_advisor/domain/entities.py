"""Immutable snapshot entities consumed by the conflict engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple


DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class Clearance(str, Enum):
    """Security tier held by a worker or required by a site."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _CLEARANCE_RANK[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["Clearance"]:
        """Parse a clearance; None/blank stays None, unknown strings count as LOW."""
        if value is None or isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if not text or text == "nan":
            return None
        try:
            return cls(text)
        except ValueError:
            return cls.LOW


_CLEARANCE_RANK = {Clearance.LOW: 1, Clearance.MEDIUM: 2, Clearance.HIGH: 3}


class AssignmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def normalize_day(day: Any) -> str:
    text = str(day).strip().lower()
    if text not in DAYS:
        raise ValueError(f"Unknown day of week: {day!r}")
    return text


@dataclass(frozen=True)
class Worker:
    name: str
    clearance: Clearance = Clearance.LOW
    active: bool = True
    id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "clearance", Clearance.parse(self.clearance) or Clearance.LOW)


@dataclass(frozen=True)
class Site:
    client: str
    site: str
    clearance: Optional[Clearance] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "clearance", Clearance.parse(self.clearance))

    @property
    def key(self) -> Tuple[str, str]:
        return (self.client, self.site)


@dataclass(frozen=True)
class Assignment:
    """One scheduling unit: a crew of workers at a client site on a weekday."""

    id: str
    day: str
    client: str
    site: str
    workers: Tuple[str, ...] = ()
    hours: float = 0.0
    start_time: Optional[str] = None
    status: AssignmentStatus = AssignmentStatus.SCHEDULED
    recurring: bool = False
    notes: Optional[str] = None
    week_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "day", normalize_day(self.day))
        object.__setattr__(self, "workers", tuple(w for w in self.workers if w))
        object.__setattr__(self, "hours", float(self.hours or 0.0))
        object.__setattr__(self, "status", AssignmentStatus(self.status))
        object.__setattr__(self, "start_time", self.start_time or None)

    @property
    def is_cancelled(self) -> bool:
        return self.status is AssignmentStatus.CANCELLED

    @property
    def site_key(self) -> Tuple[str, str]:
        return (self.client, self.site)

    @classmethod
    def from_fields(cls, data: Mapping[str, Any]) -> "Assignment":
        return cls(**_coerce_fields(data))

    def merged(self, changes: Mapping[str, Any]) -> "Assignment":
        """Copy of this assignment with the given (partial) fields applied."""
        return replace(self, **_coerce_fields(changes))


ASSIGNMENT_FIELDS = (
    "id", "day", "client", "site", "workers", "hours", "start_time",
    "status", "recurring", "notes", "week_id",
)


def _coerce_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    out = {k: v for k, v in data.items() if k in ASSIGNMENT_FIELDS}
    # a single "worker" is shorthand for a one-person crew
    if "workers" not in out and data.get("worker"):
        out["workers"] = (data["worker"],)
    if "workers" in out:
        workers = out["workers"]
        if isinstance(workers, str):
            workers = [w.strip() for w in workers.split(";")]
        out["workers"] = tuple(workers or ())
    return out


class Snapshot:
    """
    Read-only view over one week's assignments, roster and site registry.

    Lookup tables are built per instance; a Snapshot is never updated in place.
    """

    def __init__(
        self,
        assignments: Iterable[Assignment],
        workers: Iterable[Worker] = (),
        sites: Iterable[Site] = (),
    ):
        self.assignments: Tuple[Assignment, ...] = tuple(assignments or ())
        self.workers: Tuple[Worker, ...] = tuple(workers or ())
        self.sites: Tuple[Site, ...] = tuple(sites or ())
        self._workers_by_name: Dict[str, Worker] = {}
        for worker in self.workers:
            self._workers_by_name.setdefault(worker.name, worker)
        self._sites_by_key: Dict[Tuple[str, str], Site] = {}
        for site in self.sites:
            self._sites_by_key.setdefault(site.key, site)

    def __len__(self) -> int:
        return len(self.assignments)

    def live(self) -> List[Assignment]:
        """Non-cancelled assignments in snapshot order."""
        return [a for a in self.assignments if not a.is_cancelled]

    def worker(self, name: str) -> Optional[Worker]:
        return self._workers_by_name.get(name)

    def site_for(self, assignment: Assignment) -> Optional[Site]:
        return self._sites_by_key.get(assignment.site_key)

    def active_workers(self) -> List[Worker]:
        return [w for w in self.workers if w.active]

    def get(self, assignment_id: str) -> Optional[Assignment]:
        for assignment in self.assignments:
            if assignment.id == assignment_id:
                return assignment
        return None

    def with_assignments(self, assignments: Sequence[Assignment]) -> "Snapshot":
        return Snapshot(assignments, self.workers, self.sites)


def can_access(worker: Worker, site: Optional[Site]) -> bool:
    """A worker may work a site only if their clearance meets its requirement."""
    if site is None or site.clearance is None:
        return True
    return worker.clearance.rank >= site.clearance.rank
