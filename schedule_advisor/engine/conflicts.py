"""Conflict and resolution records produced by a detection pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from schedule_advisor.domain.entities import Assignment


class ConflictType(str, Enum):
    DOUBLE_BOOKING = "cleaner_double_booking"
    TIME_OVERLAP = "time_conflict"
    SECURITY_ACCESS = "security_access_denied"
    WORKLOAD_IMBALANCE = "workload_imbalance"
    ROUTING = "location_overlap"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def blocks(self) -> bool:
        return self in (Severity.CRITICAL, Severity.HIGH)


SEVERITY_ORDER = (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW)


class ResolutionType(str, Enum):
    REASSIGN = "reassign"
    RESCHEDULE = "reschedule"
    SPLIT = "split"
    MERGE = "merge"


@dataclass(frozen=True)
class Impact:
    time_wasted: float = 0.0
    cost_increase: float = 0.0
    efficiency_loss: float = 0.0


@dataclass(frozen=True)
class Benefit:
    time_saved: float = 0.0
    cost_reduction: float = 0.0
    efficiency_gain: float = 0.0


@dataclass(frozen=True)
class FieldChange:
    """A single field-level edit to one assignment, referenced by id."""

    assignment_id: str
    new_worker: Optional[str] = None
    replaces: Optional[str] = None
    remove_worker: Optional[str] = None
    new_day: Optional[str] = None
    new_time: Optional[str] = None
    new_hours: Optional[float] = None
    merge_into: Optional[str] = None

    def as_dict(self) -> Dict[str, object]:
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass(frozen=True)
class Resolution:
    id: str
    type: ResolutionType
    title: str
    description: str
    changes: Tuple[FieldChange, ...]
    benefit: Benefit = Benefit()


@dataclass
class Conflict:
    id: str
    type: ConflictType
    severity: Severity
    title: str
    description: str
    affected: List[Assignment]
    resolutions: List[Resolution] = field(default_factory=list)
    impact: Impact = Impact()

    @property
    def affected_ids(self) -> List[str]:
        return [a.id for a in self.affected]

    def involves_worker(self, name: str) -> bool:
        return any(name in a.workers for a in self.affected)


@dataclass(frozen=True)
class ConflictProfile:
    """Per-type presentation and impact strategy."""

    title: str
    impact: Callable[[int], Impact]


def _double_booking_impact(group_size: int) -> Impact:
    return Impact(group_size * 30, group_size * 50, group_size * 15)


def _routing_impact(client_count: int) -> Impact:
    extra = max(client_count - 1, 0)
    return Impact(extra * 20, extra * 15, 5)


def _workload_impact(overloaded_count: int) -> Impact:
    return Impact(0, overloaded_count * 25, 10)


PROFILES: Dict[ConflictType, ConflictProfile] = {
    ConflictType.DOUBLE_BOOKING: ConflictProfile("Cleaner Double Booking", _double_booking_impact),
    ConflictType.TIME_OVERLAP: ConflictProfile("Time Overlap Conflict", lambda _: Impact(60, 100, 25)),
    ConflictType.SECURITY_ACCESS: ConflictProfile("Security Access Violation", lambda _: Impact(60, 200, 50)),
    ConflictType.WORKLOAD_IMBALANCE: ConflictProfile("Workload Imbalance", _workload_impact),
    ConflictType.ROUTING: ConflictProfile("Inefficient Routing", _routing_impact),
}


def make_conflict(
    conflict_type: ConflictType,
    conflict_id: str,
    severity: Severity,
    description: str,
    affected: List[Assignment],
    resolutions: List[Resolution],
    scale: int = 1,
) -> Conflict:
    """Build a Conflict using the type's registered title and impact strategy."""
    profile = PROFILES[conflict_type]
    return Conflict(
        id=conflict_id,
        type=conflict_type,
        severity=severity,
        title=profile.title,
        description=description,
        affected=list(affected),
        resolutions=list(resolutions),
        impact=profile.impact(scale),
    )
