"""Leave records and the lookup interface the engine consumes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol


@dataclass(frozen=True)
class VacationRecord:
    worker_name: str
    start_date: date
    end_date: date
    status: str = "approved"
    reason: Optional[str] = None

    def covers(self, on_date: date) -> bool:
        return self.start_date <= on_date <= self.end_date


class VacationLookup(Protocol):
    def __call__(self, worker_name: str, on_date: date) -> Optional[VacationRecord]:
        ...


class VacationCalendar:
    """In-memory VacationLookup over approved leave records."""

    def __init__(self, records: Iterable[VacationRecord] = ()):
        self._by_worker: Dict[str, List[VacationRecord]] = {}
        for record in records:
            if record.status != "approved":
                continue
            self._by_worker.setdefault(record.worker_name, []).append(record)

    def __call__(self, worker_name: str, on_date: date) -> Optional[VacationRecord]:
        for record in self._by_worker.get(worker_name, ()):
            if record.covers(on_date):
                return record
        return None

    def for_worker(self, worker_name: str) -> List[VacationRecord]:
        return list(self._by_worker.get(worker_name, ()))
