"""Services shared by the detectors and the suggestion heuristics."""

from .availability import VacationCalendar, VacationLookup, VacationRecord, available_workers, date_for_day
from .timeplan import add_hours_to_time, parse_time_string
from .workload import attributed_hours, classify_workloads, compute_workloads

__all__ = [
    "VacationCalendar",
    "VacationLookup",
    "VacationRecord",
    "available_workers",
    "date_for_day",
    "add_hours_to_time",
    "parse_time_string",
    "attributed_hours",
    "classify_workloads",
    "compute_workloads",
]
