"""Domain entities, storage models and data access layer."""

from .entities import DAYS, Assignment, AssignmentStatus, Clearance, Site, Snapshot, Worker, can_access
from .models import Base, Cleaner, CleanerVacation, ClientSite, ScheduleEntry, ScheduleEntryCleaner
from .repositories import (
    CleanerRepository,
    ClientSiteRepository,
    ScheduleEntryRepository,
    VacationRepository,
    load_snapshot,
)
from .vacations import VacationCalendar, VacationLookup, VacationRecord

__all__ = [
    "DAYS",
    "Assignment",
    "AssignmentStatus",
    "Clearance",
    "Site",
    "Snapshot",
    "Worker",
    "can_access",
    "Base",
    "Cleaner",
    "CleanerVacation",
    "ClientSite",
    "ScheduleEntry",
    "ScheduleEntryCleaner",
    "CleanerRepository",
    "ClientSiteRepository",
    "ScheduleEntryRepository",
    "VacationRepository",
    "load_snapshot",
    "VacationCalendar",
    "VacationLookup",
    "VacationRecord",
]
