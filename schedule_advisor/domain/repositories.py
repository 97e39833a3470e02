"""Repository classes for data access."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from .entities import Assignment, Snapshot
from .models import Cleaner, CleanerVacation, ClientSite, ScheduleEntry, ScheduleEntryCleaner
from .vacations import VacationCalendar, VacationRecord


class CleanerRepository:
    """Repository for roster data access."""

    @staticmethod
    def get_all(session: Session) -> List[Cleaner]:
        """Get all cleaners in roster order."""
        return session.query(Cleaner).order_by(Cleaner.id).all()

    @staticmethod
    def bulk_create(session: Session, cleaners: List[Cleaner]) -> None:
        """Create multiple cleaners."""
        session.add_all(cleaners)
        session.commit()


class ClientSiteRepository:
    """Repository for the site registry."""

    @staticmethod
    def get_all(session: Session) -> List[ClientSite]:
        """Get all client sites in registry order."""
        return session.query(ClientSite).order_by(ClientSite.id).all()

    @staticmethod
    def bulk_create(session: Session, sites: List[ClientSite]) -> None:
        """Create multiple sites."""
        session.add_all(sites)
        session.commit()


class ScheduleEntryRepository:
    """Repository for schedule entries."""

    @staticmethod
    def get_by_week(session: Session, week_id: str) -> List[ScheduleEntry]:
        """Get all entries for a specific week, ordered by id."""
        return (
            session.query(ScheduleEntry)
            .filter(ScheduleEntry.week_id == week_id)
            .order_by(ScheduleEntry.id)
            .all()
        )

    @staticmethod
    def get_by_id(session: Session, entry_id: str) -> Optional[ScheduleEntry]:
        """Get entry by ID."""
        return session.query(ScheduleEntry).filter(ScheduleEntry.id == entry_id).first()

    @staticmethod
    def save_assignment(session: Session, assignment: Assignment) -> ScheduleEntry:
        """Insert or overwrite the stored entry for an Assignment snapshot."""
        entry = ScheduleEntryRepository.get_by_id(session, assignment.id) or ScheduleEntry(id=assignment.id)
        entry.week_id = assignment.week_id or entry.week_id
        entry.day = assignment.day
        entry.client_name = assignment.client
        entry.site_name = assignment.site
        entry.hours = assignment.hours
        entry.start_time = assignment.start_time
        entry.status = assignment.status.value
        entry.is_recurring = assignment.recurring
        entry.notes = assignment.notes
        entry.crew = [
            ScheduleEntryCleaner(cleaner_name=name, position=i)
            for i, name in enumerate(assignment.workers)
        ]
        session.add(entry)
        session.commit()
        return entry

    @staticmethod
    def delete(session: Session, entry_id: str) -> bool:
        """Delete one entry and its crew rows. Returns False if it was not stored."""
        entry = ScheduleEntryRepository.get_by_id(session, entry_id)
        if entry is None:
            return False
        session.delete(entry)
        session.commit()
        return True

    @staticmethod
    def delete_by_week(session: Session, week_id: str) -> int:
        """Delete all entries for a specific week. Returns number of deleted rows."""
        entries = ScheduleEntryRepository.get_by_week(session, week_id)
        for entry in entries:
            session.delete(entry)
        session.commit()
        return len(entries)


class VacationRepository:
    """Repository for cleaner leave records."""

    @staticmethod
    def get_approved(session: Session) -> List[CleanerVacation]:
        """Get all approved vacations ordered by start date."""
        return (
            session.query(CleanerVacation)
            .filter(CleanerVacation.status == "approved")
            .order_by(CleanerVacation.start_date)
            .all()
        )

    @staticmethod
    def calendar(session: Session) -> VacationCalendar:
        """Approved leave as an in-memory lookup usable by the engine."""
        return VacationCalendar(
            VacationRecord(
                worker_name=v.cleaner_name,
                start_date=v.start_date,
                end_date=v.end_date,
                status=v.status,
                reason=v.reason,
            )
            for v in VacationRepository.get_approved(session)
        )


def load_snapshot(session: Session, week_id: str) -> Snapshot:
    """Read the roster, site registry and one week's entries as a Snapshot."""
    return Snapshot(
        assignments=[e.to_entity() for e in ScheduleEntryRepository.get_by_week(session, week_id)],
        workers=[c.to_entity() for c in CleanerRepository.get_all(session)],
        sites=[s.to_entity() for s in ClientSiteRepository.get_all(session)],
    )
