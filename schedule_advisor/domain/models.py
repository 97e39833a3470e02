"""SQLAlchemy models for the cleaning roster store."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, relationship

from .entities import Assignment, Site, Worker


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Cleaner(Base):
    """Roster entry: a cleaner with a security clearance."""

    __tablename__ = "cleaners"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    security_level = Column(String(10), nullable=False, default="low")  # low, medium, high
    is_active = Column(Boolean, nullable=False, default=True)

    def to_entity(self) -> Worker:
        return Worker(
            name=self.name,
            clearance=self.security_level,
            active=bool(self.is_active),
            id=str(self.id) if self.id is not None else None,
        )

    def __repr__(self) -> str:
        return f"<Cleaner(id={self.id}, name='{self.name}', security='{self.security_level}')>"


class ClientSite(Base):
    """Registry entry: one site of a client, keyed by (client_name, site_name)."""

    __tablename__ = "client_sites"
    __table_args__ = (UniqueConstraint("client_name", "site_name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_name = Column(String(200), nullable=False)
    site_name = Column(String(200), nullable=False)
    security_level = Column(String(10), nullable=True)  # NULL = no clearance requirement
    address = Column(Text, nullable=True)

    def to_entity(self) -> Site:
        return Site(client=self.client_name, site=self.site_name, clearance=self.security_level)

    def __repr__(self) -> str:
        return f"<ClientSite(client='{self.client_name}', site='{self.site_name}', security='{self.security_level}')>"


class ScheduleEntry(Base):
    """One assignment on the weekly grid."""

    __tablename__ = "schedule_entries"

    id = Column(String(64), primary_key=True)
    week_id = Column(String(10), nullable=False)  # Monday of the week: 2025-09-01
    day = Column(String(10), nullable=False)  # monday .. sunday
    client_name = Column(String(200), nullable=False)
    site_name = Column(String(200), nullable=False)
    hours = Column(Float, nullable=False, default=0.0)
    start_time = Column(String(5), nullable=True)  # HH:MM
    status = Column(String(20), nullable=False, default="scheduled")
    is_recurring = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    # Relationships
    crew = relationship(
        "ScheduleEntryCleaner",
        back_populates="entry",
        order_by="ScheduleEntryCleaner.position",
        cascade="all, delete-orphan",
    )

    @property
    def cleaner_names(self) -> list:
        return [member.cleaner_name for member in self.crew]

    def to_entity(self) -> Assignment:
        return Assignment(
            id=self.id,
            day=self.day,
            client=self.client_name,
            site=self.site_name,
            workers=tuple(self.cleaner_names),
            hours=self.hours or 0.0,
            start_time=self.start_time,
            status=self.status,
            recurring=bool(self.is_recurring),
            notes=self.notes,
            week_id=self.week_id,
        )

    def __repr__(self) -> str:
        return f"<ScheduleEntry(id={self.id}, day={self.day}, site='{self.site_name}', crew={self.cleaner_names})>"


class ScheduleEntryCleaner(Base):
    """A cleaner named on a schedule entry; order is the crew order."""

    __tablename__ = "schedule_entry_cleaners"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entry_id = Column(String(64), ForeignKey("schedule_entries.id"), nullable=False)
    cleaner_name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    entry = relationship("ScheduleEntry", back_populates="crew")


class CleanerVacation(Base):
    """Leave record for a cleaner (inclusive date range)."""

    __tablename__ = "cleaner_vacations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cleaner_name = Column(String(100), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, approved, rejected, cancelled
    reason = Column(Text, nullable=True)
    submitted_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<CleanerVacation(cleaner='{self.cleaner_name}', {self.start_date}..{self.end_date}, status={self.status})>"
