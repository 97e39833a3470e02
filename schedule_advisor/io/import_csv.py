"""CSV import utilities to load data into database."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd
from sqlalchemy.orm import Session

from schedule_advisor.domain.entities import normalize_day
from schedule_advisor.domain.models import Cleaner, CleanerVacation, ClientSite, ScheduleEntry, ScheduleEntryCleaner
from schedule_advisor.domain.repositories import CleanerRepository, ClientSiteRepository

TRUE_VALUES = {"TRUE", "T", "1", "YES", "Y"}


def _read_csv(csv_path: str | Path, required: Iterable[str]) -> pd.DataFrame:
    df = pd.read_csv(csv_path)

    # Normalize column names
    df.columns = df.columns.str.lower().str.strip()

    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{csv_path}: missing required column(s): {', '.join(missing)}")
    return df


def _text(row, column: str) -> str | None:
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _flag(row, column: str, default: bool) -> bool:
    value = row.get(column)
    if value is None or pd.isna(value):
        return default
    return str(value).strip().upper() in TRUE_VALUES


def import_cleaners_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import the cleaner roster from CSV into database.

    Args:
        session: Database session
        csv_path: Path to cleaners CSV (name, security_level, is_active)

    Returns:
        Number of cleaners imported
    """
    df = _read_csv(csv_path, ["name"])

    cleaners = []
    for _, row in df.iterrows():
        cleaners.append(Cleaner(
            name=str(row["name"]).strip(),
            security_level=(_text(row, "security_level") or "low").lower(),
            is_active=_flag(row, "is_active", True),
        ))

    CleanerRepository.bulk_create(session, cleaners)

    print(f"[INFO] Imported {len(cleaners)} cleaners from {csv_path}")
    return len(cleaners)


def import_sites_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import the client site registry from CSV into database.

    Args:
        session: Database session
        csv_path: Path to sites CSV (client, site, security_level, address)

    Returns:
        Number of sites imported
    """
    df = _read_csv(csv_path, ["client", "site"])

    sites = []
    for _, row in df.iterrows():
        level = _text(row, "security_level")
        sites.append(ClientSite(
            client_name=str(row["client"]).strip(),
            site_name=str(row["site"]).strip(),
            security_level=level.lower() if level else None,
            address=_text(row, "address"),
        ))

    ClientSiteRepository.bulk_create(session, sites)

    print(f"[INFO] Imported {len(sites)} client sites from {csv_path}")
    return len(sites)


def import_schedule_csv(session: Session, csv_path: str | Path, week_id: str | None = None) -> int:
    """
    Import schedule entries from CSV into database.

    The ``cleaners`` column lists the crew separated by ``;`` in crew order.

    Args:
        session: Database session
        csv_path: Path to schedule CSV
        week_id: Optional week_id to filter (e.g., "2025-09-01")

    Returns:
        Number of entries imported
    """
    df = _read_csv(csv_path, ["id", "week_id", "day", "client", "site"])
    df["week_id"] = df["week_id"].astype(str).str.strip()

    # Filter by week if specified
    if week_id is not None:
        df = df[df["week_id"] == week_id].copy()

    entries = []
    for _, row in df.iterrows():
        crew = [name.strip() for name in (_text(row, "cleaners") or "").split(";") if name.strip()]
        hours = row.get("hours")
        entry = ScheduleEntry(
            id=str(row["id"]).strip(),
            week_id=row["week_id"],
            day=normalize_day(row["day"]),
            client_name=str(row["client"]).strip(),
            site_name=str(row["site"]).strip(),
            hours=float(hours) if hours is not None and pd.notna(hours) else 0.0,
            start_time=_text(row, "start_time"),
            status=(_text(row, "status") or "scheduled").lower(),
            is_recurring=_flag(row, "is_recurring", False),
            notes=_text(row, "notes"),
        )
        entry.crew = [
            ScheduleEntryCleaner(cleaner_name=name, position=i) for i, name in enumerate(crew)
        ]
        entries.append(entry)

    session.add_all(entries)
    session.commit()

    print(f"[INFO] Imported {len(entries)} schedule entries from {csv_path}")
    return len(entries)


def import_vacations_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import cleaner leave records from CSV into database.

    Rows without a ``status`` are treated as approved.

    Returns:
        Number of leave records imported
    """
    df = _read_csv(csv_path, ["cleaner", "start_date", "end_date"])

    # Convert dates
    df["start_date"] = pd.to_datetime(df["start_date"]).dt.date
    df["end_date"] = pd.to_datetime(df["end_date"]).dt.date

    vacations = []
    for _, row in df.iterrows():
        if row["end_date"] < row["start_date"]:
            raise ValueError(f"{csv_path}: leave for {row['cleaner']} ends before it starts")
        vacations.append(CleanerVacation(
            cleaner_name=str(row["cleaner"]).strip(),
            start_date=row["start_date"],
            end_date=row["end_date"],
            status=(_text(row, "status") or "approved").lower(),
            reason=_text(row, "reason"),
        ))

    session.add_all(vacations)
    session.commit()

    print(f"[INFO] Imported {len(vacations)} leave records from {csv_path}")
    return len(vacations)
