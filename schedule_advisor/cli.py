"""Command-line interface for the schedule advisor."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from typing import Dict, List

from schedule_advisor.domain.db import DEFAULT_DB_URL, get_session, init_database, reset_database, session_scope
from schedule_advisor.domain.repositories import ScheduleEntryRepository, VacationRepository, load_snapshot
from schedule_advisor.engine.orchestrator import ConflictEngine
from schedule_advisor.engine.resolutions import apply_changes
from schedule_advisor.io.config import AdvisorConfig, load_config
from schedule_advisor.io.export_csv import export_conflicts_csv, export_suggestions_csv
from schedule_advisor.io.import_csv import (
    import_cleaners_csv,
    import_schedule_csv,
    import_sites_csv,
    import_vacations_csv,
)
from schedule_advisor.report import format_validation_result, summarize_conflicts, summarize_suggestions


def _week_start(week_id: str) -> date | None:
    """Week ids are the ISO date of the week's Monday; anything else disables leave checks."""
    try:
        return date.fromisoformat(week_id)
    except ValueError:
        return None


def _load_cfg(path: str | None) -> AdvisorConfig:
    return load_config(path) if path else AdvisorConfig()


def _build_engine(session, args: argparse.Namespace) -> ConflictEngine:
    snapshot = load_snapshot(session, args.week)
    return ConflictEngine(
        snapshot.assignments,
        snapshot.workers,
        snapshot.sites,
        cfg=_load_cfg(args.config),
        vacations=VacationRepository.calendar(session),
        week_start=_week_start(args.week),
    )


def _parse_assignments(pairs: List[str]) -> Dict[str, object]:
    """Turn ``key=value`` pairs into a partial assignment mapping."""
    proposed: Dict[str, object] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got {pair!r}")
        key = key.strip()
        value = value.strip()
        if key == "recurring":
            proposed[key] = value.upper() in ("TRUE", "T", "1", "YES")
        elif key == "hours":
            proposed[key] = float(value)
        else:
            proposed[key] = value
    return proposed


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    init_database(args.db)
    print(f"[OK] Database initialized: {args.db}")


def _cmd_import_csv(args: argparse.Namespace) -> None:
    """Import CSV data into database."""
    session = get_session(args.db)

    try:
        if args.cleaners:
            count = import_cleaners_csv(session, args.cleaners)
            print(f"[OK] Imported {count} cleaners")

        if args.sites:
            count = import_sites_csv(session, args.sites)
            print(f"[OK] Imported {count} client sites")

        if args.schedule:
            count = import_schedule_csv(session, args.schedule, week_id=args.week)
            print(f"[OK] Imported {count} schedule entries")

        if args.vacations:
            count = import_vacations_csv(session, args.vacations)
            print(f"[OK] Imported {count} leave records")

        session.close()
        print("[OK] CSV import complete")

    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Import failed: {e}")
        raise


def _cmd_detect(args: argparse.Namespace) -> None:
    """Detect conflicts for a week."""
    session = get_session(args.db)

    try:
        engine = _build_engine(session, args)
        conflicts = engine.conflicts
        print(summarize_conflicts(conflicts))

        if args.out:
            export_conflicts_csv(conflicts, args.out)

        session.close()
        if engine.has_high_priority_conflicts:
            print(f"[WARN] {len(conflicts)} conflict(s) for {args.week}, some need attention")
        else:
            print(f"[OK] {len(conflicts)} conflict(s) for {args.week}")

    except Exception as e:
        session.close()
        print(f"[ERROR] Detection failed: {e}")
        raise


def _cmd_suggest(args: argparse.Namespace) -> None:
    """List ranked suggestions for a week."""
    session = get_session(args.db)

    try:
        engine = _build_engine(session, args)
        suggestions = engine.suggestions(dismissed_ids=args.dismissed or ())
        print(summarize_suggestions(suggestions))

        if args.out:
            export_suggestions_csv(suggestions, args.out)

        session.close()
        print(f"[OK] {len(suggestions)} suggestion(s) for {args.week}")

    except Exception as e:
        session.close()
        print(f"[ERROR] Suggestion generation failed: {e}")
        raise


def _cmd_validate_change(args: argparse.Namespace) -> None:
    """Check a proposed create/edit against the stored week."""
    session = get_session(args.db)

    try:
        proposed = _parse_assignments(args.set)
        engine = _build_engine(session, args)
        if args.entry_id and args.entry_id in {a.id for a in engine.snapshot.assignments}:
            # fill in required fields the edit leaves unchanged
            current = engine.snapshot.get(args.entry_id)
            for key in ("day", "client", "site"):
                proposed.setdefault(key, getattr(current, key))
        result = engine.validate_change(proposed, existing_id=args.entry_id)
        session.close()
    except Exception as e:
        session.close()
        print(f"[ERROR] Validation failed: {e}")
        raise

    print(format_validation_result(result))
    if not result.can_proceed:
        print("[ERROR] Change blocked by scheduling conflicts")
        sys.exit(1)
    print("[OK] Change can proceed")


def _cmd_reset_db(args: argparse.Namespace) -> None:
    """Drop and recreate all tables."""
    if not args.yes:
        print("[ERROR] reset-db deletes all data; pass --yes to confirm")
        sys.exit(1)
    reset_database(args.db)
    print(f"[OK] Database reset: {args.db}")


def _cmd_clear_week(args: argparse.Namespace) -> None:
    """Delete every schedule entry of one week."""
    with session_scope(args.db) as session:
        count = ScheduleEntryRepository.delete_by_week(session, args.week)
    print(f"[OK] Deleted {count} schedule entries for {args.week}")


def _cmd_apply_suggestion(args: argparse.Namespace) -> None:
    """Write one suggestion's changes back to the stored week."""
    try:
        with session_scope(args.db) as session:
            engine = _build_engine(session, args)
            by_id = {s.id: s for s in engine.suggestions(dismissed_ids=args.dismissed or ())}
            suggestion = by_id.get(args.id)
            if suggestion is None:
                raise ValueError(f"No suggestion {args.id!r} for week {args.week}")

            touched = {c.assignment_id for c in suggestion.changes}
            updated = {a.id: a for a in apply_changes(engine.snapshot.assignments, suggestion.changes)}
            for entry_id in sorted(touched):
                if entry_id in updated:
                    ScheduleEntryRepository.save_assignment(session, updated[entry_id])
                else:
                    ScheduleEntryRepository.delete(session, entry_id)
    except Exception as e:
        print(f"[ERROR] Could not apply suggestion: {e}")
        raise

    print(f"[OK] Applied {args.id}: {suggestion.title} ({len(touched)} schedule entries touched)")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="schedule-advisor",
        description="Conflict detection and scheduling suggestions for cleaning rosters",
    )

    # Global options
    parser.add_argument("--db", default=DEFAULT_DB_URL, help=f"Database URL (default: {DEFAULT_DB_URL})")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    # init-db command
    init = sub.add_parser("init-db", help="Initialize database")
    init.set_defaults(func=_cmd_init_db)

    # reset-db command
    reset = sub.add_parser("reset-db", help="Drop and recreate all tables")
    reset.add_argument("--yes", action="store_true", help="Confirm that all data may be deleted")
    reset.set_defaults(func=_cmd_reset_db)

    # import-csv command
    imp = sub.add_parser("import-csv", help="Import CSV data into database")
    imp.add_argument("--cleaners", help="Path to cleaners CSV")
    imp.add_argument("--sites", help="Path to client sites CSV")
    imp.add_argument("--schedule", help="Path to schedule entries CSV")
    imp.add_argument("--vacations", help="Path to leave records CSV")
    imp.add_argument("--week", help="Week ID to filter schedule entries (optional)")
    imp.set_defaults(func=_cmd_import_csv)

    # detect command
    det = sub.add_parser("detect", help="Detect scheduling conflicts for a week")
    det.add_argument("--week", required=True, help="Week ID (Monday date, e.g. 2025-09-01)")
    det.add_argument("--config", help="Path to config YAML (optional)")
    det.add_argument("--out", help="Optional: export conflicts to CSV")
    det.set_defaults(func=_cmd_detect)

    # suggest command
    sug = sub.add_parser("suggest", help="Ranked suggestions for a week")
    sug.add_argument("--week", required=True, help="Week ID (Monday date, e.g. 2025-09-01)")
    sug.add_argument("--config", help="Path to config YAML (optional)")
    sug.add_argument("--out", help="Optional: export suggestions to CSV")
    sug.add_argument("--dismissed", nargs="*", help="Suggestion ids to leave out")
    sug.set_defaults(func=_cmd_suggest)

    # validate-change command
    val = sub.add_parser("validate-change", help="Check a proposed change before saving it")
    val.add_argument("--week", required=True, help="Week ID the change belongs to")
    val.add_argument("--entry-id", help="Id of the entry being edited (omit for a new entry)")
    val.add_argument("--set", action="append", metavar="KEY=VALUE",
                     help="Field to set, e.g. --set day=monday --set workers='Ann;Bob'")
    val.add_argument("--config", help="Path to config YAML (optional)")
    val.set_defaults(func=_cmd_validate_change)

    # apply-suggestion command
    app = sub.add_parser("apply-suggestion", help="Save a suggestion's changes to the stored week")
    app.add_argument("--week", required=True, help="Week ID (Monday date, e.g. 2025-09-01)")
    app.add_argument("--id", required=True, help="Suggestion id as printed by suggest")
    app.add_argument("--config", help="Path to config YAML (optional)")
    app.add_argument("--dismissed", nargs="*", help="Suggestion ids to leave out")
    app.set_defaults(func=_cmd_apply_suggestion)

    # clear-week command
    clr = sub.add_parser("clear-week", help="Delete all schedule entries of a week")
    clr.add_argument("--week", required=True, help="Week ID to clear")
    clr.set_defaults(func=_cmd_clear_week)

    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    args.func(args)


if __name__ == "__main__":
    main()
