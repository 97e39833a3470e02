"""CSV export of detection results and suggestions."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pandas as pd

from schedule_advisor.engine.conflicts import Conflict, FieldChange
from schedule_advisor.engine.suggestions import Suggestion

CONFLICT_COLUMNS = [
    "conflict_id", "type", "severity", "title", "description", "affected_ids",
    "resolutions", "time_wasted", "cost_increase", "efficiency_loss",
]

SUGGESTION_COLUMNS = [
    "suggestion_id", "type", "title", "description", "priority", "impact",
    "severity", "conflict_id", "time_saved", "cost_saved", "changes",
]


def format_change(change: FieldChange) -> str:
    """Compact ``id: key=value, ...`` rendering of a field change."""
    fields = ", ".join(f"{k}={v}" for k, v in change.as_dict().items() if k != "assignment_id")
    return f"{change.assignment_id}: {fields}"


def conflicts_frame(conflicts: Sequence[Conflict]) -> pd.DataFrame:
    rows = [
        {
            "conflict_id": c.id,
            "type": c.type.value,
            "severity": c.severity.value,
            "title": c.title,
            "description": c.description,
            "affected_ids": ";".join(c.affected_ids),
            "resolutions": len(c.resolutions),
            "time_wasted": c.impact.time_wasted,
            "cost_increase": c.impact.cost_increase,
            "efficiency_loss": c.impact.efficiency_loss,
        }
        for c in conflicts
    ]
    return pd.DataFrame(rows, columns=CONFLICT_COLUMNS)


def suggestions_frame(suggestions: Sequence[Suggestion]) -> pd.DataFrame:
    rows = [
        {
            "suggestion_id": s.id,
            "type": s.type.value,
            "title": s.title,
            "description": s.description,
            "priority": s.priority,
            "impact": s.impact.value,
            "severity": s.severity.value if s.severity else None,
            "conflict_id": s.conflict_id,
            "time_saved": s.time_saved,
            "cost_saved": s.cost_saved,
            "changes": " | ".join(format_change(ch) for ch in s.changes),
        }
        for s in suggestions
    ]
    return pd.DataFrame(rows, columns=SUGGESTION_COLUMNS)


def export_conflicts_csv(conflicts: Sequence[Conflict], csv_path: str | Path) -> int:
    """Write one row per conflict. Returns the number of rows written."""
    conflicts_frame(conflicts).to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(conflicts)} conflicts to {csv_path}")
    return len(conflicts)


def export_suggestions_csv(suggestions: Sequence[Suggestion], csv_path: str | Path) -> int:
    """Write one row per suggestion in ranked order. Returns the number of rows written."""
    suggestions_frame(suggestions).to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(suggestions)} suggestions to {csv_path}")
    return len(suggestions)
