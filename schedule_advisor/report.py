"""Plain-text reports for detection passes, suggestions and validation results."""

from __future__ import annotations

from typing import List, Sequence

import pandas as pd

from schedule_advisor.engine.conflicts import SEVERITY_ORDER, Conflict
from schedule_advisor.engine.orchestrator import summarize
from schedule_advisor.engine.suggestions import Suggestion
from schedule_advisor.engine.validation import ValidationResult
from schedule_advisor.io.export_csv import format_change


def summarize_conflicts(conflicts: Sequence[Conflict]) -> str:
    """
    Render a conflict list as a text report.

    Contains a type x severity count table, the impact totals and one line
    per conflict ordered by severity.
    """
    if not conflicts:
        return "No scheduling conflicts detected."

    summary = summarize(conflicts)
    df = pd.DataFrame(
        [{"type": c.type.value, "severity": c.severity.value} for c in conflicts]
    )
    table = pd.crosstab(df["type"], df["severity"])
    table = table.reindex(
        columns=[s.value for s in SEVERITY_ORDER if s.value in table.columns]
    )

    lines: List[str] = [
        f"{summary.total} conflict(s) detected",
        "",
        table.to_string(),
        "",
        f"Time wasted:     {summary.total_time_wasted:.0f} min",
        f"Cost increase:   {summary.total_cost_increase:.2f}",
        f"Efficiency loss: {summary.avg_efficiency_loss:.1f}% (average)",
        "",
    ]
    rank = {s: i for i, s in enumerate(SEVERITY_ORDER)}
    for conflict in sorted(conflicts, key=lambda c: rank[c.severity]):
        lines.append(f"[{conflict.severity.value.upper()}] {conflict.title}: {conflict.description}")
        for resolution in conflict.resolutions:
            lines.append(f"    - {resolution.title}: {resolution.description}")
    return "\n".join(lines)


def summarize_suggestions(suggestions: Sequence[Suggestion]) -> str:
    if not suggestions:
        return "No suggestions."
    lines = []
    for i, suggestion in enumerate(suggestions, start=1):
        lines.append(
            f"{i}. [{suggestion.impact.value}] {suggestion.title} ({suggestion.id})"
        )
        lines.append(f"   {suggestion.description}")
        for change in suggestion.changes:
            lines.append(f"   * {format_change(change)}")
    return "\n".join(lines)


def format_validation_result(result: ValidationResult) -> str:
    verdict = "OK to proceed" if result.can_proceed else "BLOCKED"
    lines = [f"{verdict}: {len(result.conflicts)} conflict(s)"]
    for conflict in result.blocking:
        lines.append(f"  ! {conflict.title}: {conflict.description}")
    for warning in result.warnings:
        lines.append(f"  ~ {warning}")
    return "\n".join(lines)
