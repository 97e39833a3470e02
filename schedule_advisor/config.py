"""Configuration loading for the schedule advisor (YAML, or JSON by suffix)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List

import yaml


DEFAULT_WORKING_DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]


@dataclass
class SuggestionLimits:
    max_suggestions: int = 8
    travel: int = 3
    workload: int = 2
    utilization: int = 2


@dataclass
class PriorityScale:
    """
    Ranking numbers for suggestions. Only their relative order matters.

    Conflict fixes are banded by severity: every critical conflict ranks at
    ``critical``; below that the conflict type orders them (high double
    booking 90, high overlap 85, medium workload 70, low routing 50).
    """

    critical: int = 100
    security_access_denied: int = 100
    cleaner_double_booking: int = 90
    time_conflict: int = 85
    workload_imbalance: int = 70
    location_overlap: int = 50
    travel_grouping: int = 30
    workload_balance: int = 25
    day_utilization: int = 20

    def for_conflict(self, severity: str, conflict_type: str) -> int:
        if severity == "critical":
            return self.critical
        return getattr(self, conflict_type)


@dataclass
class AdvisorConfig:
    imbalance_threshold: float = 0.30
    soft_imbalance_threshold: float = 0.20
    utilization_threshold: float = 0.25
    max_resolutions: int = 3
    security_alternatives: int = 3
    reassign_alternatives: int = 2
    grouping_start_hour: int = 8
    fallback_reschedule_time: str = "14:00"
    working_days: List[str] = field(default_factory=lambda: list(DEFAULT_WORKING_DAYS))
    limits: SuggestionLimits = field(default_factory=SuggestionLimits)
    priorities: PriorityScale = field(default_factory=PriorityScale)

    def __post_init__(self) -> None:
        for name in ("imbalance_threshold", "soft_imbalance_threshold", "utilization_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value < 1.0:
                raise ValueError(f"{name} must be in [0, 1), got {value}")
        if not 0 <= self.grouping_start_hour < 24:
            raise ValueError(f"grouping_start_hour must be 0-23, got {self.grouping_start_hour}")
        if self.limits.max_suggestions < 1:
            raise ValueError("limits.max_suggestions must be at least 1")
        self.working_days = [d.lower() for d in self.working_days]


def _build(cls, raw: Dict[str, Any] | None, section: str):
    raw = raw or {}
    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown keys in {section}: {', '.join(sorted(unknown))}")
    return cls(**raw)


def config_from_dict(data: Dict[str, Any]) -> AdvisorConfig:
    data = dict(data or {})
    limits = _build(SuggestionLimits, data.pop("limits", None), "limits")
    priorities = _build(PriorityScale, data.pop("priorities", None), "priorities")
    cfg = _build(AdvisorConfig, data, "config")
    cfg.limits = limits
    cfg.priorities = priorities
    cfg.__post_init__()
    return cfg


def load_config(path: str | Path) -> AdvisorConfig:
    """Load an AdvisorConfig from a YAML or JSON file."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return config_from_dict(data or {})
