"""Conflict detection, validation gate and suggestion ranking."""

from .base import BaseDetector, DetectionContext
from .conflicts import (
    Benefit,
    Conflict,
    ConflictType,
    FieldChange,
    Impact,
    Resolution,
    ResolutionType,
    Severity,
)
from .detectors import (
    DoubleBookingDetector,
    RoutingEfficiencyDetector,
    SecurityAccessDetector,
    TimeOverlapDetector,
    WorkloadImbalanceDetector,
)
from .orchestrator import ConflictEngine, ConflictSummary, detect_conflicts, generate_suggestions, summarize
from .suggestions import Suggestion, SuggestionType, rank_suggestions, suggestion_rank_key
from .validation import ValidationResult, validate_change

__all__ = [
    "BaseDetector",
    "DetectionContext",
    "Benefit",
    "Conflict",
    "ConflictType",
    "FieldChange",
    "Impact",
    "Resolution",
    "ResolutionType",
    "Severity",
    "DoubleBookingDetector",
    "RoutingEfficiencyDetector",
    "SecurityAccessDetector",
    "TimeOverlapDetector",
    "WorkloadImbalanceDetector",
    "ConflictEngine",
    "ConflictSummary",
    "detect_conflicts",
    "generate_suggestions",
    "summarize",
    "Suggestion",
    "SuggestionType",
    "rank_suggestions",
    "suggestion_rank_key",
    "ValidationResult",
    "validate_change",
]
