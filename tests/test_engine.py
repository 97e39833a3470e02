"""Tests for ConflictEngine queries and the module-level entry points."""

import pytest

from schedule_advisor.engine.conflicts import ConflictType, Severity
from schedule_advisor.engine.detectors import DoubleBookingDetector
from schedule_advisor.engine.orchestrator import ConflictEngine, detect_conflicts, generate_suggestions, summarize


@pytest.fixture
def week(make_assignment):
    """Ann double-booked on Monday, once at the vault she is not cleared for."""
    return [
        make_assignment(id="a1", client="Bank", site="Vault", workers="Ann"),
        make_assignment(id="a2", client="Acme", site="HQ", workers="Ann"),
        make_assignment(id="a3", day="tuesday", workers="Bob"),
    ]


@pytest.fixture
def engine(week, roster, sites):
    return ConflictEngine(week, roster, sites)


def test_detection_pass_in_detector_order(engine):
    """Test all detectors contribute in fixed order."""
    assert [c.type for c in engine.conflicts] == [
        ConflictType.DOUBLE_BOOKING,
        ConflictType.SECURITY_ACCESS,
        ConflictType.WORKLOAD_IMBALANCE,
        ConflictType.ROUTING,
    ]
    # computed once per engine
    assert engine.conflicts is engine.conflicts


def test_summary(engine):
    summary = engine.summary()

    assert summary.total == 4
    assert summary.counts_by_severity == {"critical": 1, "high": 1, "medium": 1, "low": 1}
    assert summary.total_time_wasted == 140
    assert summary.total_cost_increase == 340
    assert summary.avg_efficiency_loss == pytest.approx(23.75)


def test_summarize_empty_has_every_severity():
    summary = summarize([])
    assert summary.total == 0
    assert summary.counts_by_severity == {"critical": 0, "high": 0, "medium": 0, "low": 0}
    assert summary.avg_efficiency_loss == 0.0


def test_query_by_assignment_and_worker(engine):
    """Test filtering conflicts by assignment id and worker name."""
    assert {c.type for c in engine.conflicts_for_assignment("a1")} == {
        ConflictType.DOUBLE_BOOKING,
        ConflictType.SECURITY_ACCESS,
        ConflictType.WORKLOAD_IMBALANCE,
        ConflictType.ROUTING,
    }
    assert engine.conflicts_for_assignment("a3") == []
    assert len(engine.conflicts_for_worker("Ann")) == 4
    assert engine.conflicts_for_worker("Bob") == []


def test_query_by_severity(engine):
    assert [c.type for c in engine.conflicts_by_severity("critical")] == [ConflictType.SECURITY_ACCESS]
    assert [c.type for c in engine.conflicts_by_severity(Severity.LOW)] == [ConflictType.ROUTING]
    assert engine.conflicts_by_severity("urgent") == []


def test_status_flags(engine, make_assignment, roster, sites):
    assert engine.has_conflicts
    assert engine.has_critical_conflicts
    assert engine.has_high_priority_conflicts

    quiet = ConflictEngine([make_assignment(workers="Cara")], [w for w in roster if w.name == "Cara"], sites)
    assert not quiet.has_conflicts
    assert not quiet.has_critical_conflicts
    assert not quiet.has_high_priority_conflicts


class BrokenDetector(DoubleBookingDetector):
    def detect(self, ctx):
        raise AttributeError("'NoneType' object has no attribute 'clearance'")


def test_broken_detector_does_not_hide_others(week, roster, sites):
    """Test one failing detector leaves the rest of the pass intact."""
    engine = ConflictEngine(week, roster, sites, detectors=[BrokenDetector, DoubleBookingDetector])
    assert [c.type for c in engine.conflicts] == [ConflictType.DOUBLE_BOOKING]


def test_module_entry_points(week, roster, sites):
    conflicts = detect_conflicts(week, roster, sites)
    assert len(conflicts) == 4

    suggestions = generate_suggestions(week, roster, sites)
    assert 0 < len(suggestions) <= 8
    assert suggestions[0].conflict_id == "security-access-a1"


def test_entry_points_never_raise():
    """Test malformed input yields an empty result instead of an exception."""
    assert detect_conflicts(None) == []
    assert generate_suggestions([object()]) == []
