"""Tests for suggestion generation and ranking."""

from schedule_advisor.config import AdvisorConfig
from schedule_advisor.domain.entities import DAYS, Snapshot, Worker
from schedule_advisor.engine.base import DetectionContext
from schedule_advisor.engine.conflicts import FieldChange
from schedule_advisor.engine.detectors import TimeOverlapDetector
from schedule_advisor.engine.orchestrator import detect_conflicts, generate_suggestions
from schedule_advisor.engine.resolutions import apply_changes
from schedule_advisor.engine.suggestions import (
    ImpactTier,
    Suggestion,
    SuggestionType,
    _guarded,
    day_utilization,
    rank_suggestions,
    suggestion_rank_key,
    travel_grouping,
    workload_balance,
)


def _ctx(assignments, workers=(), sites=(), cfg=None):
    return DetectionContext(Snapshot(assignments, workers, sites), cfg or AdvisorConfig())


def _busy_week(make_assignment):
    """Ann at the vault every day: plenty of security and double-booking fixes."""
    assignments = []
    for day in DAYS:
        assignments.append(make_assignment(day=day, client="Bank", site="Vault", workers="Ann"))
        assignments.append(make_assignment(day=day, client="Acme", site="HQ", workers="Ann"))
    return assignments


def _workers():
    return [Worker("Ann", "low")] + [Worker(f"Guard{i}", "high") for i in range(4)]


def test_suggestions_bounded_to_eight(make_assignment, sites):
    """Test the list never exceeds eight entries."""
    suggestions = generate_suggestions(_busy_week(make_assignment), _workers(), sites)
    assert len(suggestions) == 8


def test_dismissed_ids_never_returned(make_assignment, sites):
    """Test dismissed suggestions stay dismissed across recomputation."""
    assignments = _busy_week(make_assignment)
    first = generate_suggestions(assignments, _workers(), sites)
    dismissed = {s.id for s in first}

    second = generate_suggestions(assignments, _workers(), sites, dismissed_ids=dismissed)
    assert second
    assert not dismissed.intersection(s.id for s in second)


def test_suggestions_sorted_by_rank_key(make_assignment, sites):
    suggestions = generate_suggestions(_busy_week(make_assignment), _workers(), sites)
    keys = [suggestion_rank_key(s) for s in suggestions]

    assert keys == sorted(keys)
    # security fixes outrank double-booking fixes
    assert suggestions[0].priority == 100
    assert all(s.type is SuggestionType.CONFLICT_RESOLUTION for s in suggestions)


def test_conflict_suggestion_carries_conflict_details(make_assignment, roster, sites):
    vault = make_assignment(client="Bank", site="Vault", workers="Ann")
    suggestions = generate_suggestions([vault], roster, sites)

    # the matching workload move is dropped as a duplicate of the security fix
    assert [s.type for s in suggestions] == [SuggestionType.CONFLICT_RESOLUTION, SuggestionType.DAY_UTILIZATION]
    suggestion = suggestions[0]
    assert suggestion.id == f"security-reassign-{vault.id}-Cara"
    assert suggestion.conflict_id == f"security-access-{vault.id}"
    assert suggestion.impact is ImpactTier.CRITICAL
    assert suggestion.description.startswith("Security Access Violation:")


def test_rank_suggestions_dedupes_same_changes():
    change = (FieldChange("a1", new_day="tuesday"),)
    low = Suggestion("x", SuggestionType.DAY_UTILIZATION, "t", "d", 20, ImpactTier.LOW, change)
    copy = Suggestion("y", SuggestionType.DAY_UTILIZATION, "t", "d", 20, ImpactTier.LOW, change)
    fix = Suggestion("z", SuggestionType.CONFLICT_RESOLUTION, "t", "d", 50, ImpactTier.LOW,
                     (FieldChange("a2", new_time="10:00"),))

    ranked = rank_suggestions([low, copy, fix, low])
    assert [s.id for s in ranked] == ["z", "x"]
    assert rank_suggestions([low, fix], dismissed_ids=["z"]) == [low]


def test_rank_key_breaks_ties_on_impact_then_savings():
    base = dict(type=SuggestionType.TRAVEL_GROUPING, title="t", description="d", priority=30, changes=())
    small = Suggestion(id="s", impact=ImpactTier.MEDIUM, time_saved=5, **base)
    big = Suggestion(id="b", impact=ImpactTier.MEDIUM, time_saved=50, **base)
    high = Suggestion(id="h", impact=ImpactTier.HIGH, **base)

    assert [s.id for s in sorted([small, big, high], key=suggestion_rank_key)] == ["h", "b", "s"]


def test_travel_grouping(make_assignment, roster, sites):
    """Test interleaved client visits are regrouped into the first free window."""
    hq = make_assignment(client="Acme", site="HQ", workers="Cara", start_time="08:00", hours=1)
    vault = make_assignment(client="Bank", site="Vault", workers="Cara", start_time="09:00", hours=1)
    warehouse = make_assignment(client="Acme", site="Warehouse", workers="Cara", start_time="10:00", hours=1)
    suggestions = travel_grouping(_ctx([hq, vault, warehouse], roster, sites))

    assert len(suggestions) == 1
    suggestion = suggestions[0]
    assert suggestion.id == "travel-Cara-monday-Acme"
    assert suggestion.priority == 30
    assert (suggestion.time_saved, suggestion.cost_saved) == (15, 10)
    assert [(c.assignment_id, c.new_time) for c in suggestion.changes] == [(hq.id, "10:00"), (warehouse.id, "11:00")]


def test_workload_balance_uses_soft_threshold(make_assignment):
    workers = [Worker("A"), Worker("B"), Worker("C")]
    assignments = [
        make_assignment(id="a1", day="monday", workers="A", hours=10),
        make_assignment(id="a2", day="tuesday", workers="A", hours=10),
        make_assignment(id="b1", day="monday", workers="B", hours=10),
        make_assignment(id="b2", day="wednesday", workers="B", hours=10),
        make_assignment(id="c1", day="monday", workers="C", hours=2),
    ]
    suggestions = workload_balance(_ctx(assignments, workers))

    assert [s.id for s in suggestions] == ["workload-a2-C", "workload-b2-C"]
    assert all(s.type is SuggestionType.WORKLOAD_BALANCE for s in suggestions)


def test_day_utilization_moves_from_busy_to_quiet_days(make_assignment):
    """Test a crowded Monday is smoothed into the quiet days."""
    assignments = [
        make_assignment(id="m1", day="monday", workers="W1", recurring=True),
        make_assignment(id="m2", day="monday", workers="W2"),
        make_assignment(id="m3", day="monday", workers="W3"),
        make_assignment(id="m4", day="monday", workers="W4"),
    ]
    for day in ("tuesday", "wednesday", "thursday", "friday"):
        assignments.append(make_assignment(id=f"x-{day}", day=day, workers="X"))
    suggestions = day_utilization(_ctx(assignments))

    assert [s.id for s in suggestions] == ["utilization-m2-tuesday", "utilization-m3-wednesday"]
    assert suggestions[0].changes[0].new_day == "tuesday"
    assert suggestions[0].impact is ImpactTier.LOW


def test_day_utilization_even_week_has_nothing_to_move(make_assignment):
    assignments = [make_assignment(day=day, workers="X") for day in DAYS[:5]]
    assert day_utilization(_ctx(assignments)) == []


def test_failing_family_is_skipped(make_assignment):
    def broken(ctx):
        raise RuntimeError("boom")

    assert _guarded(broken, _ctx([make_assignment()])) == []


def test_critical_fixes_outrank_high_fixes(make_assignment, roster, sites):
    """Test a three-job double booking outranks a two-job one."""
    assignments = [make_assignment(day="monday", workers="Ann") for _ in range(3)]
    assignments += [make_assignment(day="tuesday", site="Warehouse", workers="Bob") for _ in range(2)]
    suggestions = generate_suggestions(assignments, roster, sites)

    critical = [s for s in suggestions if s.conflict_id == "cleaner-conflict-Ann|monday"]
    high = [s for s in suggestions if s.conflict_id == "cleaner-conflict-Bob|tuesday"]
    assert critical and high
    assert {(s.priority, s.impact) for s in critical} == {(100, ImpactTier.CRITICAL)}
    assert {(s.priority, s.impact) for s in high} == {(90, ImpactTier.HIGH)}
    assert max(suggestions.index(s) for s in critical) < min(suggestions.index(s) for s in high)


def test_shared_fix_keeps_the_security_copy(make_assignment, roster, sites):
    """Test a reassignment offered by two conflicts is kept under the higher-priority one."""
    hq = make_assignment(client="Acme", site="HQ", workers="Ann")
    vault = make_assignment(client="Bank", site="Vault", workers="Ann")
    suggestions = generate_suggestions([hq, vault], roster, sites)
    by_id = {s.id: s for s in suggestions}

    assert f"reassign-{vault.id}-Cara" not in by_id
    kept = by_id[f"security-reassign-{vault.id}-Cara"]
    assert kept.conflict_id == f"security-access-{vault.id}"
    assert kept.priority == 100


def test_rank_suggestions_keeps_best_ranked_duplicate():
    change = (FieldChange("a1", new_worker="Cara", replaces="Ann"),)
    weaker = Suggestion("weak", SuggestionType.CONFLICT_RESOLUTION, "t", "d", 90, ImpactTier.HIGH, change)
    stronger = Suggestion("strong", SuggestionType.CONFLICT_RESOLUTION, "t", "d", 100, ImpactTier.CRITICAL, change)

    assert [s.id for s in rank_suggestions([weaker, stronger])] == ["strong"]


def test_travel_grouping_leaves_no_new_overlap(make_assignment, roster, sites):
    """Test applying a grouping suggestion does not collide with the job in between."""
    assignments = [
        make_assignment(client="Acme", site="HQ", workers="Cara", start_time="08:00", hours=1),
        make_assignment(client="Bank", site="Vault", workers="Cara", start_time="09:00", hours=1),
        make_assignment(client="Acme", site="Warehouse", workers="Cara", start_time="10:00", hours=1),
    ]
    (suggestion,) = travel_grouping(_ctx(assignments, roster, sites))
    new_times = {c.assignment_id: c.new_time for c in suggestion.changes}
    moved = [a.merged({"start_time": new_times[a.id]}) if a.id in new_times else a for a in assignments]

    assert TimeOverlapDetector().detect(_ctx(moved, roster, sites)) == []
    assert not [c for c in detect_conflicts(moved, roster, sites) if c.id.startswith("time-conflict-")]


def test_travel_grouping_skipped_without_free_window(make_assignment, roster, sites):
    """Test no grouping is offered when the block cannot fit before midnight."""
    assignments = [
        make_assignment(client="Acme", site="HQ", workers="Cara", start_time="20:00", hours=2),
        make_assignment(client="Bank", site="Vault", workers="Cara", start_time="22:00", hours=1),
        make_assignment(client="Acme", site="Warehouse", workers="Cara", start_time="23:00", hours=1),
    ]
    assert travel_grouping(_ctx(assignments, roster, sites)) == []


def test_apply_changes(make_assignment):
    """Test field changes are applied by id and merged entries drop out."""
    first = make_assignment(workers=("Ann", "Bob"), hours=2)
    second = make_assignment(workers="Ann", hours=1)
    third = make_assignment(day="tuesday", workers="Cara")
    changes = [
        FieldChange(first.id, new_worker="Cara", replaces="Ann"),
        FieldChange(first.id, remove_worker="Bob", new_hours=3),
        FieldChange(second.id, merge_into=first.id),
        FieldChange(third.id, new_day="wednesday", new_time="07:30"),
    ]
    updated = apply_changes([first, second, third], changes)

    assert [a.id for a in updated] == [first.id, third.id]
    assert (updated[0].workers, updated[0].hours) == (("Cara",), 3)
    assert (updated[1].day, updated[1].start_time) == ("wednesday", "07:30")
    assert apply_changes([first], []) == [first]
