"""Tests for configuration loading."""

import json
from pathlib import Path

import pytest

from schedule_advisor.config import AdvisorConfig, config_from_dict, load_config

REPO_ROOT = Path(__file__).resolve().parent.parent


def test_defaults():
    cfg = AdvisorConfig()
    assert cfg.imbalance_threshold == 0.30
    assert cfg.soft_imbalance_threshold == 0.20
    assert cfg.limits.max_suggestions == 8
    assert cfg.priorities.security_access_denied == 100
    assert cfg.working_days == ["monday", "tuesday", "wednesday", "thursday", "friday"]


def test_shipped_config_matches_defaults():
    """Test the sample YAML at the repo root loads and mirrors the defaults."""
    assert load_config(REPO_ROOT / "advisor_config.yaml") == AdvisorConfig()


def test_load_yaml_overrides(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("""
imbalance_threshold: 0.4
working_days: [Monday, Saturday]
limits:
  max_suggestions: 5
priorities:
  location_overlap: 60
""")
    cfg = load_config(path)

    assert cfg.imbalance_threshold == 0.4
    assert cfg.working_days == ["monday", "saturday"]
    assert cfg.limits.max_suggestions == 5
    assert cfg.limits.travel == 3
    assert cfg.priorities.location_overlap == 60
    assert cfg.priorities.time_conflict == 85


def test_load_json(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"max_resolutions": 2, "limits": {"workload": 1}}))
    cfg = load_config(path)

    assert cfg.max_resolutions == 2
    assert cfg.limits.workload == 1


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == AdvisorConfig()


@pytest.mark.parametrize("data, message", [
    ({"imbalance_treshold": 0.3}, "Unknown keys in config"),
    ({"limits": {"max": 3}}, "Unknown keys in limits"),
    ({"priorities": {"urgent": 1}}, "Unknown keys in priorities"),
    ({"imbalance_threshold": 1.5}, "imbalance_threshold"),
    ({"grouping_start_hour": 24}, "grouping_start_hour"),
    ({"limits": {"max_suggestions": 0}}, "max_suggestions"),
])
def test_invalid_config_raises(data, message):
    """Test unknown keys and out-of-range values are rejected."""
    with pytest.raises(ValueError, match=message):
        config_from_dict(data)


def test_non_mapping_root_raises(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError, match="mapping"):
        load_config(path)


def test_priority_bands_follow_severity():
    """Test critical conflicts share the top band whatever their type."""
    scale = AdvisorConfig().priorities
    assert scale.for_conflict("critical", "cleaner_double_booking") == 100
    assert scale.for_conflict("high", "cleaner_double_booking") == 90
    assert scale.for_conflict("high", "time_conflict") == 85
    assert scale.for_conflict("low", "location_overlap") == 50
