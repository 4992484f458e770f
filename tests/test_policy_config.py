import json

import pytest
from pydantic import ValidationError

from baselinegate.errors import PolicyConfigError
from baselinegate.models.violation import Maturity, Severity
from baselinegate.policy.config import (
    EnforcementMode,
    PolicyConfig,
    load_policy_config,
    load_policy_file,
)


def test_defaults():
    config = load_policy_config({})

    assert config.enforcement_mode == EnforcementMode.PER_FEATURE
    assert config.per_feature_overrides == {}
    assert config.severity_thresholds == {
        Maturity.WIDELY: Severity.ALLOW,
        Maturity.NEWLY: Severity.WARN,
        Maturity.LIMITED: Severity.ERROR,
    }
    assert load_policy_config(None) == config


def test_camel_case_and_snake_case_keys():
    camel = load_policy_config({
        "enforcementMode": "global-threshold",
        "severityThresholds": {"newly": "error"},
    })
    snake = load_policy_config({
        "enforcement_mode": "global-threshold",
        "severity_thresholds": {"newly": "error"},
    })

    assert camel == snake
    assert camel.severity_thresholds[Maturity.NEWLY] == Severity.ERROR
    # unspecified levels keep their defaults
    assert camel.severity_thresholds[Maturity.LIMITED] == Severity.ERROR
    assert camel.severity_thresholds[Maturity.WIDELY] == Severity.ALLOW


def test_every_problem_is_reported_at_once():
    with pytest.raises(PolicyConfigError) as exc:
        load_policy_config({
            "enforcementMode": "sometimes",
            "severityThresholds": {"newly": "explode"},
            "perFeatureOverrides": {"grid": "loud"},
            "colour": "blue",
        })

    errors = exc.value.errors
    assert len(errors) == 4
    assert any(e.startswith("enforcementMode") for e in errors)
    assert any(e.startswith("severityThresholds.newly") for e in errors)
    assert any(e.startswith("perFeatureOverrides.grid") for e in errors)
    assert any(e.startswith("colour") for e in errors)
    assert exc.value.code == "VALIDATION_ERROR"


def test_blank_feature_ids_are_rejected():
    with pytest.raises(PolicyConfigError) as exc:
        load_policy_config({"perFeatureOverrides": {"  ": "allow"}})

    assert "non-empty" in exc.value.errors[0]


def test_non_mapping_policy_is_rejected():
    with pytest.raises(PolicyConfigError):
        load_policy_config(["per-feature"])


def test_config_is_immutable():
    config = load_policy_config({})

    with pytest.raises(ValidationError):
        config.enforcement_mode = EnforcementMode.GLOBAL_THRESHOLD


def test_overrides_apply_in_per_feature_mode():
    config = load_policy_config({"perFeatureOverrides": {"has": "allow", "grid": "error"}})

    assert config.severity_for("has", Maturity.NEWLY) == Severity.ALLOW
    assert config.severity_for("grid", Maturity.WIDELY) == Severity.ERROR
    assert config.severity_for("subgrid", Maturity.NEWLY) == Severity.WARN


def test_overrides_are_ignored_in_global_threshold_mode():
    config = load_policy_config({
        "enforcementMode": "global-threshold",
        "perFeatureOverrides": {"has": "allow"},
    })

    assert config.severity_for("has", Maturity.NEWLY) == Severity.WARN


def test_policy_file(tmp_path):
    path = tmp_path / ".baseline.json"
    path.write_text(json.dumps({"perFeatureOverrides": {"has": "info"}}))

    config = load_policy_file(path)

    assert isinstance(config, PolicyConfig)
    assert config.per_feature_overrides == {"has": Severity.INFO}


def test_policy_file_with_invalid_json(tmp_path):
    path = tmp_path / ".baseline.json"
    path.write_text("{ not json")

    with pytest.raises(PolicyConfigError) as exc:
        load_policy_file(path)

    assert "invalid JSON" in exc.value.errors[0]


def test_missing_policy_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_policy_file(tmp_path / "absent.json")
