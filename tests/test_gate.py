from baselinegate.decision.gate import ComplianceGate, GateStatus, compliance_score
from baselinegate.models.violation import Maturity, Severity, Violation


def _violation(severity, feature_id="has", file="a.css", maturity=Maturity.NEWLY):
    return Violation(
        feature_id=feature_id,
        feature_name=feature_id,
        maturity=maturity,
        severity=severity,
        file=file,
        line=1,
        column=1,
        rule_id=f"baseline/{maturity.value}",
        guidance="",
    )


def test_no_violations_passes():
    decision = ComplianceGate().decide([], feature_count=12)

    assert decision.status == GateStatus.PASSED
    assert decision.passed
    assert decision.compliance_score == 100
    assert decision.violations == []


def test_any_error_fails():
    violations = [
        _violation(Severity.WARN),
        _violation(Severity.ERROR, "anchor-positioning", maturity=Maturity.LIMITED),
    ]

    decision = ComplianceGate().decide(violations, feature_count=4)

    assert decision.status == GateStatus.FAILED
    assert not decision.passed
    assert decision.compliance_score == 60
    assert "1 feature usages" in decision.reason


def test_warnings_only_pass_with_warnings():
    decision = ComplianceGate().decide([_violation(Severity.WARN), _violation(Severity.INFO)], feature_count=10)

    assert decision.status == GateStatus.PASSED_WITH_WARNINGS
    assert decision.passed
    assert decision.compliance_score == 91


def test_score_is_clamped_and_handles_empty_batches():
    errors = [_violation(Severity.ERROR) for _ in range(3)]

    assert compliance_score(errors, 2) == 0
    assert compliance_score([], 0) == 100


def test_summary_counts():
    violations = [
        _violation(Severity.ERROR, "anchor-positioning", "b.css", Maturity.LIMITED),
        _violation(Severity.WARN, "has", "a.css"),
        _violation(Severity.WARN, "has", "b.css"),
    ]

    summary = ComplianceGate().decide(violations, feature_count=5).summary

    assert summary == {
        "feature_count": 5,
        "total_violations": 3,
        "unique_features": 2,
        "by_severity": {"error": 1, "warn": 2, "info": 0},
        "by_file": {"a.css": 1, "b.css": 2},
        "by_maturity": {"limited": 1, "newly": 2},
    }


def test_to_dict():
    decision = ComplianceGate().decide([_violation(Severity.WARN)], feature_count=1)

    data = decision.to_dict()

    assert data["status"] == "PASSED_WITH_WARNINGS"
    assert data["violations"][0]["feature_id"] == "has"
