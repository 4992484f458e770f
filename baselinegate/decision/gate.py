from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from baselinegate.models.violation import Severity, Violation


class GateStatus(str, Enum):
    PASSED = "PASSED"
    PASSED_WITH_WARNINGS = "PASSED_WITH_WARNINGS"
    FAILED = "FAILED"


# Weight of one violation against the compliance score
SEVERITY_WEIGHTS = {
    Severity.ERROR: 1.0,
    Severity.WARN: 0.6,
    Severity.INFO: 0.3,
}


@dataclass(frozen=True)
class GateDecision:
    """
    Pass/fail verdict for a batch.
    This is a decision support object for reporters and CI exit codes.
    """
    status: GateStatus
    compliance_score: int
    reason: str
    summary: Dict[str, Any]
    violations: List[Violation] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status != GateStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "compliance_score": self.compliance_score,
            "reason": self.reason,
            "summary": self.summary,
            "violations": [v.to_dict() for v in self.violations],
        }


def compliance_score(violations: List[Violation], feature_count: int) -> int:
    if feature_count <= 0:
        return 100
    weighted = sum(SEVERITY_WEIGHTS.get(v.severity, 0.0) for v in violations)
    return max(0, round((1 - weighted / feature_count) * 100))


def summarize(violations: List[Violation], feature_count: int) -> Dict[str, Any]:
    by_severity = Counter(v.severity.value for v in violations)
    return {
        "feature_count": feature_count,
        "total_violations": len(violations),
        "unique_features": len({v.feature_id for v in violations}),
        "by_severity": {s.value: by_severity.get(s.value, 0) for s in SEVERITY_WEIGHTS},
        "by_file": dict(sorted(Counter(v.file for v in violations).items())),
        "by_maturity": dict(sorted(Counter(v.maturity.value for v in violations).items())),
    }


class ComplianceGate:
    """
    Determines the final verdict from the evaluated violations.
    Any error fails the gate; warnings and infos alone pass with warnings.
    """

    def decide(self, violations: List[Violation], feature_count: int) -> GateDecision:
        score = compliance_score(violations, feature_count)
        summary = summarize(violations, feature_count)

        if not violations:
            return GateDecision(
                status=GateStatus.PASSED,
                compliance_score=score,
                reason="No Baseline violations found.",
                summary=summary,
            )

        errors = summary["by_severity"][Severity.ERROR.value]
        if errors:
            return GateDecision(
                status=GateStatus.FAILED,
                compliance_score=score,
                reason=f"{errors} feature usages violate the Baseline policy.",
                summary=summary,
                violations=violations,
            )

        return GateDecision(
            status=GateStatus.PASSED_WITH_WARNINGS,
            compliance_score=score,
            reason=f"{len(violations)} feature usages need attention but none block.",
            summary=summary,
            violations=violations,
        )
