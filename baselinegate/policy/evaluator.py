from datetime import date
from typing import Iterable, List, Optional

from baselinegate.baseline.dataset import BaselineDataset, FeatureStatus
from baselinegate.models.feature_record import FeatureRecord
from baselinegate.models.violation import SEVERITY_RANK, Maturity, Severity, Violation
from baselinegate.policy.config import PolicyConfig

UNKNOWN_FEATURE_RULE = "baseline/unknown-feature"

# Baseline "widely available" follows "newly available" by 30 months
WIDELY_AVAILABLE_MONTHS = 30


def add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    # clamp the day for shorter months
    for day in (start.day, 30, 29, 28):
        try:
            return date(year, month, day)
        except ValueError:
            continue
    raise ValueError(f"Cannot add {months} months to {start}")


def build_guidance(feature_id: str, status: Optional[FeatureStatus], severity: Severity) -> str:
    if status is None:
        return (
            f"'{feature_id}' is not in the Baseline dataset, so browser support is unknown. "
            f"Treating it as limited availability; verify support or add a per-feature override."
        )

    if status.maturity == Maturity.LIMITED:
        return (
            f"{status.name} is not yet Baseline and has limited availability across browsers. "
            f"Provide a fallback or feature detection before relying on it."
        )

    since = f" since {status.low_date.isoformat()}" if status.low_date else ""

    if status.maturity == Maturity.NEWLY:
        guidance = f"{status.name} is newly available in Baseline{since}."
        if status.low_date:
            widely = add_months(status.low_date, WIDELY_AVAILABLE_MONTHS)
            guidance += f" Expected to become widely available around {widely.isoformat()}."
        if severity == Severity.ERROR:
            guidance += " Older browsers may lack support; add a fallback."
        return guidance

    return f"{status.name} is widely available in Baseline{since}."


def evaluate(record: FeatureRecord, config: PolicyConfig, dataset: BaselineDataset) -> Optional[Violation]:
    """
    Judge one feature record against the policy.

    Pure: the result depends only on the three arguments. A feature id
    missing from the dataset is evaluated as limited, never passed.
    """
    status = dataset.get(record.feature_id)
    maturity = status.maturity if status else Maturity.LIMITED

    severity = config.severity_for(record.feature_id, maturity)
    if severity == Severity.ALLOW:
        return None

    return Violation(
        feature_id=record.feature_id,
        feature_name=status.name if status else record.feature_id,
        maturity=maturity,
        severity=severity,
        file=record.file,
        line=record.line,
        column=record.column,
        rule_id=f"baseline/{maturity.value}" if status else UNKNOWN_FEATURE_RULE,
        guidance=build_guidance(record.feature_id, status, severity),
    )


def violation_sort_key(violation: Violation):
    return (
        -SEVERITY_RANK[violation.severity],
        violation.file,
        violation.line,
        violation.column,
        violation.feature_id,
    )


def evaluate_all(records: Iterable[FeatureRecord], config: PolicyConfig, dataset: BaselineDataset) -> List[Violation]:
    violations = []
    for record in records:
        violation = evaluate(record, config, dataset)
        if violation is not None:
            violations.append(violation)
    return sorted(violations, key=violation_sort_key)
