from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class Maturity(str, Enum):
    WIDELY = "widely"
    NEWLY = "newly"
    LIMITED = "limited"


class Severity(str, Enum):
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    ALLOW = "allow"


# Higher rank sorts first in reports.
SEVERITY_RANK = {
    Severity.ERROR: 3,
    Severity.WARN: 2,
    Severity.INFO: 1,
    Severity.ALLOW: 0,
}


@dataclass(frozen=True)
class Violation:
    feature_id: str
    feature_name: str
    maturity: Maturity
    severity: Severity
    file: str
    line: int
    column: int
    rule_id: str
    guidance: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feature_id": self.feature_id,
            "feature_name": self.feature_name,
            "maturity": self.maturity.value,
            "severity": self.severity.value,
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "rule_id": self.rule_id,
            "guidance": self.guidance,
        }
