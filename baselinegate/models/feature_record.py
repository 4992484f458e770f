from dataclasses import dataclass
from enum import Enum

from baselinegate.models.occurrence import Occurrence


class ResolvedVia(str, Enum):
    DIRECT = "direct"
    VALUE_KEYED = "value-keyed"


@dataclass(frozen=True)
class FeatureRecord:
    feature_id: str
    source_occurrence: Occurrence
    resolved_via: ResolvedVia

    @property
    def file(self) -> str:
        return self.source_occurrence.file

    @property
    def line(self) -> int:
        return self.source_occurrence.line

    @property
    def column(self) -> int:
        return self.source_occurrence.column
