from typing import Iterable, List, Optional

from baselinegate.mappings.tables import (
    CASE_SENSITIVE_KINDS,
    ByValue,
    Direct,
    MappingTables,
    normalize_key,
)
from baselinegate.models.feature_record import FeatureRecord, ResolvedVia
from baselinegate.models.occurrence import Occurrence


def resolve(occurrence: Occurrence, tables: MappingTables) -> Optional[FeatureRecord]:
    """
    Resolve one occurrence, most specific first:
      1. exact (name, value) pair in the value-keyed sub-table
      2. direct mapping for the name alone
      3. nothing (the occurrence is dropped)
    """
    case_sensitive = occurrence.kind in CASE_SENSITIVE_KINDS
    entry = tables.table_for(occurrence.kind).get(normalize_key(occurrence.name, case_sensitive))
    if entry is None:
        return None

    if isinstance(entry, Direct):
        return FeatureRecord(entry.feature_id, occurrence, ResolvedVia.DIRECT)

    if isinstance(entry, ByValue):
        if occurrence.associated_value is not None:
            feature_id = entry.values.get(normalize_key(occurrence.associated_value, case_sensitive))
            if feature_id:
                return FeatureRecord(feature_id, occurrence, ResolvedVia.VALUE_KEYED)
        if entry.default:
            return FeatureRecord(entry.default, occurrence, ResolvedVia.DIRECT)
        return None

    raise TypeError(f"Unknown mapping entry type: {type(entry).__name__}")


def resolve_all(occurrences: Iterable[Occurrence], tables: MappingTables) -> List[FeatureRecord]:
    records = []
    for occurrence in occurrences:
        record = resolve(occurrence, tables)
        if record is not None:
            records.append(record)
    return records
