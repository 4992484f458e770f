from typing import List

from baselinegate.models.feature_record import FeatureRecord


def deduplicate_records(records: List[FeatureRecord]) -> List[FeatureRecord]:
    """
    Drops later duplicates from one file's records.

    Deduplication key:
        (feature_id, line, column)

    The first record wins and input order is kept. Callers pass one file at
    a time; records from different files are never merged.
    """

    seen = set()
    unique = []

    for record in records:
        key = (record.feature_id, record.line, record.column)
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)

    return unique
