import threading

import pytest

from baselinegate.baseline.dataset import BaselineDataset
from baselinegate.errors import PolicyConfigError
from baselinegate.models.violation import Severity
from baselinegate.orchestrator.batch import run_batch
from baselinegate.resilience.error_log import ErrorLog
from baselinegate.scanners.registry import ScannerRegistry

from fixtures.web_sources import GRID_CSS, MALFORMED_CSS, WEB_FEATURES

DATASET = BaselineDataset.from_web_features(WEB_FEATURES)

MIXED_SOURCES = [
    ("b.css", ".x:has(img) { display: grid; }"),
    ("a.css", ".y { view-transition-name: hero; }\n.z:has(p) {}"),
]


class ExplodingRegistry(ScannerRegistry):
    def scanner_for(self, file_path):
        if "boom" in file_path:
            raise RuntimeError("scanner lookup exploded")
        return super().scanner_for(file_path)


def test_clean_batch():
    result = run_batch([("a.css", GRID_CSS)], {}, DATASET)

    assert result.violations == []
    assert result.feature_count == 2
    assert result.files_scanned == 1
    assert result.errors == []
    assert result.cancelled is False


def test_violations_are_sorted_by_severity_then_position():
    result = run_batch(MIXED_SOURCES, {}, DATASET)

    assert [(v.severity, v.file, v.line, v.feature_id) for v in result.violations] == [
        (Severity.ERROR, "a.css", 1, "view-transitions"),
        (Severity.WARN, "a.css", 2, "has"),
        (Severity.WARN, "b.css", 1, "has"),
    ]


def test_records_follow_submission_order():
    result = run_batch(MIXED_SOURCES, {}, DATASET, max_workers=4)

    assert [(r.file, r.feature_id) for r in result.records] == [
        ("b.css", "has"),
        ("b.css", "grid"),
        ("a.css", "view-transitions"),
        ("a.css", "has"),
    ]


def test_result_does_not_depend_on_worker_count():
    sources = MIXED_SOURCES * 10

    single = run_batch(sources, {}, DATASET, max_workers=1)
    many = run_batch(sources, {}, DATASET, max_workers=8)

    assert single.violations == many.violations
    assert single.records == many.records


def test_parse_errors_are_recorded_and_scanning_continues():
    result = run_batch([("broken.css", MALFORMED_CSS), ("a.css", GRID_CSS)], {}, DATASET)

    assert result.files_scanned == 2
    assert [r.feature_id for r in result.records] == ["grid", "grid", "flexbox-gap"]
    assert len(result.errors) == 3
    assert all(e.type == "ParseError" for e in result.errors)
    assert all(e.metadata["file"] == "broken.css" for e in result.errors)
    assert all(e.metadata["parser"] == "css" for e in result.errors)


def test_worker_failure_is_isolated():
    log = ErrorLog()
    registry = ExplodingRegistry()

    result = run_batch(
        [("boom.css", GRID_CSS), ("a.css", GRID_CSS)], {}, DATASET, error_log=log, registry=registry
    )

    assert result.files_scanned == 1
    assert result.feature_count == 2
    assert len(log) == 1
    entry = log.entries()[0]
    assert entry.type == "RuntimeError"
    assert entry.metadata == {"file": "boom.css", "stage": "scan"}


def test_invalid_policy_fails_before_any_file_is_read():
    consumed = []

    def sources():
        consumed.append(True)
        yield ("a.css", GRID_CSS)

    with pytest.raises(PolicyConfigError):
        run_batch(sources(), {"enforcementMode": "strict"}, DATASET)

    assert consumed == []


def test_cancel_before_start():
    cancel = threading.Event()
    cancel.set()

    result = run_batch([("a.css", GRID_CSS)], {}, DATASET, cancel_event=cancel)

    assert result.cancelled is True
    assert result.files_scanned == 0
    assert result.violations == []


def test_cancel_stops_submission_but_finishes_in_flight_files():
    cancel = threading.Event()

    def sources():
        yield ("a.css", GRID_CSS)
        cancel.set()
        yield ("b.css", GRID_CSS)
        yield ("c.css", GRID_CSS)

    result = run_batch(sources(), {}, DATASET, cancel_event=cancel)

    assert result.cancelled is True
    assert result.files_scanned == 1
    assert {r.file for r in result.records} == {"a.css"}


def test_files_without_a_scanner_are_counted_but_empty():
    result = run_batch([("README.md", "# display: grid"), ("a.css", GRID_CSS)], {}, DATASET)

    assert result.files_scanned == 2
    assert {r.file for r in result.records} == {"a.css"}


def test_to_dict():
    result = run_batch(MIXED_SOURCES, {}, DATASET)

    data = result.to_dict()

    assert data["feature_count"] == 4
    assert data["files_scanned"] == 2
    assert data["violations"][0]["severity"] == "error"
    assert data["cancelled"] is False
