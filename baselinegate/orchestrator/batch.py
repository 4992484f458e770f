import concurrent.futures
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from baselinegate.baseline.dataset import BaselineDataset
from baselinegate.errors import ParseError
from baselinegate.mappings.loader import default_mapping_tables
from baselinegate.mappings.resolver import resolve_all
from baselinegate.mappings.tables import MappingTables
from baselinegate.models.feature_record import FeatureRecord
from baselinegate.models.violation import Violation
from baselinegate.orchestrator.dedup import deduplicate_records
from baselinegate.policy.config import PolicyConfig, load_policy_config
from baselinegate.policy.evaluator import evaluate_all
from baselinegate.resilience.error_log import ErrorEntry, ErrorLog
from baselinegate.scanners.registry import ScannerRegistry
from baselinegate.telemetry import emit_exception_telemetry, emit_scan_telemetry

logger = logging.getLogger("baselinegate.orchestrator")

DEFAULT_MAX_WORKERS = 4


@dataclass
class FileScan:
    path: str
    records: List[FeatureRecord] = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)


@dataclass
class BatchResult:
    violations: List[Violation]
    records: List[FeatureRecord]
    errors: List[ErrorEntry]
    files_scanned: int
    cancelled: bool = False

    @property
    def feature_count(self) -> int:
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "violations": [v.to_dict() for v in self.violations],
            "feature_count": self.feature_count,
            "errors": [e.to_dict() for e in self.errors],
            "files_scanned": self.files_scanned,
            "cancelled": self.cancelled,
        }


def scan_source(path: str, text: str, registry: ScannerRegistry, tables: MappingTables) -> FileScan:
    """
    Per-file pipeline: scan, resolve, deduplicate.
    Files without a matching scanner produce an empty result.
    """
    scanner = registry.scanner_for(path)
    if scanner is None:
        return FileScan(path)

    result = scanner.scan(text, path)
    records = deduplicate_records(resolve_all(result.occurrences, tables))
    logger.debug(f"{path}: {len(result.occurrences)} occurrences, {len(records)} features")
    return FileScan(path, records, result.errors)


def run_batch(
    sources: Iterable[Tuple[str, str]],
    config: Union[PolicyConfig, Mapping[str, Any], None],
    dataset: BaselineDataset,
    tables: Optional[MappingTables] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    cancel_event: Optional[threading.Event] = None,
    error_log: Optional[ErrorLog] = None,
    registry: Optional[ScannerRegistry] = None,
) -> BatchResult:
    """
    Scan `(path, text)` pairs on a bounded thread pool and evaluate the
    results against the policy.

    - The policy is validated before any file is submitted.
    - At most `2 * max_workers` files are in flight at once.
    - Setting `cancel_event` stops submission; in-flight files complete.
    - A failing file is recorded in the error log and never aborts the batch.
    - Records and violations come out in a stable order regardless of
      which worker finished first.
    """
    if not isinstance(config, PolicyConfig):
        config = load_policy_config(config)

    started = time.monotonic()
    tables = tables or default_mapping_tables()
    registry = registry or ScannerRegistry(tables)
    error_log = error_log if error_log is not None else ErrorLog()

    scans: Dict[int, FileScan] = {}
    in_flight: Dict[concurrent.futures.Future, Tuple[int, str]] = {}
    max_in_flight = max(1, max_workers) * 2
    cancelled = False

    def collect(done):
        for future in done:
            index, path = in_flight.pop(future)
            try:
                scans[index] = future.result()
            except Exception as e:
                logger.error(f"Scan failed for {path}: {type(e).__name__}: {e}")
                error_log.record(e, file=path, stage="scan")
                emit_exception_telemetry(e)

    with concurrent.futures.ThreadPoolExecutor(
        max_workers=max(1, max_workers), thread_name_prefix="baselinegate-scan"
    ) as executor:
        for index, (path, text) in enumerate(sources):
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                logger.info(f"Cancellation requested; stopped after submitting {index} files")
                break

            while len(in_flight) >= max_in_flight:
                done, _ = concurrent.futures.wait(in_flight, return_when=concurrent.futures.FIRST_COMPLETED)
                collect(done)

            future = executor.submit(scan_source, path, text, registry, tables)
            in_flight[future] = (index, path)

        if in_flight:
            done, _ = concurrent.futures.wait(in_flight)
            collect(done)

    records: List[FeatureRecord] = []
    for index in sorted(scans):
        scan = scans[index]
        for error in scan.errors:
            error_log.record(error, file=error.file, line=error.line, column=error.column, parser=error.parser)
        records.extend(scan.records)

    violations = evaluate_all(records, config, dataset)
    duration_ms = int((time.monotonic() - started) * 1000)

    logger.info(
        f"Scanned {len(scans)} files: {len(records)} features, "
        f"{len(violations)} violations, {len(error_log)} errors in {duration_ms}ms"
    )
    emit_scan_telemetry(len(scans), len(violations), len(error_log), duration_ms, cancelled)

    return BatchResult(
        violations=violations,
        records=records,
        errors=error_log.entries(),
        files_scanned=len(scans),
        cancelled=cancelled,
    )
