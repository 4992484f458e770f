import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from baselinegate.baseline.dataset import (
    BaselineDataset,
    fetch_baseline_dataset,
    load_baseline_snapshot,
    load_bundled_snapshot,
)
from baselinegate.decision.gate import ComplianceGate, GateDecision, GateStatus
from baselinegate.errors import CircuitOpenError, TransientIOError
from baselinegate.mappings.loader import default_mapping_tables, load_mapping_tables
from baselinegate.orchestrator.batch import BatchResult, run_batch
from baselinegate.policy.config import load_policy_config, load_policy_file
from baselinegate.resilience.circuit_breaker import CircuitBreakerRegistry
from baselinegate.resilience.error_log import ErrorLog
from baselinegate.runtime.supervisor import EXIT_FAILURE, EXIT_OK, run_supervised
from baselinegate.scanners.registry import ScannerRegistry
from baselinegate.settings import Settings, load_settings
from baselinegate.sources.loader import load_sources
from baselinegate.telemetry import init_telemetry

logger = logging.getLogger("baselinegate.cli")

DEFAULT_POLICY_FILE = ".baseline.json"
SKIPPED_DIRECTORIES = frozenset({".git", "node_modules", "dist", "build", "__pycache__", ".venv"})

# ANSI Colors
ERROR = "\033[91m"
WARN = "\033[93m"
OK = "\033[92m"
RESET = "\033[0m"

SEVERITY_COLORS = {"error": ERROR, "warn": WARN, "info": RESET}


def discover_files(paths: List[str], extensions: List[str]) -> List[Path]:
    """Expand directories into the source files a scanner can handle, sorted."""
    found = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for root, dirs, files in os.walk(path):
                dirs[:] = sorted(d for d in dirs if d not in SKIPPED_DIRECTORIES)
                for name in sorted(files):
                    if name.lower().endswith(tuple(extensions)):
                        found.append(Path(root) / name)
        else:
            found.append(path)
    return found


def load_dataset(args, settings: Settings, error_log: ErrorLog) -> BaselineDataset:
    if args.fetch:
        registry = CircuitBreakerRegistry(**settings.breaker_options())
        try:
            return fetch_baseline_dataset(
                settings.dataset_url,
                timeout=settings.http_timeout,
                breaker=registry.get("baseline-dataset"),
                max_retries=settings.max_retries,
                retry_delay=settings.retry_delay,
                error_log=error_log,
            )
        except (TransientIOError, CircuitOpenError) as e:
            logger.warning(f"Dataset fetch failed ({type(e).__name__}); using bundled snapshot")

    snapshot = args.snapshot or settings.snapshot_path
    if snapshot:
        return load_baseline_snapshot(snapshot)
    return load_bundled_snapshot()


def load_policy(args, settings: Settings):
    if args.policy:
        return load_policy_file(args.policy)
    if Path(DEFAULT_POLICY_FILE).exists():
        return load_policy_file(DEFAULT_POLICY_FILE)
    return load_policy_config({"enforcementMode": settings.enforcement_mode})


def scan(args, settings: Settings) -> GateDecision:
    error_log = ErrorLog()
    config = load_policy(args, settings)
    tables = load_mapping_tables(args.mappings) if args.mappings else default_mapping_tables()
    registry = ScannerRegistry(tables)

    files = discover_files(args.paths, registry.supported_extensions())
    sources = load_sources(files, error_log=error_log, max_retries=settings.max_retries)
    dataset = load_dataset(args, settings, error_log)

    result = run_batch(
        sources,
        config,
        dataset,
        tables=tables,
        max_workers=args.workers or settings.max_workers,
        error_log=error_log,
        registry=registry,
    )
    decision = ComplianceGate().decide(result.violations, result.feature_count)

    if args.json:
        print(json.dumps({**decision.to_dict(), "errors": [e.to_dict() for e in result.errors]}, indent=2))
    else:
        print_report(decision, result)
    return decision


def print_report(decision: GateDecision, result: BatchResult):
    for v in decision.violations:
        color = SEVERITY_COLORS.get(v.severity.value, RESET)
        print(f"{v.file}:{v.line}:{v.column} {color}{v.severity.value}{RESET} {v.feature_id} [{v.rule_id}]")
        print(f"    {v.guidance}")

    for entry in result.errors:
        location = entry.metadata.get("file", "")
        print(f"{location} {WARN}skipped{RESET} {entry.type}: {entry.message}")

    status_color = ERROR if decision.status == GateStatus.FAILED else OK
    print(f"\n{status_color}{decision.status.value}{RESET} "
          f"(score {decision.compliance_score}, {result.files_scanned} files, "
          f"{result.feature_count} features) - {decision.reason}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="baselinegate",
        description="Check web source files against Baseline feature availability.",
    )
    parser.add_argument("paths", nargs="+", help="Files or directories to scan")
    parser.add_argument("--policy", help=f"Policy JSON file (default: {DEFAULT_POLICY_FILE} if present)")
    parser.add_argument("--snapshot", help="Baseline dataset snapshot (JSON)")
    parser.add_argument("--fetch", action="store_true", help="Fetch the dataset from BASELINEGATE_DATASET_URL")
    parser.add_argument("--mappings", help="Extra feature mapping tables (JSON)")
    parser.add_argument("--workers", type=int, help="Scanner threads")
    parser.add_argument("--json", action="store_true", help="Print the decision as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    init_telemetry()

    outcome = run_supervised(lambda: scan(args, load_settings()))
    if not outcome.ok:
        print(f"{ERROR}baselinegate: {outcome.error}{RESET}", file=sys.stderr)
        return outcome.exit_code
    return EXIT_OK if outcome.value.passed else EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
