import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from baselinegate.baseline.dataset import (
    BaselineDataset,
    load_baseline_snapshot,
    load_bundled_snapshot,
    parse_dataset_payload,
)
from baselinegate.decision.gate import ComplianceGate
from baselinegate.errors import PolicyConfigError
from baselinegate.mappings.loader import default_mapping_tables
from baselinegate.orchestrator.batch import run_batch
from baselinegate.policy.config import load_policy_config
from baselinegate.settings import load_settings
from baselinegate.telemetry import emit_exception_telemetry, init_telemetry

# --- AUDIT LOGGING ---
logging.basicConfig(
    filename="audit.log",
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
audit_logger = logging.getLogger("audit")

tags_metadata = [
    {
        "name": "Scanning",
        "description": "Scan style sheets, scripts and markup against a **Baseline** policy.",
    },
    {
        "name": "System",
        "description": "Health checks and operational metadata.",
    },
]

app = FastAPI(
    title="Baselinegate Scan Service",
    description="""
    **Baseline compliance gate** for web source files.

    * **Detection:** CSS, JavaScript/TypeScript and HTML feature usage.
    * **Mapping:** canonical web-features identifiers.
    * **Policy:** per-feature or threshold-based severities, pass/fail verdict.
    """,
    version="1.0.0",
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc"
)

settings = load_settings()
init_telemetry()

_dataset: Optional[BaselineDataset] = None


def get_dataset() -> BaselineDataset:
    """Configured snapshot, or the bundled one; loaded on first use."""
    global _dataset
    if _dataset is None:
        if settings.snapshot_path:
            _dataset = load_baseline_snapshot(settings.snapshot_path)
        else:
            _dataset = load_bundled_snapshot()
    return _dataset


@app.middleware("http")
async def audit_middleware(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    client = request.client.host if request.client else "unknown"
    audit_logger.info(
        f"METHOD={request.method} PATH={request.url.path} "
        f"STATUS={response.status_code} CLIENT={client} "
        f"DURATION={process_time:.4f}s"
    )
    return response


# --- DATA MODELS ---
class SourceFileModel(BaseModel):
    path: str
    content: str


class ScanRequest(BaseModel):
    files: List[SourceFileModel]
    policy: Dict[str, Any] = {}
    dataset: Optional[Any] = None


class ScanResponse(BaseModel):
    status: str
    compliance_score: int
    reason: str
    summary: Dict[str, Any]
    violations: List[Dict[str, Any]]
    errors: List[Dict[str, Any]]
    files_scanned: int


# --- ENDPOINTS ---

@app.post("/scan", response_model=ScanResponse, tags=["Scanning"])
def scan_files(request: ScanRequest):
    """
    Scan submitted files and return the gate verdict with every violation.
    """
    try:
        config = load_policy_config(request.policy)
    except PolicyConfigError as e:
        raise HTTPException(status_code=422, detail={"code": e.code, "errors": e.errors})

    try:
        dataset = (
            parse_dataset_payload(request.dataset, source="request")
            if request.dataset is not None
            else get_dataset()
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail={"code": "INVALID_DATASET", "errors": [str(e)]})

    try:
        result = run_batch(
            [(f.path, f.content) for f in request.files],
            config,
            dataset,
            tables=default_mapping_tables(),
            max_workers=settings.max_workers,
        )
        decision = ComplianceGate().decide(result.violations, result.feature_count)
    except Exception as e:
        audit_logger.error(f"ENGINE_ERROR: {type(e).__name__}")
        emit_exception_telemetry(e)
        raise HTTPException(status_code=500, detail="Scan failed")

    return {
        "status": decision.status.value,
        "compliance_score": decision.compliance_score,
        "reason": decision.reason,
        "summary": decision.summary,
        "violations": [v.to_dict() for v in decision.violations],
        "errors": [e.to_dict() for e in result.errors],
        "files_scanned": result.files_scanned,
    }


@app.get("/health", tags=["System"])
def health():
    return {
        "status": "online",
        "modules": ["Scanners", "Mappings", "Policy", "Gate", "AuditLog"],
    }
