import json
import logging
import re
import time
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import requests

from baselinegate.models.violation import Maturity
from baselinegate.resilience.circuit_breaker import CircuitBreaker
from baselinegate.resilience.error_log import ErrorLog
from baselinegate.resilience.wrapper import call_resilient

logger = logging.getLogger("baselinegate.baseline")

# web-features: status.baseline is "high", "low" or false
WEB_FEATURES_STATUS = {
    "high": Maturity.WIDELY,
    "low": Maturity.NEWLY,
    False: Maturity.LIMITED,
}

# webstatus.dev: baseline.status
WEBSTATUS_STATUS = {
    "widely": Maturity.WIDELY,
    "high": Maturity.WIDELY,
    "newly": Maturity.NEWLY,
    "low": Maturity.NEWLY,
    "limited": Maturity.LIMITED,
    "false": Maturity.LIMITED,
}

MAX_PAGES = 50

SNAPSHOT_DIR = Path(__file__).parent / "snapshots"
BUNDLED_SNAPSHOT = "baseline-2025-06.json"

_DATE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


def parse_baseline_date(value: Any) -> Optional[date]:
    """Accepts ISO dates, including ranged ones like "≤2021-04-02"."""
    if not isinstance(value, str):
        return None
    match = _DATE.search(value)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", name.lower())
    slug = re.sub(r"[\s-]+", "-", slug)
    return slug.strip("-")


def _section(entry: Mapping[str, Any], key: str, feature_id: Any) -> Mapping[str, Any]:
    value = entry.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Feature {feature_id!r}: '{key}' must be an object, got {type(value).__name__}")
    return value


def _check_scalar(value: Any, field: str, feature_id: Any):
    if value is not None and not isinstance(value, (str, bool)):
        raise ValueError(f"Feature {feature_id!r}: '{field}' must be a string, got {type(value).__name__}")


@dataclass(frozen=True)
class FeatureStatus:
    feature_id: str
    name: str
    maturity: Maturity
    low_date: Optional[date] = None
    high_date: Optional[date] = None


class BaselineDataset:
    """
    Read-only view of Baseline support status, keyed by feature id.
    Built once and shared by every scan in a batch.
    """

    def __init__(self, features: Iterable[FeatureStatus], source: str = "inline"):
        self._features = MappingProxyType({f.feature_id: f for f in features})
        self.source = source

    def get(self, feature_id: str) -> Optional[FeatureStatus]:
        return self._features.get(feature_id)

    def __contains__(self, feature_id: str) -> bool:
        return feature_id in self._features

    def __len__(self) -> int:
        return len(self._features)

    def feature_ids(self) -> List[str]:
        return sorted(self._features)

    @classmethod
    def from_web_features(cls, features: Mapping[str, Any], source: str = "web-features") -> "BaselineDataset":
        statuses = []
        for feature_id, feature in features.items():
            if not isinstance(feature, Mapping) or not feature.get("name"):
                continue
            if not isinstance(feature["name"], str):
                raise ValueError(f"Feature {feature_id!r}: 'name' must be a string")
            status = _section(feature, "status", feature_id)
            _check_scalar(status.get("baseline"), "status.baseline", feature_id)
            # Missing or unrecognised status is treated as not yet Baseline
            maturity = WEB_FEATURES_STATUS.get(status.get("baseline"), Maturity.LIMITED)
            statuses.append(FeatureStatus(
                feature_id=feature_id,
                name=feature["name"],
                maturity=maturity,
                low_date=parse_baseline_date(status.get("baseline_low_date")),
                high_date=parse_baseline_date(status.get("baseline_high_date")),
            ))
        logger.info(f"Loaded {len(statuses)} features from {source}")
        return cls(statuses, source)

    @classmethod
    def from_webstatus(cls, payload: Any, source: str = "webstatus") -> "BaselineDataset":
        items = payload.get("data", []) if isinstance(payload, Mapping) else payload
        statuses = []
        for item in items or []:
            if not isinstance(item, Mapping) or not item.get("name"):
                continue
            if not isinstance(item["name"], str):
                raise ValueError(f"Feature name must be a string, got {type(item['name']).__name__}")
            feature_id = item.get("feature_id") or item.get("id") or slugify(item["name"])
            if not isinstance(feature_id, str):
                raise ValueError(f"Feature id must be a string, got {type(feature_id).__name__}")
            baseline = _section(item, "baseline", feature_id)
            raw_status = baseline.get("status")
            _check_scalar(raw_status, "baseline.status", feature_id)
            maturity = WEBSTATUS_STATUS.get(str(raw_status).lower(), Maturity.LIMITED)
            statuses.append(FeatureStatus(
                feature_id=feature_id,
                name=item["name"],
                maturity=maturity,
                low_date=parse_baseline_date(baseline.get("low_date")),
                high_date=parse_baseline_date(baseline.get("high_date")),
            ))
        logger.info(f"Loaded {len(statuses)} features from {source}")
        return cls(statuses, source)


def parse_dataset_payload(payload: Any, source: str = "inline") -> BaselineDataset:
    """
    Detect the payload format:
      - web-features package data   {"features": {id: {...}}, ...}
      - web-features feature map    {id: {"name", "status"}}
      - webstatus.dev API response  {"data": [...]} or a bare list
    """
    if isinstance(payload, list):
        return BaselineDataset.from_webstatus(payload, source)
    if not isinstance(payload, Mapping):
        raise ValueError(f"Unrecognised baseline dataset payload: {type(payload).__name__}")
    if isinstance(payload.get("data"), list):
        return BaselineDataset.from_webstatus(payload, source)
    if isinstance(payload.get("features"), Mapping):
        return BaselineDataset.from_web_features(payload["features"], source)
    if all(isinstance(v, Mapping) for v in payload.values()):
        return BaselineDataset.from_web_features(payload, source)
    raise ValueError("Unrecognised baseline dataset payload")


def load_baseline_snapshot(path: Path) -> BaselineDataset:
    """
    Load a dataset snapshot from disk.
    Snapshots are static and reviewable.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Baseline snapshot not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    return parse_dataset_payload(payload, source=str(path))


def load_bundled_snapshot(filename: str = BUNDLED_SNAPSHOT) -> BaselineDataset:
    return load_baseline_snapshot(SNAPSHOT_DIR / filename)


def fetch_baseline_dataset(
    url: str,
    timeout: float = 10.0,
    session: Optional[requests.Session] = None,
    breaker: Optional[CircuitBreaker] = None,
    max_retries: int = 3,
    retry_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    error_log: Optional[ErrorLog] = None,
) -> BaselineDataset:
    """
    Fetch the dataset over HTTP, following webstatus.dev page tokens.

    Each page request goes through retry, a per-attempt timeout and the
    optional circuit breaker.
    """
    http = session or requests.Session()
    items: List[Dict[str, Any]] = []
    page_token: Optional[str] = None

    for _ in range(MAX_PAGES):
        params = {"page_token": page_token} if page_token else None

        def get_page():
            response = http.get(url, params=params, timeout=timeout, headers={"Accept": "application/json"})
            response.raise_for_status()
            return response.json()

        payload = call_resilient(
            get_page,
            context=f"baseline dataset fetch {url}",
            breaker=breaker,
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            sleep=sleep,
            error_log=error_log,
        )

        if not isinstance(payload, Mapping) or "data" not in payload:
            # Not paginated: a whole snapshot in one response
            return parse_dataset_payload(payload, source=url)

        items.extend(payload.get("data") or [])
        page_token = (payload.get("metadata") or {}).get("next_page_token")
        if not page_token:
            break
    else:
        logger.warning(f"Stopped following {url} after {MAX_PAGES} pages")

    return BaselineDataset.from_webstatus(items, source=url)
