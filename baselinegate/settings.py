import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

load_dotenv()

ENV_PREFIX = "BASELINEGATE_"
DEFAULT_DATASET_URL = "https://api.webstatus.dev/v1/features"


@dataclass(frozen=True)
class Settings:
    max_workers: int = 4
    max_retries: int = 3
    retry_delay: float = 1.0
    http_timeout: float = 10.0
    breaker_failure_threshold: int = 5
    breaker_recovery_timeout: float = 30.0
    breaker_monitoring_period: float = 60.0
    dataset_url: str = DEFAULT_DATASET_URL
    snapshot_path: Optional[str] = None
    enforcement_mode: str = "per-feature"

    def breaker_options(self) -> dict:
        return {
            "failure_threshold": self.breaker_failure_threshold,
            "recovery_timeout": self.breaker_recovery_timeout,
            "monitoring_period": self.breaker_monitoring_period,
        }


def _read(environ: Mapping[str, str], name: str, cast, default):
    raw = environ.get(ENV_PREFIX + name.upper())
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name.upper()} must be {cast.__name__}, got {raw!r}") from None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read BASELINEGATE_* variables (after .env has been loaded)."""
    env = os.environ if environ is None else environ
    defaults = Settings()
    settings = Settings(
        max_workers=_read(env, "max_workers", int, defaults.max_workers),
        max_retries=_read(env, "max_retries", int, defaults.max_retries),
        retry_delay=_read(env, "retry_delay", float, defaults.retry_delay),
        http_timeout=_read(env, "http_timeout", float, defaults.http_timeout),
        breaker_failure_threshold=_read(env, "breaker_failure_threshold", int, defaults.breaker_failure_threshold),
        breaker_recovery_timeout=_read(env, "breaker_recovery_timeout", float, defaults.breaker_recovery_timeout),
        breaker_monitoring_period=_read(env, "breaker_monitoring_period", float, defaults.breaker_monitoring_period),
        dataset_url=_read(env, "dataset_url", str, defaults.dataset_url),
        snapshot_path=_read(env, "snapshot_path", str, defaults.snapshot_path),
        enforcement_mode=_read(env, "enforcement_mode", str, defaults.enforcement_mode),
    )
    if settings.max_workers < 1:
        raise ValueError(f"{ENV_PREFIX}MAX_WORKERS must be at least 1, got {settings.max_workers}")
    if settings.max_retries < 0:
        raise ValueError(f"{ENV_PREFIX}MAX_RETRIES must not be negative, got {settings.max_retries}")
    return settings
