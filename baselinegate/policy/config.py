import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from baselinegate.errors import PolicyConfigError
from baselinegate.models.violation import Maturity, Severity

logger = logging.getLogger("baselinegate.policy")


class EnforcementMode(str, Enum):
    PER_FEATURE = "per-feature"
    GLOBAL_THRESHOLD = "global-threshold"


DEFAULT_SEVERITY_THRESHOLDS = {
    Maturity.WIDELY: Severity.ALLOW,
    Maturity.NEWLY: Severity.WARN,
    Maturity.LIMITED: Severity.ERROR,
}


class PolicyConfig(BaseModel):
    """
    Validated, immutable policy.

    Keys are accepted in snake_case or camelCase. Maturity levels missing
    from `severity_thresholds` fall back to the defaults.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    enforcement_mode: EnforcementMode = Field(
        default=EnforcementMode.PER_FEATURE, alias="enforcementMode"
    )
    per_feature_overrides: Dict[str, Severity] = Field(
        default_factory=dict, alias="perFeatureOverrides"
    )
    severity_thresholds: Dict[Maturity, Severity] = Field(
        default_factory=lambda: dict(DEFAULT_SEVERITY_THRESHOLDS), alias="severityThresholds"
    )

    @field_validator("per_feature_overrides")
    @classmethod
    def _feature_ids_not_blank(cls, overrides: Dict[str, Severity]) -> Dict[str, Severity]:
        blank = [k for k in overrides if not k.strip()]
        if blank:
            raise ValueError("feature ids in overrides must be non-empty")
        return overrides

    @field_validator("severity_thresholds")
    @classmethod
    def _fill_default_thresholds(cls, thresholds: Dict[Maturity, Severity]) -> Dict[Maturity, Severity]:
        merged = dict(DEFAULT_SEVERITY_THRESHOLDS)
        merged.update(thresholds)
        return merged

    def severity_for(self, feature_id: str, maturity: Maturity) -> Severity:
        if self.enforcement_mode == EnforcementMode.PER_FEATURE:
            override = self.per_feature_overrides.get(feature_id)
            if override is not None:
                return override
        return self.severity_thresholds[maturity]


def _describe(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def load_policy_config(raw: Optional[Mapping[str, Any]] = None) -> PolicyConfig:
    """
    Validate a raw policy mapping.

    Every schema problem is collected into a single PolicyConfigError so a
    bad configuration can be fixed in one pass.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise PolicyConfigError([f"policy must be an object, got {type(raw).__name__}"])

    try:
        config = PolicyConfig.model_validate(dict(raw))
    except ValidationError as e:
        raise PolicyConfigError([_describe(err) for err in e.errors()]) from e

    if config.enforcement_mode == EnforcementMode.GLOBAL_THRESHOLD and config.per_feature_overrides:
        logger.warning(
            f"Ignoring {len(config.per_feature_overrides)} per-feature overrides in global-threshold mode"
        )
    return config


def load_policy_file(path: Path) -> PolicyConfig:
    """Load a policy from a JSON file such as `.baseline.json`."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Policy file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise PolicyConfigError([f"{path}: invalid JSON ({e.msg} at line {e.lineno})"]) from e

    logger.info(f"Loaded policy from {path}")
    return load_policy_config(raw)
