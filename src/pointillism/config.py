"""Run configuration schema and loading.

Validates approximation parameters with pydantic, whether they come from a
YAML file (approximate.v1), the command line, or library callers:
    - count: number of disks (>= 0)
    - radius: uniform schedule radius (>= 0)
    - alpha: global paint alpha ([0, 1])
    - seed: random seed (None → time-based, resolved by the caller)
    - schedule: "uniform" | "decreasing" (+ start_radius / end_radius)
    - background: fresh canvas fill
    - jpeg_quality: JPEG encoder quality
    - logging: level / file / json

Every validation failure surfaces as InvalidParameterError with the pydantic
message, before any image is read or any canvas is touched.

Usage:
    from src.pointillism import config

    cfg = config.load_approximate_config("configs/approximate_v1.yaml")
    cfg = config.merge_overrides(cfg, count=500, alpha=0.5)
    cfg = config.validate_params(count=100, radius=10.0, alpha=0.75)
"""

from pathlib import Path
from typing import Any, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from src.utils import fs
from .errors import InvalidParameterError

SCHEMA_VERSION = "approximate.v1"

BACKGROUNDS = {
    'transparent': (0, 0, 0, 0),
    'white': (0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF),
    'black': (0, 0, 0, 0xFFFF),
}


class LoggingSettings(BaseModel):
    """Logging block of the run config."""
    model_config = ConfigDict(populate_by_name=True, extra='forbid')

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Root log level"
    )
    file: Optional[str] = Field(None, description="Log file path (None: stderr only)")
    json_lines: bool = Field(False, alias="json", description="JSON lines in the log file")


class ApproximateV1(BaseModel):
    """Approximation run config (approximate.v1 schema)."""
    model_config = ConfigDict(populate_by_name=True, extra='forbid')

    schema_version: str = Field(SCHEMA_VERSION, alias="schema", description="Schema version")
    count: int = Field(100, ge=0, description="Number of disks to draw")
    radius: float = Field(10.0, ge=0.0, description="Disk radius (uniform schedule), px")
    alpha: float = Field(0.75, ge=0.0, le=1.0, description="Global paint alpha")
    seed: Optional[int] = Field(None, ge=0, le=2**32 - 1, description="Random seed (None: time-based)")
    schedule: Literal["uniform", "decreasing"] = Field("uniform", description="Placement policy")
    start_radius: Optional[float] = Field(None, ge=0.0, description="First disk radius (decreasing), px")
    end_radius: Optional[float] = Field(None, ge=0.0, description="Last disk radius (decreasing), px")
    background: Literal["transparent", "white", "black"] = Field(
        "transparent", description="Fill of a freshly created canvas"
    )
    jpeg_quality: int = Field(100, ge=1, le=100, description="JPEG encoder quality")
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != SCHEMA_VERSION:
            raise ValueError(f"Expected schema '{SCHEMA_VERSION}', got '{v}'")
        return v

    @model_validator(mode='after')
    def validate_schedule_radii(self) -> 'ApproximateV1':
        """The decreasing schedule needs both end points."""
        if self.schedule == "decreasing":
            missing = [
                name for name in ("start_radius", "end_radius")
                if getattr(self, name) is None
            ]
            if missing:
                raise ValueError(f"Decreasing schedule requires {', '.join(missing)}")
        return self


def _build(data: dict, origin: str) -> ApproximateV1:
    try:
        return ApproximateV1(**data)
    except ValidationError as e:
        raise InvalidParameterError(f"Invalid approximation parameters ({origin}): {e}") from e


def load_approximate_config(path: Union[str, Path]) -> ApproximateV1:
    """Load and validate a run config from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to an approximate.v1 YAML file

    Returns
    -------
    ApproximateV1
        Validated configuration

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    InvalidParameterError
        If the YAML is malformed or validation fails (with the pydantic message)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Approximation config not found: {path}")

    try:
        data = fs.load_yaml(path)
    except yaml.YAMLError as e:
        raise InvalidParameterError(str(e)) from e
    if not isinstance(data, dict):
        raise InvalidParameterError(f"Approximation config {path} must be a mapping")
    return _build(data, str(path))


def validate_params(**params: Any) -> ApproximateV1:
    """Validate keyword parameters against the approximate.v1 schema."""
    return _build(params, "parameters")


def merge_overrides(cfg: ApproximateV1, **overrides: Any) -> ApproximateV1:
    """Re-validate ``cfg`` with non-None ``overrides`` applied on top."""
    data = cfg.model_dump(by_alias=True)
    data.update({k: v for k, v in overrides.items() if v is not None})
    return _build(data, "overrides")
