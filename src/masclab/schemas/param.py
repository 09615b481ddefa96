"""ParamConfig: Expert defaults for the MascLab module runner.

This module defines the complete default configuration. ALL runner
parameters must have defaults here. No runtime code should define
fallback values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

import re
from datetime import datetime
from typing import Literal, Optional
from pydantic import Field, field_validator
from masclab.schemas.base import MascLabBaseModel


# MASC image names look like 2015.02.13_09.21.37_flake_85_cam_0.png
DEFAULT_IMG_REG_PATTERN = (
    r"(?P<timestamp>\d{4}\.\d{2}\.\d{2}_\d{2}\.\d{2}\.\d{2})"
    r"_flake_(?P<flake_id>\d+)_cam_(?P<cam_id>\d+)"
)
DEFAULT_TIMESTAMP_FORMAT = "%Y.%m.%d_%H.%M.%S"
REQUIRED_PATTERN_GROUPS = ("timestamp", "cam_id")


def check_img_reg_pattern(v):
    """Pattern must compile and expose the groups the indexer reads."""
    if v is None:
        return v
    try:
        compiled = re.compile(v)
    except re.error as e:
        raise ValueError(f"Invalid image filename pattern: {e}") from e
    missing = [g for g in REQUIRED_PATTERN_GROUPS if g not in compiled.groupindex]
    if missing:
        raise ValueError(f"Image filename pattern is missing named group(s): {missing}")
    return v


# =============================================================================
# Nested Configuration Models
# =============================================================================

class CacheConfig(MascLabBaseModel):
    """Location and flavour of the per-day flake cache."""
    path_to_flakes: Optional[str] = None
    cache_subdir: str = "cache"
    quality: Literal["good", "all"] = "good"


class DateRangeConfig(MascLabBaseModel):
    """Capture time window to process (inclusive)."""
    datestart: Optional[datetime] = None
    dateend: Optional[datetime] = None


class MascConfig(MascLabBaseModel):
    """Instrument-specific parsing and optics settings."""
    img_reg_pattern: str = DEFAULT_IMG_REG_PATTERN
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    cam_fov: list[float] = Field(
        default_factory=lambda: [33.65, 32.89, 36.80],
        description="Field of view per camera id in px/mm",
    )
    line_fill: float = Field(200.0, gt=0, description="Fill line length in microns")

    @field_validator("img_reg_pattern")
    @classmethod
    def validate_pattern(cls, v):
        return check_img_reg_pattern(v)

    @field_validator("cam_fov")
    @classmethod
    def validate_cam_fov(cls, v):
        """Every camera needs a positive field of view."""
        if not v:
            raise ValueError("cam_fov must list at least one camera")
        if any(fov <= 0 for fov in v):
            raise ValueError(f"cam_fov entries must be > 0, got {v}")
        return v

    @field_validator("line_fill", mode="before")
    @classmethod
    def coerce_line_fill_to_float(cls, v):
        """Allow int or float for line_fill."""
        return float(v)


class ModulesConfig(MascLabBaseModel):
    """Ordered list of analysis modules to run."""
    selected: list[str] = Field(default_factory=list)


class LoggingConfig(MascLabBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_dir: Optional[str] = None


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(MascLabBaseModel):
    """Complete expert configuration with all defaults.

    This is the base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    cache: CacheConfig = Field(default_factory=CacheConfig)
    dates: DateRangeConfig = Field(default_factory=DateRangeConfig)
    masc: MascConfig = Field(default_factory=MascConfig)
    modules: ModulesConfig = Field(default_factory=ModulesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
