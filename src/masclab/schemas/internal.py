"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, frozen, and contains NO optional fields that processing code
depends on.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional
from pydantic import ConfigDict, Field, field_validator, model_validator
from masclab.schemas.base import MascLabBaseModel
from masclab.schemas.param import check_img_reg_pattern


FROZEN = ConfigDict(
    extra='forbid',
    validate_assignment=True,
    use_enum_values=True,
    str_strip_whitespace=True,
    frozen=True,
)


class InternalCacheConfig(MascLabBaseModel):
    """Runtime cache location."""
    path_to_flakes: str
    cache_subdir: str
    quality: Literal["good", "all"]

    model_config = FROZEN

    @property
    def cache_dir(self) -> Path:
        return Path(self.path_to_flakes) / self.cache_subdir


class InternalDateRangeConfig(MascLabBaseModel):
    """Runtime date range."""
    datestart: datetime
    dateend: datetime

    model_config = FROZEN

    @field_validator("datestart", "dateend")
    @classmethod
    def drop_timezone(cls, v):
        """Capture timestamps are naive UTC; compare like with like."""
        if v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @model_validator(mode="after")
    def check_ordering(self):
        if self.dateend < self.datestart:
            raise ValueError(
                f"dateend ({self.dateend}) is before datestart ({self.datestart})"
            )
        return self


class InternalMascConfig(MascLabBaseModel):
    """Runtime instrument settings."""
    img_reg_pattern: str
    timestamp_format: str
    cam_fov: tuple[float, ...]
    line_fill: float = Field(gt=0)

    model_config = FROZEN

    @field_validator("img_reg_pattern")
    @classmethod
    def validate_pattern(cls, v):
        return check_img_reg_pattern(v)


class InternalModulesConfig(MascLabBaseModel):
    """Runtime module selection."""
    selected: tuple[str, ...]

    model_config = FROZEN


class InternalLoggingConfig(MascLabBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    log_dir: Optional[str]

    model_config = FROZEN


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(MascLabBaseModel):
    """Authoritative runtime configuration.

    Usage
    -----
    Runtime code receives InternalConfig and accesses fields directly:

        store = RecordStore(config.cache.cache_dir)
        start = config.dates.datestart

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO mutation (the per-flake scratch state lives in FlakeContext)
    """

    cache: InternalCacheConfig
    dates: InternalDateRangeConfig
    masc: InternalMascConfig
    modules: InternalModulesConfig
    logging: InternalLoggingConfig

    model_config = FROZEN

    def settings_snapshot(self) -> dict:
        """Flat settings record stored alongside each committed DayFile."""
        return {
            "datestart": self.dates.datestart.isoformat(),
            "dateend": self.dates.dateend.isoformat(),
            "mascImgRegPattern": self.masc.img_reg_pattern,
            "camFOV": list(self.masc.cam_fov),
            "lineFill": self.masc.line_fill,
            "pathToFlakes": self.cache.path_to_flakes,
        }
