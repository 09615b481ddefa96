"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for the legacy settings names (e.g., PATH_TO_FLAKES → path_to_flakes,
CAM_FOV → cam_fov).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults.
"""

from datetime import date, datetime, time
from typing import Literal, Optional
from pydantic import Field, field_validator
from masclab.schemas.base import MascLabBaseModel


def as_datetime(v, end_of_day: bool = False):
    """Promote a bare date (or YYYY-MM-DD string) to a datetime covering the whole day."""
    if isinstance(v, str) and len(v.strip()) == 10:
        v = date.fromisoformat(v.strip())
    if isinstance(v, date) and not isinstance(v, datetime):
        return datetime.combine(v, time.max if end_of_day else time.min)
    return v


class UserMascConfig(MascLabBaseModel):
    """User-facing instrument config."""
    img_reg_pattern: Optional[str] = None
    timestamp_format: Optional[str] = None
    cam_fov: Optional[list[float]] = None
    line_fill: Optional[float] = None


class UserConfig(MascLabBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses the legacy settings aliases. Users only
    specify what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            path_to_flakes="/data/masc/2019/",
            datestart="2019-01-10",
            dateend="2019-01-12",
            modules=["flake_geometry"],
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Cache location
    path_to_flakes: Optional[str] = Field(None, alias="PATH_TO_FLAKES")
    quality: Optional[Literal["good", "all"]] = Field(None, alias="QUALITY")

    # Date range (dates are widened to whole days)
    datestart: Optional[datetime] = Field(None, alias="DATESTART")
    dateend: Optional[datetime] = Field(None, alias="DATEEND")

    # Instrument settings (flat aliases)
    img_reg_pattern: Optional[str] = Field(None, alias="MASC_IMG_REG_PATTERN")
    cam_fov: Optional[list[float]] = Field(None, alias="CAM_FOV")
    line_fill: Optional[float] = Field(None, alias="LINE_FILL")

    modules: Optional[list[str]] = Field(None, alias="MODULES")

    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(None, alias="LOG_LEVEL")
    log_dir: Optional[str] = Field(None, alias="LOG_DIR")

    # Nested overrides (advanced users)
    masc: Optional[UserMascConfig] = None

    model_config = MascLabBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("datestart", mode="before")
    @classmethod
    def widen_start(cls, v):
        return as_datetime(v)

    @field_validator("dateend", mode="before")
    @classmethod
    def widen_end(cls, v):
        return as_datetime(v, end_of_day=True)

    @field_validator("line_fill", mode="before")
    @classmethod
    def coerce_line_fill(cls, v):
        """Accept int or float for line_fill."""
        if v is not None:
            return float(v)
        return v

    @field_validator("path_to_flakes", mode="before")
    @classmethod
    def stringify_path(cls, v):
        if v is not None:
            return str(v)
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        cache = {}
        if self.path_to_flakes is not None:
            cache["path_to_flakes"] = self.path_to_flakes
        if self.quality is not None:
            cache["quality"] = self.quality
        if cache:
            overrides["cache"] = cache

        dates = {}
        if self.datestart is not None:
            dates["datestart"] = self.datestart
        if self.dateend is not None:
            dates["dateend"] = self.dateend
        if dates:
            overrides["dates"] = dates

        masc = {}
        if self.img_reg_pattern is not None:
            masc["img_reg_pattern"] = self.img_reg_pattern
        if self.cam_fov is not None:
            masc["cam_fov"] = self.cam_fov
        if self.line_fill is not None:
            masc["line_fill"] = self.line_fill

        # Merge with explicit masc config
        if self.masc is not None:
            masc.update(self.masc.model_dump(exclude_none=True))

        if masc:
            overrides["masc"] = masc

        if self.modules is not None:
            overrides["modules"] = {"selected": list(self.modules)}

        logging_cfg = {}
        if self.log_level is not None:
            logging_cfg["level"] = self.log_level
        if self.log_dir is not None:
            logging_cfg["log_dir"] = self.log_dir
        if logging_cfg:
            overrides["logging"] = logging_cfg

        return overrides
