"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: date range, cache location, module list, verbosity.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import field_validator
from masclab.schemas.base import MascLabBaseModel
from masclab.schemas.user import as_datetime


class CLIConfig(MascLabBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(
            path_to_flakes="/data/masc/2019",
            datestart="2019-01-10T00:00:00",
            modules=["flake_geometry"],
        )
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    path_to_flakes: Optional[str] = None
    quality: Optional[Literal["good", "all"]] = None
    datestart: Optional[datetime] = None
    dateend: Optional[datetime] = None
    modules: Optional[list[str]] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @field_validator("datestart", mode="before")
    @classmethod
    def widen_start(cls, v):
        return as_datetime(v)

    @field_validator("dateend", mode="before")
    @classmethod
    def widen_end(cls, v):
        return as_datetime(v, end_of_day=True)

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        cache = {}
        if self.path_to_flakes is not None:
            cache["path_to_flakes"] = str(self.path_to_flakes)
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

        if self.modules is not None:
            overrides["modules"] = {"selected": list(self.modules)}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
