"""Pydantic configuration schemas for the MascLab module runner.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from masclab.schemas.resolve import resolve_config
from masclab.schemas.internal import InternalConfig
from masclab.schemas.param import ParamConfig
from masclab.schemas.user import UserConfig
from masclab.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
