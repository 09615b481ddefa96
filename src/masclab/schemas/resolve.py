"""Configuration resolution and merging logic.

This module provides the single entrypoint for configuration resolution:
resolve_config(). It merges ParamConfig, UserConfig, and CLIConfig in
the correct precedence order and returns a validated InternalConfig.

Precedence (highest to lowest):
1. CLIConfig (command-line overrides)
2. UserConfig (user file)
3. ParamConfig (expert defaults)
"""

from typing import Union, Optional
from masclab.schemas.param import ParamConfig
from masclab.schemas.user import UserConfig
from masclab.schemas.cli import CLIConfig
from masclab.schemas.internal import InternalConfig


def deep_merge(base: dict, *overrides: dict) -> dict:
    """Deep merge multiple dictionaries.

    Later dictionaries override earlier ones. Nested dictionaries are
    merged recursively; other values are replaced.

    Examples
    --------
    >>> base = {"a": 1, "b": {"c": 2, "d": 3}}
    >>> override = {"b": {"d": 4, "e": 5}, "f": 6}
    >>> deep_merge(base, override)
    {'a': 1, 'b': {'c': 2, 'd': 4, 'e': 5}, 'f': 6}
    """
    result = base.copy()

    for override in overrides:
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = deep_merge(result[key], value)
            else:
                result[key] = value

    return result


def _as_layer(cfg, model):
    """Coerce a config layer given as None, dict or model instance to ``model``."""
    if isinstance(cfg, model):
        return cfg
    return model.model_validate(cfg or {})


def resolve_config(
    param_cfg: Union[dict, ParamConfig],
    user_cfg: Optional[Union[dict, UserConfig]] = None,
    cli_cfg: Optional[Union[dict, CLIConfig]] = None,
) -> InternalConfig:
    """Resolve final runtime configuration from param, user, and CLI configs.

    Parameters
    ----------
    param_cfg : dict or ParamConfig
        Expert configuration with complete defaults. Required.
    user_cfg : dict or UserConfig, optional
        User configuration with overrides.
    cli_cfg : dict or CLIConfig, optional
        Command-line overrides.

    Returns
    -------
    InternalConfig
        Fully validated, immutable runtime configuration

    Raises
    ------
    ValidationError
        If any config fails Pydantic validation, including a missing
        cache path or date range (those have no expert default).

    Examples
    --------
    >>> user = UserConfig(path_to_flakes="/data/masc", datestart="2019-01-10",
    ...                   dateend="2019-01-10")
    >>> config = resolve_config(ParamConfig(), user)
    >>> config.dates.dateend.hour
    23
    """
    param = _as_layer(param_cfg, ParamConfig)
    merged = deep_merge(
        param.model_dump(),
        _as_layer(user_cfg, UserConfig).to_internal_overrides(),
        _as_layer(cli_cfg, CLIConfig).to_internal_overrides(),
    )

    return InternalConfig.model_validate(merged)
