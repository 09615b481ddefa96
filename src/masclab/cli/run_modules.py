"""Core module-run execution logic.

This module contains the command-line runner, separated from the script
wrapper in ``scripts/run_masc_modules.py``.
"""

import sys
import json
import argparse
import logging
import importlib.util
from datetime import date
from pathlib import Path
from typing import Optional, Dict, Any

from masclab.cache import RecordStore
from masclab.contracts import MascLabError
from masclab.pipeline import ModuleOrchestrator
from masclab.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig

logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def build_config(user_config_path: Optional[str] = None,
                 cli_args: Optional[Dict[str, Any]] = None):
    """Resolve Param < User < CLI into an InternalConfig."""
    param_cfg = ParamConfig()

    user_cfg = None
    if user_config_path is not None:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))

    cli_dict = {k: v for k, v in (cli_args or {}).items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else None

    return resolve_config(param_cfg, user_cfg, cli_cfg)


def run_modules(
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False,
    registry=None,
    setup_logging: bool = True,
):
    """Run analysis modules over the flake cache.

    1. Loads and resolves configuration (Param < User < CLI)
    2. Builds the orchestrator
    3. Runs all selected modules over every DayFile in range

    Parameters
    ----------
    user_config_path : str, optional
        Path to user config file (Python file with CONFIG dict).
    cli_args : dict, optional
        CLI overrides. Keys: path_to_flakes, quality, datestart, dateend,
        modules, log_level. All optional.
    verbose : bool, optional
        Enable DEBUG logging and print the resolved config.
    registry : ModuleRegistry, optional
        Modules available to the run. Defaults to the built-in registry.
    setup_logging : bool, optional
        Install file and console log handlers.

    Returns
    -------
    RunSummary
    """
    cli_args = dict(cli_args or {})
    if verbose and not cli_args.get("log_level"):
        cli_args["log_level"] = "DEBUG"

    config = build_config(user_config_path, cli_args)

    print(f"\n{'='*60}")
    print("MASC Module Runner")
    print('='*60)
    print(f"Config:  {user_config_path or '(defaults)'}")
    print(f"Flakes:  {config.cache.path_to_flakes}")
    print(f"Quality: {config.cache.quality}")
    print(f"Modules: {', '.join(config.modules.selected) or '(none)'}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(mode="json"), indent=2))
        print('='*60)

    orchestrator = ModuleOrchestrator(config, registry=registry)
    return orchestrator.start(setup_logging=setup_logging)


def revert_day(path_to_flakes: str, day: date, quality: str = "good",
               cache_subdir: str = "cache") -> Path:
    """Swap a day's cache file with its previous-version backup."""
    store = RecordStore(Path(path_to_flakes) / cache_subdir)
    return store.revert(day, quality)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="masclab-modules",
        description="Run analysis modules over the MASC flake cache",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run selected modules over a date range")
    run.add_argument("config", nargs="?", help="Path to user config file")
    run.add_argument("--path-to-flakes", help="Override flake data root")
    run.add_argument("--quality", choices=["good", "all"], help="Quality class to process")
    run.add_argument("--start", dest="datestart", help="Start date/time (ISO format)")
    run.add_argument("--end", dest="dateend", help="End date/time (ISO format)")
    run.add_argument("--modules", nargs="+", help="Modules to run, in order")
    run.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    revert = sub.add_parser("revert", help="Restore a day's previous cache file")
    revert.add_argument("path_to_flakes", help="Flake data root")
    revert.add_argument("day", type=date.fromisoformat, help="Day to revert (YYYY-MM-DD)")
    revert.add_argument("--quality", choices=["good", "all"], default="good")
    revert.add_argument("--cache-subdir", default="cache")

    return parser


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)

    if args.command == "revert":
        try:
            path = revert_day(args.path_to_flakes, args.day, args.quality, args.cache_subdir)
        except OSError as e:
            print(f"Revert failed: {e}", file=sys.stderr)
            return 1
        print(f"Reverted {path}")
        return 0

    cli_args = {
        "path_to_flakes": args.path_to_flakes,
        "quality": args.quality,
        "datestart": args.datestart,
        "dateend": args.dateend,
        "modules": args.modules,
    }
    try:
        summary = run_modules(args.config, cli_args, verbose=args.verbose)
    except (FileNotFoundError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except MascLabError as e:
        print(f"Run halted: {e}", file=sys.stderr)
        return 2

    print(json.dumps(summary.as_dict(), indent=2))
    return 0 if not summary.errors and not summary.failed_commits else 1


if __name__ == "__main__":
    sys.exit(main())
