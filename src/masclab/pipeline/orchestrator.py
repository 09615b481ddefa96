"""Module run orchestration.

Sets up logging, drives a ModuleRunner over the configured date range and
reports the outcome.
"""

import time
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from masclab.contracts import CorruptFilenameError
from masclab.pipeline.runner import ModuleRunner

__all__ = ['ModuleOrchestrator']

logger = logging.getLogger(__name__)


class ModuleOrchestrator:
    """Entry point for running analysis modules over a flake cache.

    The orchestrator owns the process-level concerns (logging handlers,
    timing, final report) and leaves the DayFile state machine to
    :class:`ModuleRunner`.

    **Logging:**

    All output goes to both console and a log file at
    ``<log_dir>/modules_<YYYYmmdd_HHMMSS>.log``. ``log_dir`` defaults to
    ``<path_to_flakes>/logs``. Log level controlled via config.

    Example usage::

        from masclab.pipeline import ModuleOrchestrator

        orch = ModuleOrchestrator(config)
        summary = orch.start(["flake_geometry"])
    """

    def __init__(self, config, registry=None, runner: Optional[ModuleRunner] = None):
        """Initialize orchestrator.

        Parameters
        ----------
        config : InternalConfig
            Fully resolved configuration.
        registry : ModuleRegistry, optional
            Modules available to the run. Defaults to the built-in registry.
        runner : ModuleRunner, optional
            Pre-built runner. Created from ``config`` and ``registry`` if omitted.
        """
        self.config = config
        self.runner = runner if runner is not None else ModuleRunner(config, registry=registry)
        self.log_path = None
        self._start_time = None

    def _setup_logging(self):
        """Configure root logger with file and console handlers."""
        log_level = getattr(logging, self.config.logging.level.upper(), logging.INFO)

        if self.config.logging.log_dir:
            log_dir = Path(self.config.logging.log_dir)
        else:
            log_dir = Path(self.config.cache.path_to_flakes) / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        self.log_path = log_dir / f"modules_{datetime.now():%Y%m%d_%H%M%S}.log"

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Clear existing handlers and add new ones
        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()

        fh = logging.FileHandler(self.log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.info("Logging to %s", self.log_path)

    def start(self, module_names=None, setup_logging: bool = True):
        """Run the selected modules and log a summary.

        Parameters
        ----------
        module_names : list of str, optional
            Modules to run. Defaults to ``config.modules.selected``.
        setup_logging : bool, optional
            Install file and console handlers first (default True). Tests
            pass False and rely on pytest's log capture.

        Returns
        -------
        RunSummary

        Raises
        ------
        CorruptFilenameError
            Propagated from the runner after the partial summary is logged.
        """
        if setup_logging:
            self._setup_logging()

        logger.info("=" * 60)
        logger.info("Starting MASC Module Run")
        logger.info("=" * 60)
        logger.info("Cache:   %s", self.config.cache.cache_dir)
        logger.info("Quality: %s", self.config.cache.quality)
        logger.info("Range:   %s -> %s", self.config.dates.datestart, self.config.dates.dateend)

        self._start_time = time.time()
        try:
            summary = self.runner.run(module_names)
        except CorruptFilenameError:
            logger.critical("Run halted. Exiting...")
            self._log_summary(self.runner.summary)
            raise

        self._log_summary(summary)
        return summary

    def _log_summary(self, summary):
        elapsed = time.time() - self._start_time
        logger.info("=" * 60)
        logger.info("Run Summary (%.1f s)", elapsed)
        logger.info("  Flake updates: %d", summary.processed)
        logger.info("  Days skipped:  %d", summary.skipped)
        logger.info("  Module errors: %d", summary.errors)
        logger.info("  Days saved:    %d", len(summary.committed))
        if summary.failed_commits:
            logger.warning("  Failed saves:  %s",
                           ", ".join(f"{d:%Y-%m-%d}" for d in summary.failed_commits))
        if summary.did_work:
            logger.info("Finished All Modules On All Data!")
        else:
            logger.info("No %s flake data was modified.", self.config.cache.quality)
        logger.info("=" * 60)
