"""Module execution engine.

Runs the selected modules over every cached flake captured within the
configured date range, one DayFile at a time::

    Loaded -> Indexed -> (per module: Running -> Completed | Aborted)
           -> Committed | Unchanged

A DayFile is fully loaded, indexed, processed by all modules and committed
before the next one is opened. The on-disk file is only touched by the
commit, and only when at least one module wrote a slot.
"""

import logging
from datetime import timedelta
from enum import Enum

from masclab.cache import (
    CommitManager,
    FlakeIndexer,
    RecordStore,
    SharedFeatureCache,
    check_storable,
)
from masclab.contracts import (
    CommitError,
    CorruptFilenameError,
    MissingTableError,
    ModuleExecutionError,
    OutputArityError,
    assert_output_arity,
)
from masclab.imaging import fill_flake, load_flake_image
from masclab.modules import FlakeContext, ModuleAdapter, default_registry
from masclab.pipeline.summary import RunSummary

__all__ = ['ModuleRunner', 'DayState']

logger = logging.getLogger(__name__)


class DayState(str, Enum):
    """Final state of one DayFile pass."""
    SKIPPED = "skipped"
    COMMITTED = "committed"
    UNCHANGED = "unchanged"
    COMMIT_FAILED = "commit_failed"


class ModuleRunner:
    """Drives registered modules over the per-day flake cache.

    Parameters
    ----------
    config : InternalConfig
        Fully resolved runtime configuration.
    registry : ModuleRegistry, optional
        Available modules. Defaults to the built-in registry.
    store : RecordStore, optional
        Cache access. Defaults to a store on ``config.cache.cache_dir``.
    fill : callable, optional
        Fill capability for the shared feature cache.
    load_image : callable, optional
        Image loader for the shared feature cache.

    Example usage::

        runner = ModuleRunner(config)
        summary = runner.run(["flake_geometry", "flake_shape"])
        print(summary.processed, summary.errors)
    """

    def __init__(self, config, registry=None, store=None,
                 fill=fill_flake, load_image=load_flake_image):
        self.config = config
        self.quality = config.cache.quality
        self.registry = registry if registry is not None else default_registry()
        self.store = store if store is not None else RecordStore(config.cache.cache_dir)
        self.indexer = FlakeIndexer(config.masc.img_reg_pattern, config.masc.timestamp_format)
        self.adapter = ModuleAdapter(self.registry, config.cache.path_to_flakes)
        self.committer = CommitManager(self.store)
        self.fill = fill
        self.load_image = load_image
        self.summary = RunSummary()

    def run(self, module_names=None) -> RunSummary:
        """Run modules over every DayFile in the configured date range.

        Parameters
        ----------
        module_names : list of str, optional
            Modules to run, in order. Defaults to ``config.modules.selected``.

        Returns
        -------
        RunSummary

        Raises
        ------
        UnknownModuleError, ModuleDependencyError
            If the selection is invalid. Raised before any file is read.
        CorruptFilenameError
            If a record's filename cannot be parsed. Halts the run; the
            current DayFile is not committed. Days committed earlier keep
            their new content.
        """
        if module_names is None:
            module_names = self.config.modules.selected
        modules = self.registry.select(module_names)
        self.summary = RunSummary()

        if not modules:
            logger.info("No modules selected!")
            return self.summary

        start = self.config.dates.datestart
        end = self.config.dates.dateend
        days = self.store.list_available_days(self.quality)
        logger.info("Running %d module(s) on %s flakes between %s and %s",
                    len(modules), self.quality, start, end)

        for day in days:
            if day + timedelta(days=1) < start.date() or day - timedelta(days=1) > end.date():
                logger.debug("Day %s is outside the date range, skipping", day)
                self.summary.skipped += 1
                continue
            self.process_day(day, modules)

        if not days:
            logger.info("No %s flake data to process!", self.quality)
        else:
            logger.info("Done with %d day file(s): %s", len(days), self.summary)
        return self.summary

    def process_day(self, day, modules) -> DayState:
        """Load, index, run all modules on, and commit one DayFile."""
        path = self.store.path_for(day, self.quality)
        logger.info("Loading data from file %s in cache...", path.name)

        try:
            day_file = self.store.load(day, self.quality)
        except MissingTableError as e:
            logger.warning("Encountered %s flakes file without correct table(s): %s. Skipping...",
                           self.quality, e)
            self.summary.skipped += 1
            return DayState.SKIPPED

        try:
            index = self.indexer.build_index(day_file, cache_file=path)
        except CorruptFilenameError as e:
            logger.critical("A corrupt filename was detected that does not have the expected format. "
                            "This day and any later days were not modified; "
                            "days saved earlier in this run keep their new data.")
            logger.critical("Bad filename: %s", e.source_path)
            logger.critical("From cache file: %s", path)
            logger.critical("Index of bad record in cache file: %s", e.record_index)
            raise

        if index.empty:
            logger.info("No %s flakes found in %s. Skipping...", self.quality, path.name)
            self.summary.skipped += 1
            return DayState.SKIPPED

        in_range = self.indexer.filter_to_range(
            index, self.config.dates.datestart, self.config.dates.dateend
        )
        if in_range.empty:
            logger.info("No flakes in %s within the date range. Skipping...", path.name)
            self.summary.skipped += 1
            return DayState.SKIPPED

        features = SharedFeatureCache(day_file, index, self.config,
                                      fill=self.fill, load_image=self.load_image)
        dirty = False
        try:
            for module in modules:
                updated = self._run_module(module.name, day, day_file, in_range, features)
                dirty = dirty or updated > 0
        finally:
            features.clear()

        try:
            committed = self.committer.commit_if_dirty(
                day, self.quality, day_file, dirty,
                settings=self.config.settings_snapshot(),
            )
        except CommitError as e:
            logger.error("Could not save %s, previous data kept: %s", path.name, e)
            self.summary.failed_commits.append(day)
            return DayState.COMMIT_FAILED

        if committed:
            self.summary.committed.append(day)
            return DayState.COMMITTED
        self.summary.unchanged.append(day)
        return DayState.UNCHANGED

    def _run_module(self, name, day, day_file, in_range, features) -> int:
        """Run one module over the in-range flakes of a DayFile.

        Returns the number of records updated. Stops at the first flake
        whose invocation fails; updates written before the failure stay.
        """
        slots = self.adapter.resolve_output_slots(name)
        total = len(in_range)
        logger.info('Executing "%s" module on %d flake images...', name, total)

        updated = 0
        next_report = 10
        for row in in_range.itertuples(index=False):
            ordinal = int(row.ordinal)
            position = int(row.position)
            record = day_file.record_at(position)

            try:
                try:
                    filled = features.get(ordinal)
                except Exception as e:
                    raise ModuleExecutionError(name, ordinal, e) from e

                context = FlakeContext(
                    flake_ordinal=ordinal,
                    position=position,
                    timestamp=row.timestamp.to_pydatetime(),
                    cam_id=int(row.cam_id),
                    filled_flake=filled,
                    slots=record.slots,
                    config=self.config,
                )
                inputs = self.adapter.resolve_inputs(name, record, context)
                outputs = self.adapter.invoke(name, inputs, ordinal)
                assert_output_arity(name, ordinal, outputs, slots)
                try:
                    for value in outputs:
                        check_storable(value)
                except (TypeError, ValueError) as e:
                    raise ModuleExecutionError(name, ordinal, e) from e

            except (ModuleExecutionError, OutputArityError) as e:
                logger.error("ERROR! Something went wrong while running the %s module on %s",
                             name, day)
                logger.error("\tFlake %d (record %d, %s): %s",
                             ordinal, position, record.source_path, e)
                logger.info("Skipping module %s for %s due to error.", name, day)
                self.summary.errors += 1
                self.summary.aborted.append((day, name, ordinal))
                return updated

            for slot, value in zip(slots, outputs):
                record.set_slot(slot, value)
            updated += 1
            self.summary.processed += 1

            percent = 100 * updated / total
            logger.debug("%s: flake %d done (%.0f%%)", name, ordinal, percent)
            if percent >= next_report:
                logger.info("%s: %.0f%% complete...", name, percent)
                while next_report <= percent:
                    next_report += 10

        logger.info("%s ...done.", name)
        return updated
