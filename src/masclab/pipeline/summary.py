"""Run summary returned by ModuleRunner.run."""

__all__ = ['RunSummary']


class RunSummary:
    """Counters and outcomes of one module run.

    Attributes
    ----------
    processed : int
        Successful (module, flake) updates.
    skipped : int
        DayFiles skipped (missing table, no flakes, none in range, day out of range).
    errors : int
        Module aborts (execution or output arity failures).
    aborted : list of (day, module_name, flake_ordinal)
        Where each module abort happened.
    committed : list of date
        Days whose cache file was rewritten.
    unchanged : list of date
        Days processed without any module output.
    failed_commits : list of date
        Days whose commit failed (previous data kept).
    """

    def __init__(self):
        self.processed = 0
        self.skipped = 0
        self.errors = 0
        self.aborted = []
        self.committed = []
        self.unchanged = []
        self.failed_commits = []

    @property
    def did_work(self) -> bool:
        return bool(self.committed)

    def as_dict(self) -> dict:
        return {
            "processed": self.processed,
            "skipped": self.skipped,
            "errors": self.errors,
            "committed": [f"{d:%Y-%m-%d}" for d in self.committed],
            "unchanged": [f"{d:%Y-%m-%d}" for d in self.unchanged],
            "failed_commits": [f"{d:%Y-%m-%d}" for d in self.failed_commits],
        }

    def __repr__(self):
        return (f"RunSummary(processed={self.processed}, skipped={self.skipped}, "
                f"errors={self.errors}, committed={len(self.committed)})")
