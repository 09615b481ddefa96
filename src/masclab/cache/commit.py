"""Commit stage: persist a DayFile only when a module changed it."""

import logging

__all__ = ['CommitManager']

logger = logging.getLogger(__name__)


class CommitManager:
    """Backs up and rewrites modified DayFiles through a RecordStore."""

    def __init__(self, store):
        self.store = store

    def commit_if_dirty(self, day, quality: str, day_file, dirty: bool, settings=None) -> bool:
        """Commit ``day_file`` if ``dirty``.

        ``settings``, when given, replaces the stored settings snapshot so the
        file records the configuration that produced its slots.

        Returns
        -------
        bool
            True if a new file was written, False for a no-op.

        Raises
        ------
        CommitError
            Propagated from RecordStore.commit.
        """
        if not dirty:
            logger.info("No changes for %s, nothing to save", day)
            return False

        if settings is not None:
            day_file.settings = dict(settings)
        self.store.commit(day, quality, day_file)
        return True
