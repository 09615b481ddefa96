"""Per-day flake cache.

- records: FlakeRecord and DayFile (in-memory table)
- record_store: SQLite persistence with backup-before-overwrite
- indexer: filename parsing and date/camera index
- shared_features: run-scoped filled flake cache
- commit: commit-if-dirty stage
"""

from masclab.cache.records import DayFile, FlakeRecord, FIRST_SLOT
from masclab.cache.record_store import RecordStore, check_storable
from masclab.cache.indexer import FlakeIndexer
from masclab.cache.shared_features import FilledFlake, SharedFeatureCache
from masclab.cache.commit import CommitManager

__all__ = [
    "DayFile",
    "FlakeRecord",
    "FIRST_SLOT",
    "RecordStore",
    "check_storable",
    "FlakeIndexer",
    "FilledFlake",
    "SharedFeatureCache",
    "CommitManager",
]
