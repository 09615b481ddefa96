"""SQLite-backed per-day flake cache.

One database per calendar day and quality class::

    <cache_dir>/data_<YYYYMMDD>_goodflakes.db      current
    <cache_dir>/data_<YYYYMMDD>_prevgoodflakes.db  previous version

Each database holds three tables:

- record table (``good_sub_flakes`` or ``sub_flakes``): base columns 1..5
- ``slots``: sparse module outputs keyed by (position, slot), JSON values
- ``settings``: settings snapshot, JSON values

The on-disk file is never modified in place. ``commit`` writes a full
snapshot next to it, moves the current file to the backup name, then
moves the snapshot into place.
"""

import json
import logging
import os
import re
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List

import numpy as np

from masclab.cache.records import DayFile, FlakeRecord, QUALITY_CLASSES
from masclab.contracts import CommitError, MissingTableError, require

__all__ = ['RecordStore', 'check_storable']

logger = logging.getLogger(__name__)

RECORD_TABLES = {
    "good": "good_sub_flakes",
    "all": "sub_flakes",
}

_DAY_FILE_RE = re.compile(r"^data_(\d{8})_(good|all)flakes\.db$")


def _to_jsonable(value):
    """Convert numpy containers and scalars to plain Python for JSON."""
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    return value


def _dumps(value) -> str:
    return json.dumps(_to_jsonable(value))


def check_storable(value) -> None:
    """Raise TypeError or ValueError if a slot value cannot be stored as JSON."""
    _dumps(value)


def _loads(text):
    if text is None:
        return None
    return json.loads(text)


class RecordStore:
    """Reads and writes per-day cache files.

    Typical usage::

        store = RecordStore(config.cache.cache_dir)
        for day in store.list_available_days("good"):
            day_file = store.load(day, "good")
            ...
            store.commit(day, "good", day_file)
    """

    def __init__(self, cache_dir: Path | str):
        self.cache_dir = Path(cache_dir)

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    def path_for(self, day, quality: str) -> Path:
        require(quality in QUALITY_CLASSES, f"unknown quality class {quality!r}")
        return self.cache_dir / f"data_{day:%Y%m%d}_{quality}flakes.db"

    def backup_path_for(self, day, quality: str) -> Path:
        require(quality in QUALITY_CLASSES, f"unknown quality class {quality!r}")
        return self.cache_dir / f"data_{day:%Y%m%d}_prev{quality}flakes.db"

    def _temp_path_for(self, day, quality: str) -> Path:
        path = self.path_for(day, quality)
        return path.with_name(path.name + ".tmp")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_available_days(self, quality: str) -> List:
        """Return the sorted calendar days that have a cache file.

        Backup (``prev``) files and temporary snapshots are not listed.
        """
        require(quality in QUALITY_CLASSES, f"unknown quality class {quality!r}")
        if not self.cache_dir.exists():
            return []

        days = set()
        for path in self.cache_dir.iterdir():
            match = _DAY_FILE_RE.match(path.name)
            if match and match.group(2) == quality:
                days.add(datetime.strptime(match.group(1), "%Y%m%d").date())
        return sorted(days)

    def load(self, day, quality: str) -> DayFile:
        """Load one day's records.

        Raises
        ------
        FileNotFoundError
            If no cache file exists for the day.
        MissingTableError
            If the file lacks the expected record table.
        """
        path = self.path_for(day, quality)
        if not path.exists():
            raise FileNotFoundError(f"No cache file for {day:%Y-%m-%d}: {path}")

        table = RECORD_TABLES[quality]
        conn = sqlite3.connect(str(path))
        try:
            names = {
                row[0] for row in
                conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            }
            if table not in names:
                raise MissingTableError(path, table)

            records = []
            positions = {}
            cursor = conn.execute(f"""
                SELECT position, source_path, crop_path, row_offset, col_offset, region
                FROM {table} ORDER BY position
            """)
            for position, source_path, crop_path, row_offset, col_offset, region in cursor:
                record = FlakeRecord(source_path, crop_path, row_offset, col_offset, _loads(region))
                positions[position] = record
                records.append(record)

            if "slots" in names:
                for position, slot, value in conn.execute("SELECT position, slot, value FROM slots"):
                    if position in positions:
                        positions[position].slots[slot] = _loads(value)
                    else:
                        logger.warning("Dropping slot %d for unknown position %d in %s",
                                       slot, position, path.name)

            settings = {}
            if "settings" in names:
                settings = {k: _loads(v) for k, v in conn.execute("SELECT key, value FROM settings")}
        finally:
            conn.close()

        logger.debug("Loaded %d record(s) from %s", len(records), path.name)
        return DayFile(day, quality, records, settings)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _write(self, path: Path, day_file: DayFile) -> None:
        """Write a complete DayFile snapshot to a fresh database at path."""
        if path.exists():
            path.unlink()

        table = RECORD_TABLES[day_file.quality]
        conn = sqlite3.connect(str(path))
        try:
            conn.execute(f"""
                CREATE TABLE {table} (
                    position INTEGER PRIMARY KEY,
                    source_path TEXT,
                    crop_path TEXT,
                    row_offset INTEGER,
                    col_offset INTEGER,
                    region TEXT
                )
            """)
            conn.execute("""
                CREATE TABLE slots (
                    position INTEGER NOT NULL,
                    slot INTEGER NOT NULL,
                    value TEXT,
                    PRIMARY KEY (position, slot)
                )
            """)
            conn.execute("CREATE TABLE settings (key TEXT PRIMARY KEY, value TEXT)")

            conn.executemany(
                f"INSERT INTO {table} VALUES (?, ?, ?, ?, ?, ?)",
                [
                    (i, r.source_path, r.crop_path, _to_jsonable(r.row_offset),
                     _to_jsonable(r.col_offset), None if r.region is None else _dumps(r.region))
                    for i, r in enumerate(day_file.records, start=1)
                ],
            )
            conn.executemany(
                "INSERT INTO slots VALUES (?, ?, ?)",
                [
                    (i, slot, _dumps(value))
                    for i, r in enumerate(day_file.records, start=1)
                    for slot, value in sorted(r.slots.items())
                ],
            )
            conn.executemany(
                "INSERT INTO settings VALUES (?, ?)",
                [(k, _dumps(v)) for k, v in day_file.settings.items()],
            )
            conn.commit()
        finally:
            conn.close()

    def create(self, day, quality: str, day_file: DayFile) -> Path:
        """Write the first cache file for a day.

        Raises
        ------
        FileExistsError
            If the day already has a cache file. There is never more than
            one file per day and quality class.
        """
        path = self.path_for(day, quality)
        if path.exists():
            raise FileExistsError(f"Cache file already exists for {day:%Y-%m-%d}: {path}")

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = self._temp_path_for(day, quality)
        self._write(tmp_path, day_file)
        os.replace(tmp_path, path)
        logger.info("Created %s (%d records)", path.name, len(day_file))
        return path

    def commit(self, day, quality: str, day_file: DayFile) -> Path:
        """Replace a day's cache file, keeping the previous version as backup.

        Order of operations:

        1. full snapshot written to ``<name>.tmp``
        2. current file renamed to the ``prev`` backup name
        3. snapshot renamed to the current file name

        If any step fails the snapshot is removed and the previous file is
        left at (or moved back to) the current name.

        Raises
        ------
        CommitError
            If the snapshot, the backup rename, or the final rename fails.
        """
        path = self.path_for(day, quality)
        backup_path = self.backup_path_for(day, quality)
        tmp_path = self._temp_path_for(day, quality)

        try:
            self._write(tmp_path, day_file)
        except (OSError, sqlite3.Error, TypeError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise CommitError(path, f"snapshot write failed: {e}") from e

        moved_to_backup = False
        if path.exists():
            try:
                os.replace(path, backup_path)
            except OSError as e:
                tmp_path.unlink(missing_ok=True)
                raise CommitError(path, f"backup rename failed: {e}") from e
            moved_to_backup = True
            logger.info("Moved old %s flake data to: %s", quality, backup_path)

        try:
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            if moved_to_backup:
                try:
                    os.replace(backup_path, path)
                except OSError as restore_error:
                    raise CommitError(
                        path, f"write failed ({e}) and restore failed, previous data is at {backup_path}"
                    ) from restore_error
                logger.warning("Restored previous %s flake data to: %s", quality, path)
            raise CommitError(path, f"write failed, previous data kept: {e}") from e

        logger.info("Saved new %s flake data to: %s", quality, path)
        return path

    def revert(self, day, quality: str) -> Path:
        """Swap the ``prev`` backup and the current file for a day.

        Raises
        ------
        FileNotFoundError
            If there is no backup to revert to.
        """
        path = self.path_for(day, quality)
        backup_path = self.backup_path_for(day, quality)
        if not backup_path.exists():
            raise FileNotFoundError(f"No backup to revert to: {backup_path}")

        if path.exists():
            tmp_path = self._temp_path_for(day, quality)
            os.replace(path, tmp_path)
            os.replace(backup_path, path)
            os.replace(tmp_path, backup_path)
        else:
            os.replace(backup_path, path)

        logger.info("Reverted %s to its previous version", path.name)
        return path
