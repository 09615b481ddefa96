"""Tests for the SQLite day cache: naming, load, create, commit, revert."""

import os
import sqlite3
import pytest
import numpy as np
from datetime import date, datetime

from masclab.cache import DayFile, FlakeRecord, RecordStore
from masclab.contracts import CommitError, ContractViolation, MissingTableError
from tests.helpers.fake_modules import DAY

pytestmark = [pytest.mark.unit, pytest.mark.cache]


def test_file_names(store):
    assert store.path_for(DAY, "good").name == "data_20190110_goodflakes.db"
    assert store.path_for(DAY, "all").name == "data_20190110_allflakes.db"
    assert store.backup_path_for(DAY, "good").name == "data_20190110_prevgoodflakes.db"


def test_unknown_quality_is_contract_violation(store):
    with pytest.raises(ContractViolation):
        store.path_for(DAY, "bad")


def test_list_available_days(store, make_day, day_times):
    make_day(date(2019, 1, 12), [datetime(2019, 1, 12, 1, 0, 0)])
    make_day(DAY, day_times)
    make_day(DAY, day_times, quality="all")

    assert store.list_available_days("good") == [DAY, date(2019, 1, 12)]
    assert store.list_available_days("all") == [DAY]


def test_list_ignores_backups_and_temp_files(store, make_day, day_times):
    make_day(DAY, day_times)
    store.backup_path_for(date(2019, 1, 11), "good").touch()
    (store.cache_dir / "data_20190113_goodflakes.db.tmp").touch()
    (store.cache_dir / "notes.txt").touch()

    assert store.list_available_days("good") == [DAY]


def test_list_missing_cache_dir(temp_dir):
    assert RecordStore(temp_dir / "nowhere").list_available_days("good") == []


def test_create_and_load_roundtrip(store, make_day, day_times):
    written = make_day(DAY, day_times, slots={6: 1.5, 9: [1, 2]})
    loaded = store.load(DAY, "good")

    assert len(loaded) == 3
    assert loaded.records == written.records
    first = loaded.record_at(1)
    assert first.crop_box == (0, 0)
    assert loaded.record_at(2).crop_box == (20, 10)
    assert first.region == [1, 1, 4, 4]
    # gaps between slots stay gaps
    assert first.slots == {6: 1.5, 9: [1, 2]}
    assert loaded.num_columns == 9


def test_numpy_values_are_stored_as_json(store):
    record = FlakeRecord("a.png", "a_crop.png", 0, 0, None, {6: np.float64(2.5), 7: np.arange(3)})
    store.create(DAY, "good", DayFile(DAY, "good", [record]))

    loaded = store.load(DAY, "good").record_at(1)
    assert loaded.slots == {6: 2.5, 7: [0, 1, 2]}
    assert loaded.region is None


def test_create_refuses_existing_day(store, make_day, day_times):
    make_day(DAY, day_times)
    with pytest.raises(FileExistsError):
        store.create(DAY, "good", DayFile(DAY, "good", []))


def test_load_missing_file(store):
    with pytest.raises(FileNotFoundError):
        store.load(DAY, "good")


def test_load_missing_table(store):
    store.cache_dir.mkdir(parents=True)
    conn = sqlite3.connect(str(store.path_for(DAY, "good")))
    conn.execute("CREATE TABLE something_else (x INTEGER)")
    conn.commit()
    conn.close()

    with pytest.raises(MissingTableError) as exc:
        store.load(DAY, "good")
    assert exc.value.table == "good_sub_flakes"


def test_good_table_does_not_satisfy_all(store, make_day, day_times):
    make_day(DAY, day_times)
    os.replace(store.path_for(DAY, "good"), store.path_for(DAY, "all"))

    with pytest.raises(MissingTableError, match="sub_flakes"):
        store.load(DAY, "all")


def test_commit_keeps_previous_version(store, make_day, day_times):
    original = make_day(DAY, day_times)
    updated = store.load(DAY, "good")
    updated.record_at(1).set_slot(6, 42.0)
    updated.settings = {"lineFill": 200.0}

    store.commit(DAY, "good", updated)

    assert store.backup_path_for(DAY, "good").exists()
    assert not (store.cache_dir / "data_20190110_goodflakes.db.tmp").exists()
    current = store.load(DAY, "good")
    assert current.record_at(1).slots == {6: 42.0}
    assert current.settings == {"lineFill": 200.0}

    os.replace(store.backup_path_for(DAY, "good"), store.path_for(DAY, "good"))
    assert store.load(DAY, "good").records == original.records


def test_commit_backup_rename_failure_keeps_file(store, make_day, day_times, monkeypatch):
    make_day(DAY, day_times)
    updated = store.load(DAY, "good")
    updated.record_at(1).set_slot(6, 1.0)

    real_replace = os.replace

    def failing_replace(src, dst):
        if str(dst).endswith("prevgoodflakes.db"):
            raise PermissionError("read-only")
        return real_replace(src, dst)

    monkeypatch.setattr("masclab.cache.record_store.os.replace", failing_replace)

    with pytest.raises(CommitError, match="backup rename failed"):
        store.commit(DAY, "good", updated)

    monkeypatch.undo()
    assert store.load(DAY, "good").record_at(1).slots == {}
    assert not store.backup_path_for(DAY, "good").exists()
    assert not (store.cache_dir / "data_20190110_goodflakes.db.tmp").exists()


def test_revert_swaps_versions(store, make_day, day_times):
    make_day(DAY, day_times)
    updated = store.load(DAY, "good")
    updated.record_at(1).set_slot(6, 3.0)
    store.commit(DAY, "good", updated)

    store.revert(DAY, "good")
    assert store.load(DAY, "good").record_at(1).slots == {}

    store.revert(DAY, "good")
    assert store.load(DAY, "good").record_at(1).slots == {6: 3.0}


def test_revert_without_backup(store, make_day, day_times):
    make_day(DAY, day_times)
    with pytest.raises(FileNotFoundError, match="No backup"):
        store.revert(DAY, "good")


def test_commit_final_rename_failure_restores_previous(store, make_day, day_times, monkeypatch):
    original = make_day(DAY, day_times)
    updated = store.load(DAY, "good")
    updated.record_at(1).set_slot(6, 1.0)

    real_replace = os.replace

    def failing_replace(src, dst):
        if str(src).endswith(".tmp"):
            raise PermissionError("read-only")
        return real_replace(src, dst)

    monkeypatch.setattr("masclab.cache.record_store.os.replace", failing_replace)

    with pytest.raises(CommitError, match="write failed"):
        store.commit(DAY, "good", updated)

    monkeypatch.undo()
    assert store.list_available_days("good") == [DAY]
    assert store.load(DAY, "good").records == original.records
    assert not store.backup_path_for(DAY, "good").exists()
    assert not (store.cache_dir / "data_20190110_goodflakes.db.tmp").exists()


def test_commit_unstorable_value_keeps_file(store, make_day, day_times):
    original = make_day(DAY, day_times)
    updated = store.load(DAY, "good")
    updated.record_at(1).set_slot(6, {1, 2})

    with pytest.raises(CommitError, match="snapshot write failed"):
        store.commit(DAY, "good", updated)

    assert store.load(DAY, "good").records == original.records
    assert not store.backup_path_for(DAY, "good").exists()
    assert not (store.cache_dir / "data_20190110_goodflakes.db.tmp").exists()
