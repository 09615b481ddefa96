"""Tests for the masclab-modules command line."""

import pytest
import numpy as np
from datetime import datetime
from skimage import io

from masclab.cli.run_modules import build_config, load_user_config_dict, main, run_modules
from masclab.modules import ModuleRegistry
from tests.helpers.fake_modules import DAY, ConstantModule, fake_image

pytestmark = [pytest.mark.unit]


@pytest.fixture
def user_config_file(temp_dir):
    path = temp_dir / "user_config.py"
    path.write_text(
        "CONFIG = {\n"
        f"    'PATH_TO_FLAKES': {str(temp_dir)!r},\n"
        "    'DATESTART': '2019-01-10',\n"
        "    'DATEEND': '2019-01-10',\n"
        "    'MODULES': ['flake_geometry'],\n"
        "}\n"
    )
    return path


def test_load_user_config_dict(user_config_file):
    cfg = load_user_config_dict(str(user_config_file))
    assert cfg["MODULES"] == ["flake_geometry"]


def test_load_user_config_missing(temp_dir):
    with pytest.raises(FileNotFoundError):
        load_user_config_dict(str(temp_dir / "nope.py"))


def test_load_user_config_without_dict(temp_dir):
    path = temp_dir / "empty.py"
    path.write_text("X = 1\n")
    with pytest.raises(ValueError, match="No CONFIG dict"):
        load_user_config_dict(str(path))


def test_build_config_cli_wins(user_config_file):
    config = build_config(str(user_config_file), {
        "modules": ["flake_geometry", "flake_shape"],
        "dateend": "2019-01-11",
        "quality": None,
    })

    assert config.modules.selected == ("flake_geometry", "flake_shape")
    assert config.dates.datestart == datetime(2019, 1, 10)
    assert config.dates.dateend.date() == datetime(2019, 1, 11).date()
    assert config.cache.quality == "good"


def test_run_modules_with_registry(user_config_file, make_day, store, day_times, temp_dir):
    day_file = make_day(DAY, day_times)
    for record in day_file.records:
        io.imsave(str(temp_dir / record.source_path), (fake_image() * 255).astype(np.uint8),
                  check_contrast=False)
    registry = ModuleRegistry([ConstantModule("m", (6,), values=(4,))])

    summary = run_modules(str(user_config_file), {"modules": ["m"]},
                          registry=registry, setup_logging=False)

    assert summary.processed == 3
    assert [r.slots for r in store.load(DAY, "good").records] == [{6: 4}] * 3


def test_main_reports_bad_config(temp_dir, capsys):
    code = main(["run", "--path-to-flakes", str(temp_dir)])

    assert code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_main_unknown_module(user_config_file, capsys, restore_root_logging):
    code = main(["run", str(user_config_file), "--modules", "does_not_exist"])

    assert code == 2
    assert "does_not_exist" in capsys.readouterr().err


def test_main_revert(make_day, store, day_times, temp_dir, capsys):
    make_day(DAY, day_times)
    updated = store.load(DAY, "good")
    updated.record_at(1).set_slot(6, 1.0)
    store.commit(DAY, "good", updated)

    code = main(["revert", str(temp_dir), "2019-01-10"])

    assert code == 0
    assert store.load(DAY, "good").record_at(1).slots == {}
    assert "Reverted" in capsys.readouterr().out


def test_main_revert_without_backup(temp_dir, capsys):
    code = main(["revert", str(temp_dir), "2019-01-10"])

    assert code == 1
    assert "Revert failed" in capsys.readouterr().err


def test_main_run_prints_summary(user_config_file, make_day, day_times, temp_dir, capsys,
                                 restore_root_logging):
    day_file = make_day(DAY, day_times)
    for record in day_file.records:
        io.imsave(str(temp_dir / record.source_path), (fake_image() * 255).astype(np.uint8),
                  check_contrast=False)

    code = main(["run", str(user_config_file), "--modules", "flake_geometry"])

    assert code == 0
    out = capsys.readouterr().out
    assert '"processed": 3' in out
    assert '"committed": [\n    "2019-01-10"\n  ]' in out
