"""Root-level pytest fixtures for the masclab test suite.

Provides shared configuration fixtures following the Pydantic-based config
layers, plus builders for on-disk day caches. Tests use these fixtures
instead of creating raw dict configs.
"""

import logging
import pytest
from pathlib import Path
from datetime import datetime
import tempfile
import shutil

from masclab.cache import DayFile, FlakeRecord, RecordStore
from masclab.schemas import ParamConfig, UserConfig, resolve_config
from tests.helpers.fake_modules import DAY, CountingFill, flake_name, fake_image


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults.

    Has no cache path or date range; those must come from user or CLI.
    """
    return ParamConfig()


@pytest.fixture
def make_config(param_config, temp_dir):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs. Cache
    path defaults to ``temp_dir`` and the range to the whole of ``DAY``.

    Examples
    --------
    >>> def test_line_fill(make_config):
    ...     config = make_config(line_fill=100)
    ...     assert config.masc.line_fill == 100.0
    """
    def _make(**user_overrides):
        user_overrides.setdefault("path_to_flakes", str(temp_dir))
        user_overrides.setdefault("datestart", DAY.isoformat())
        user_overrides.setdefault("dateend", DAY.isoformat())
        return resolve_config(param_config, UserConfig(**user_overrides), None)

    return _make


@pytest.fixture
def internal_config(make_config):
    """Fully validated runtime configuration covering ``DAY``."""
    return make_config()


# =============================================================================
# Cache Fixtures
# =============================================================================

@pytest.fixture
def store(internal_config):
    """RecordStore on the configured cache directory."""
    return RecordStore(internal_config.cache.cache_dir)


@pytest.fixture
def make_day(store):
    """Factory that writes a day cache file and returns its DayFile.

    Each entry of ``times`` becomes one record named like a MASC image.
    ``extra`` records (already built) are appended after them.

    Examples
    --------
    >>> day_file = make_day(DAY, [datetime(2019, 1, 10, 9, 0, 0)])
    """
    def _make(day, times, cam_id=0, quality="good", extra=(), slots=None):
        records = [
            FlakeRecord(
                source_path=flake_name(ts, i, cam_id),
                crop_path=f"crop_{i}.png",
                row_offset=10 * i,
                col_offset=20 * i,
                region=[1, 1, 4, 4],
                slots=dict(slots or {}),
            )
            for i, ts in enumerate(times)
        ]
        records.extend(extra)
        day_file = DayFile(day, quality, records)
        store.create(day, quality, day_file)
        return day_file

    return _make


@pytest.fixture
def day_times():
    """Three captures inside ``DAY``."""
    return [
        datetime(2019, 1, 10, 9, 0, 0),
        datetime(2019, 1, 10, 12, 30, 15),
        datetime(2019, 1, 10, 18, 45, 59),
    ]


@pytest.fixture
def counting_fill():
    return CountingFill()


@pytest.fixture
def image_loader():
    """Loader that ignores the path and returns a small square flake."""
    return lambda path: fake_image()


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def restore_root_logging():
    """Put root logger handlers back after a test installs its own."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
