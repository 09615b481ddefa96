"""In-memory flake records and day files.

A record keeps the legacy positional layout of the cache table:

====== ============== =========================================
column name           meaning
====== ============== =========================================
1      source_path    image filename relative to path_to_flakes
2      crop_path      cropped image filename
3      row_offset     crop box row offset in the source image
4      col_offset     crop box column offset in the source image
5      region         flake bounds inside the crop
6..    slots          module outputs, one value per reserved slot
====== ============== =========================================

Slots are a sparse mapping keyed by absolute column index. A missing key
means "not computed yet"; slots are never renumbered.
"""

import copy

from masclab.contracts import require

SOURCE_PATH_COLUMN = 1
CROP_PATH_COLUMN = 2
ROW_OFFSET_COLUMN = 3
COL_OFFSET_COLUMN = 4
REGION_COLUMN = 5
FIRST_SLOT = 6

QUALITY_CLASSES = ("good", "all")


class FlakeRecord:
    """One detected flake: base columns plus module output slots."""

    def __init__(self, source_path=None, crop_path=None, row_offset=None,
                 col_offset=None, region=None, slots=None):
        self.source_path = source_path
        self.crop_path = crop_path
        self.row_offset = row_offset
        self.col_offset = col_offset
        self.region = region
        self.slots = dict(slots or {})

    def is_empty(self) -> bool:
        """True for trailing padding rows (no base column and no slot set)."""
        base = (self.source_path, self.crop_path, self.row_offset,
                self.col_offset, self.region)
        return all(v is None or v == "" for v in base) and not self.slots

    @property
    def crop_box(self) -> tuple:
        """Crop offset as (col_offset, row_offset)."""
        return (self.col_offset, self.row_offset)

    @property
    def num_columns(self) -> int:
        """Width of the record: base columns plus the highest slot written."""
        return max([REGION_COLUMN, *self.slots])

    def get_slot(self, slot: int, default=None):
        return self.slots.get(slot, default)

    def set_slot(self, slot: int, value) -> None:
        require(slot >= FIRST_SLOT, f"slot {slot} overlaps base columns 1..{REGION_COLUMN}")
        self.slots[slot] = value

    def copy(self) -> "FlakeRecord":
        return FlakeRecord(
            self.source_path, self.crop_path, self.row_offset, self.col_offset,
            copy.deepcopy(self.region), copy.deepcopy(self.slots),
        )

    def __eq__(self, other):
        if not isinstance(other, FlakeRecord):
            return NotImplemented
        return (
            self.source_path == other.source_path
            and self.crop_path == other.crop_path
            and self.row_offset == other.row_offset
            and self.col_offset == other.col_offset
            and self.region == other.region
            and self.slots == other.slots
        )

    def __repr__(self):
        return f"FlakeRecord({self.source_path!r}, slots={sorted(self.slots)})"


class DayFile:
    """All records of one quality class captured on one calendar day.

    Parameters
    ----------
    day : datetime.date
        Calendar day the file covers.
    quality : str
        'good' or 'all'.
    records : list of FlakeRecord
        Table rows in cache order. Row ``i`` has 1-based position ``i + 1``.
    settings : dict, optional
        Settings snapshot stored with the file.
    """

    def __init__(self, day, quality: str, records=None, settings=None):
        require(quality in QUALITY_CLASSES, f"unknown quality class {quality!r}")
        self.day = day
        self.quality = quality
        self.records = list(records or [])
        self.settings = dict(settings or {})

    @property
    def num_columns(self) -> int:
        if not self.records:
            return REGION_COLUMN
        return max(r.num_columns for r in self.records)

    def record_at(self, position: int) -> FlakeRecord:
        """Record at 1-based cache position."""
        return self.records[position - 1]

    def __len__(self):
        return len(self.records)

    def __repr__(self):
        return f"DayFile({self.day:%Y-%m-%d}, {self.quality}, {len(self.records)} records)"
