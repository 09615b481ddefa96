"""Parse capture time and camera id from flake filenames and index a DayFile.

The index is a DataFrame with one row per non-empty record, in cache order:

=========  ==============================================
column     meaning
=========  ==============================================
ordinal    0-based rank of the flake in the index
position   1-based row of the record in the DayFile
timestamp  capture time parsed from the filename
cam_id     camera id parsed from the filename
=========  ==============================================
"""

import logging
import re
from datetime import datetime

import pandas as pd

from masclab.contracts import CorruptFilenameError

__all__ = ['FlakeIndexer', 'INDEX_COLUMNS']

logger = logging.getLogger(__name__)

INDEX_COLUMNS = ["ordinal", "position", "timestamp", "cam_id"]


class FlakeIndexer:
    """Builds the date/position/camera index of a DayFile.

    Parameters
    ----------
    pattern : str
        Image filename regex with named groups ``timestamp`` and ``cam_id``.
    timestamp_format : str
        ``strptime`` format of the ``timestamp`` group.
    """

    def __init__(self, pattern: str, timestamp_format: str):
        self.pattern = re.compile(pattern)
        self.timestamp_format = timestamp_format

    def parse(self, source_path: str, cache_file=None, record_index=None):
        """Return (timestamp, cam_id) for one record's source path.

        Raises
        ------
        CorruptFilenameError
            If the pattern matches zero or more than one time, or the
            matched timestamp does not parse. A corrupt name means the
            cache itself is suspect, so callers must not skip it.
        """
        matches = list(self.pattern.finditer(source_path or ""))
        if len(matches) != 1:
            raise CorruptFilenameError(source_path, cache_file, record_index, len(matches))

        groups = matches[0].groupdict()
        try:
            timestamp = datetime.strptime(groups["timestamp"], self.timestamp_format)
            cam_id = int(groups["cam_id"])
        except (TypeError, ValueError) as e:
            raise CorruptFilenameError(source_path, cache_file, record_index, 1) from e
        return timestamp, cam_id

    def build_index(self, day_file, cache_file=None) -> pd.DataFrame:
        """Index every record up to the first fully-empty one.

        Records are append-only and padding is trailing, so the first empty
        record ends the table.
        """
        rows = []
        for position, record in enumerate(day_file.records, start=1):
            if record.is_empty():
                break
            timestamp, cam_id = self.parse(record.source_path, cache_file, position)
            rows.append((len(rows), position, timestamp, cam_id))

        index = pd.DataFrame(rows, columns=INDEX_COLUMNS)
        index["timestamp"] = pd.to_datetime(index["timestamp"])
        logger.debug("Indexed %d flake(s) in %s", len(index), cache_file or day_file)
        return index

    @staticmethod
    def filter_to_range(index: pd.DataFrame, start: datetime, end: datetime) -> pd.DataFrame:
        """Rows captured within [start, end], keeping index order."""
        in_range = (index["timestamp"] >= pd.Timestamp(start)) & (index["timestamp"] <= pd.Timestamp(end))
        return index[in_range]
