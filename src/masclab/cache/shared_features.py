"""Run-scoped cache of filled flake cross-sections.

Filling a flake is expensive and most modules need it, so each flake is
filled at most once per DayFile pass. A new cache is created for every
DayFile; ordinals are only unique within one pass.
"""

import logging
from pathlib import Path

import numpy as np

from masclab.imaging import fill_flake, load_flake_image, resolution_from_fov

__all__ = ['FilledFlake', 'SharedFeatureCache']

logger = logging.getLogger(__name__)


class FilledFlake:
    """Filled silhouette of one flake with its pixel size."""

    def __init__(self, mask: np.ndarray, resolution: float):
        self.mask = mask
        self.resolution = resolution  # microns per pixel

    @property
    def area_px(self) -> int:
        return int(np.count_nonzero(self.mask))


class SharedFeatureCache:
    """Memoizes FilledFlake per flake ordinal for one DayFile pass.

    Parameters
    ----------
    day_file : DayFile
        Records of the current pass.
    index : pd.DataFrame
        Flake index from FlakeIndexer.build_index (ordinal, position, cam_id).
    config : InternalConfig
        Supplies path_to_flakes, cam_fov and line_fill.
    fill : callable, optional
        ``fill(image, line_fill, resolution) -> mask``. Defaults to fill_flake.
    load_image : callable, optional
        ``load_image(path) -> image``. Defaults to load_flake_image.
    """

    def __init__(self, day_file, index, config, fill=fill_flake, load_image=load_flake_image):
        self.day_file = day_file
        self._rows = {
            int(row.ordinal): (int(row.position), int(row.cam_id))
            for row in index.itertuples(index=False)
        }
        self.path_to_flakes = Path(config.cache.path_to_flakes)
        self.cam_fov = config.masc.cam_fov
        self.line_fill = config.masc.line_fill
        self._fill = fill
        self._load_image = load_image
        self._cache = {}

    def get(self, flake_ordinal: int) -> FilledFlake:
        """Filled silhouette for a flake, computed on first request."""
        cached = self._cache.get(flake_ordinal)
        if cached is not None:
            return cached

        position, cam_id = self._rows[flake_ordinal]
        record = self.day_file.record_at(position)
        image = self._load_image(self.path_to_flakes / record.source_path)
        resolution = resolution_from_fov(self.cam_fov, cam_id)
        filled = FilledFlake(self._fill(image, self.line_fill, resolution), resolution)

        self._cache[flake_ordinal] = filled
        logger.debug("Filled flake %d (%s) at %.2f um/px", flake_ordinal,
                     record.source_path, resolution)
        return filled

    def __len__(self):
        return len(self._cache)

    def clear(self):
        self._cache.clear()
