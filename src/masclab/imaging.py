"""Flake image helpers: loading and filled cross-section.

These are the default capabilities behind the shared feature cache. The
runner accepts replacements with the same signatures.
"""

import logging
import math

import numpy as np
from scipy import ndimage
from skimage import io
from skimage.color import rgb2gray
from skimage.morphology import closing, disk

logger = logging.getLogger(__name__)


def load_flake_image(path) -> np.ndarray:
    """Read a flake image as a 2D grayscale array."""
    image = io.imread(str(path))
    if image.ndim == 3:
        # Drop alpha before converting, MASC PNGs are sometimes RGBA
        image = rgb2gray(image[..., :3])
    return image


def resolution_from_fov(cam_fov, cam_id: int) -> float:
    """Microns per pixel for a camera, from its field of view in px/mm."""
    if cam_id < 0 or cam_id >= len(cam_fov):
        raise ValueError(f"No field of view configured for camera {cam_id} (have {len(cam_fov)})")
    return 1000.0 / cam_fov[cam_id]


def fill_flake(flake: np.ndarray, line_fill: float, resolution: float) -> np.ndarray:
    """Filled binary cross-section of a flake.

    Bridges gaps shorter than ``line_fill`` microns with a morphological
    closing, then fills enclosed holes.

    Parameters
    ----------
    flake : np.ndarray
        2D grayscale image, background is zero.
    line_fill : float
        Longest gap to bridge, in microns.
    resolution : float
        Microns per pixel.

    Returns
    -------
    np.ndarray
        Boolean mask of the filled flake.
    """
    binary = np.asarray(flake) > 0

    gap_px = line_fill / resolution
    radius = int(math.ceil(gap_px / 2))
    if radius >= 1:
        binary = closing(binary, disk(radius))

    filled = ndimage.binary_fill_holes(binary)
    logger.debug("Filled flake: gap=%.1fpx, %d -> %d px", gap_px,
                 int(np.count_nonzero(flake)), int(np.count_nonzero(filled)))
    return filled.astype(bool)
