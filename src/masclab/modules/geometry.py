"""Built-in geometry modules computed from the filled flake.

- flake_geometry (slots 6-8): area [um^2], perimeter [um], max diameter [um]
- flake_shape (slots 9-11): aspect ratio, orientation [deg], complexity

Only the largest connected object of the filled mask is measured.
"""

import logging
import math

import numpy as np
from skimage.measure import label, regionprops

from masclab.modules.base import FlakeModule

__all__ = ['FlakeGeometryModule', 'FlakeShapeModule']

logger = logging.getLogger(__name__)


def largest_region(mask: np.ndarray):
    """regionprops of the largest object in a binary mask, or None if empty."""
    labels = label(np.asarray(mask, dtype=bool))
    regions = regionprops(labels)
    if not regions:
        return None
    return max(regions, key=lambda r: r.area)


class FlakeGeometryModule(FlakeModule):
    """Area, perimeter and maximum diameter in physical units."""

    name = "flake_geometry"
    output_slots = (6, 7, 8)

    def run(self, inputs):
        mask = inputs.module_inputs["filled_flake"]
        res = inputs.module_inputs["resolution"]

        region = largest_region(mask)
        if region is None:
            logger.debug("Empty filled flake: %s", inputs.img_fullpath)
            return [0.0, 0.0, 0.0]

        area = float(region.area) * res ** 2
        perimeter = float(region.perimeter) * res
        max_diameter = float(region.feret_diameter_max) * res
        return [area, perimeter, max_diameter]


class FlakeShapeModule(FlakeModule):
    """Aspect ratio, orientation and complexity.

    Complexity is perimeter over the circumference of the equal-area
    circle, so it reads area and perimeter from flake_geometry's slots.
    """

    name = "flake_shape"
    output_slots = (9, 10, 11)
    dependencies = ("flake_geometry",)

    AREA_SLOT = 6
    PERIMETER_SLOT = 7

    def resolve_inputs(self, img_fullpath, region, crop_box, context):
        inputs = super().resolve_inputs(img_fullpath, region, crop_box, context)
        inputs["area"] = context.slots[self.AREA_SLOT]
        inputs["perimeter"] = context.slots[self.PERIMETER_SLOT]
        return inputs

    def run(self, inputs):
        region = largest_region(inputs.module_inputs["filled_flake"])
        if region is None or region.major_axis_length == 0:
            return [0.0, 0.0, 0.0]

        aspect_ratio = float(region.minor_axis_length / region.major_axis_length)
        orientation = float(np.degrees(region.orientation))

        area = inputs.module_inputs["area"]
        perimeter = inputs.module_inputs["perimeter"]
        complexity = perimeter / (2.0 * math.sqrt(math.pi * area)) if area > 0 else 0.0
        return [aspect_ratio, orientation, complexity]
