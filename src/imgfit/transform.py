"""Transform module: canvas size and affine transform correcting orientation."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from imgfit.geometry import GeometryPlan
from imgfit.orientation import Orientation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformPlan:
    """Canvas size plus rotate-then-translate applied before drawing.

    A point p of the drawn (dst-sized) image lands on the canvas at
    R(rotation) * (p + (translate_x, translate_y)).
    """

    canvas_width: int
    canvas_height: int
    rotation: float = 0.0  # radians, clockwise in image coordinates
    translate_x: int = 0
    translate_y: int = 0

    @property
    def canvas_size(self) -> tuple[int, int]:
        return (self.canvas_width, self.canvas_height)

    @property
    def is_identity(self) -> bool:
        return self.rotation == 0 and self.translate_x == 0 and self.translate_y == 0

    def affine_coefficients(self) -> tuple[float, float, float, float, float, float]:
        """Inverse mapping (canvas -> drawn image) for Image.transform(AFFINE).

        Trig values are snapped so quarter turns map pixel centres exactly.
        """
        cos = round(math.cos(self.rotation), 12)
        sin = round(math.sin(self.rotation), 12)
        return (cos, sin, -self.translate_x, -sin, cos, -self.translate_y)


def plan_transform(
    orientation: Orientation | int, geometry: GeometryPlan
) -> TransformPlan:
    """Derive the orientation-correcting transform for a geometry plan.

    Only the pure rotations (3, 6, 8) get a transform. Mirrored codes
    (2, 4, 5, 7) and the -1/-2 sentinels draw untransformed; 5 and 7
    still swap the canvas dimensions.
    """
    if isinstance(orientation, int):
        orientation = Orientation.from_code(orientation)
    code = orientation.code
    width, height = geometry.dst_width, geometry.dst_height

    if orientation.swaps_dimensions:
        canvas_width, canvas_height = height, width
    else:
        canvas_width, canvas_height = width, height

    if code == 3:
        plan = TransformPlan(canvas_width, canvas_height, math.pi, -width, -height)
    elif code == 6:
        plan = TransformPlan(canvas_width, canvas_height, math.pi / 2, 0, -height)
    elif code == 8:
        plan = TransformPlan(canvas_width, canvas_height, -math.pi / 2, -width, 0)
    else:
        plan = TransformPlan(canvas_width, canvas_height)

    if orientation.is_mirrored:
        logger.debug("Mirrored orientation %d is drawn without flipping", code)
    logger.debug("Orientation %d -> %s", code, plan)
    return plan
