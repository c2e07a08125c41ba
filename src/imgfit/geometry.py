"""Geometry module: source and destination rectangles for a fit policy."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from imgfit.errors import CollaboratorFailure

if TYPE_CHECKING:
    from PIL import Image

    from imgfit.cropping import CropStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntrinsicSize:
    """Pixel dimensions of the decoded source image."""

    width: int
    height: int


@dataclass(frozen=True)
class FitRequest:
    """Target size and fit policy for one resize."""

    target_width: int
    target_height: int
    crop: bool = False  # smart-crop to exactly the target size
    force_ratio: bool = False  # stretch to the target size

    def __post_init__(self) -> None:
        for name in ("target_width", "target_height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class GeometryPlan:
    """Everything the draw call needs: where to read and how big to draw."""

    src_x: int
    src_y: int
    src_width: int
    src_height: int
    dst_width: int
    dst_height: int

    @property
    def src_box(self) -> tuple[int, int, int, int]:
        """Source rectangle as a PIL box (left, top, right, bottom)."""
        return (
            self.src_x,
            self.src_y,
            self.src_x + self.src_width,
            self.src_y + self.src_height,
        )

    @property
    def dst_size(self) -> tuple[int, int]:
        return (self.dst_width, self.dst_height)


def round_half_away(value: float) -> int:
    """Round to nearest integer, ties away from zero (not banker's rounding)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def fit_size(size: IntrinsicSize, request: FitRequest) -> GeometryPlan:
    """Plan the non-crop policies over the full source image.

    Force-ratio stretches to the target. Otherwise the aspect ratio is
    kept: landscape images are anchored on target width, everything
    else (square included) on target height.
    """
    if request.force_ratio:
        dst_width = request.target_width
        dst_height = request.target_height
    elif size.width > size.height:
        dst_width = request.target_width
        dst_height = round_half_away(size.height / size.width * dst_width)
    else:
        dst_height = request.target_height
        dst_width = round_half_away(size.width / size.height * dst_height)

    return GeometryPlan(
        src_x=0,
        src_y=0,
        src_width=size.width,
        src_height=size.height,
        dst_width=max(1, dst_width),
        dst_height=max(1, dst_height),
    )


async def plan_geometry(
    size: IntrinsicSize,
    request: FitRequest,
    cropper: CropStrategy | None = None,
    image: Image.Image | None = None,
) -> GeometryPlan:
    """Compute the geometry plan for one resize.

    Args:
        size: Intrinsic size of the decoded image.
        request: Target size and fit policy.
        cropper: Crop strategy for crop mode (default: SaliencyCrop).
        image: Decoded image, required in crop mode.

    Returns:
        GeometryPlan. Crop mode always yields exactly the target size,
        with the source rectangle taken verbatim from the cropper.

    Raises:
        ValueError: Crop mode requested without an image.
        CollaboratorFailure: The cropper raised.
    """
    if not request.crop:
        plan = fit_size(size, request)
        logger.debug("Planned %s for %dx%d source", plan, size.width, size.height)
        return plan

    if image is None:
        raise ValueError("Crop mode needs the decoded image")
    if cropper is None:
        from imgfit.cropping import SaliencyCrop

        cropper = SaliencyCrop()

    try:
        result = await cropper.crop(image, request.target_width, request.target_height)
    except Exception as e:
        raise CollaboratorFailure(f"Crop strategy {cropper!r} failed: {e}") from e

    top = result.top_crop
    plan = GeometryPlan(
        src_x=top.x,
        src_y=top.y,
        src_width=top.width,
        src_height=top.height,
        dst_width=request.target_width,
        dst_height=request.target_height,
    )
    logger.debug("Planned crop %s via %r", plan, cropper)
    return plan
