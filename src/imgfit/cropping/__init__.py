"""Crop strategies consumed by the geometry planner in crop mode.

Strategies:
    saliency - densest window of an edge/contrast saliency map
    center   - largest centred window

Every strategy implements ``async crop(image, width, height) -> CropResult``.
"""

from __future__ import annotations

from imgfit.cropping.center import CenterCrop
from imgfit.cropping.saliency import SaliencyCrop, compute_saliency_map
from imgfit.cropping.types import CropRect, CropResult, CropStrategy, fit_aspect

CROP_STRATEGIES = ("saliency", "center")


def get_crop_strategy(name: str) -> CropStrategy:
    """Build a crop strategy by name."""
    if name == "saliency":
        return SaliencyCrop()
    if name == "center":
        return CenterCrop()
    raise ValueError(f"Unknown crop strategy: {name!r} (expected one of {CROP_STRATEGIES})")


__all__ = [
    "CROP_STRATEGIES",
    "CenterCrop",
    "CropRect",
    "CropResult",
    "CropStrategy",
    "SaliencyCrop",
    "compute_saliency_map",
    "fit_aspect",
    "get_crop_strategy",
]
