"""Crop collaborator types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from PIL import Image


@dataclass(frozen=True)
class CropRect:
    """Source sub-rectangle chosen by a crop strategy, in pixels."""

    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class CropResult:
    """Answer of a crop strategy: the best-scoring rectangle."""

    top_crop: CropRect


class CropStrategy(Protocol):
    """Anything that can pick a source rectangle for a target size."""

    async def crop(self, image: Image.Image, width: int, height: int) -> CropResult:
        ...


def fit_aspect(
    image_width: int, image_height: int, width: int, height: int
) -> tuple[int, int]:
    """Largest (w, h) inside the image with the aspect ratio of width x height."""
    scale = min(image_width / width, image_height / height)
    crop_w = max(1, min(image_width, round(width * scale)))
    crop_h = max(1, min(image_height, round(height * scale)))
    return crop_w, crop_h
