"""Saliency crop strategy: slide a target-shaped window over a saliency map."""

from __future__ import annotations

import asyncio
import logging

import numpy as np
from numpy.typing import NDArray
from PIL import Image
from scipy.ndimage import uniform_filter  # type: ignore[import-untyped]

from imgfit.cropping.types import CropRect, CropResult, fit_aspect

logger = logging.getLogger(__name__)


def compute_saliency_map(gray: NDArray[np.float64]) -> NDArray[np.float64]:
    """Estimate per-pixel saliency from edges and local contrast.

    Returns a map normalized to 0-1 (all zeros for a flat image).
    """
    h, w = gray.shape

    gx = np.abs(np.diff(gray, axis=1, prepend=gray[:, :1]))
    gy = np.abs(np.diff(gray, axis=0, prepend=gray[:1, :]))
    edges = np.sqrt(gx**2 + gy**2)

    # Local contrast as saliency proxy
    size = max(3, min(h, w) // 8)
    local_mean = uniform_filter(gray, size=size)
    local_sqr = uniform_filter(gray**2, size=size)
    local_std = np.sqrt(np.maximum(0, local_sqr - local_mean**2))

    saliency = edges * 0.5 + local_std * 0.5
    peak = saliency.max()
    if peak < 1e-3:
        # Flat image; only float noise left
        return np.zeros_like(saliency)
    return saliency / peak


def _center_weight(h: int, w: int) -> NDArray[np.float64]:
    """1 at the centre falling to 0 at the corners."""
    y_coords, x_coords = np.mgrid[0:h, 0:w]
    center_y, center_x = (h - 1) / 2, (w - 1) / 2
    dist = np.sqrt((y_coords - center_y) ** 2 + (x_coords - center_x) ** 2)
    max_dist = np.sqrt(center_y**2 + center_x**2) + 1e-6
    return 1.0 - dist / max_dist


def _window_means(
    values: NDArray[np.float64], win_h: int, win_w: int
) -> NDArray[np.float64]:
    """Mean of every win_h x win_w window, indexed by top-left corner."""
    h, w = values.shape
    integral = np.zeros((h + 1, w + 1), dtype=np.float64)
    integral[1:, 1:] = values.cumsum(axis=0).cumsum(axis=1)
    sums = (
        integral[win_h:, win_w:]
        - integral[:-win_h, win_w:]
        - integral[win_h:, :-win_w]
        + integral[:-win_h, :-win_w]
    )
    return sums / (win_h * win_w)


class SaliencyCrop:
    """Pick the window of the target aspect ratio holding the most saliency.

    Args:
        analysis_size: Longest side of the downsampled analysis image.
        min_scale: Smallest window scale tried, relative to the largest
            window of the target aspect ratio (1.0 = only the largest).
        scale_step: Decrement between tried scales.
        center_bias: Weight of the centre prior added to the saliency map;
            breaks ties toward the middle of the frame.
    """

    def __init__(
        self,
        analysis_size: int = 256,
        min_scale: float = 1.0,
        scale_step: float = 0.1,
        center_bias: float = 0.05,
    ) -> None:
        if not 0 < min_scale <= 1.0:
            raise ValueError("min_scale must be in (0, 1]")
        if scale_step <= 0:
            raise ValueError("scale_step must be positive")
        self.analysis_size = analysis_size
        self.min_scale = min_scale
        self.scale_step = scale_step
        self.center_bias = center_bias

    async def crop(self, image: Image.Image, width: int, height: int) -> CropResult:
        return await asyncio.to_thread(self.find_crop, image, width, height)

    def find_crop(self, image: Image.Image, width: int, height: int) -> CropResult:
        """Synchronous form of crop()."""
        if width <= 0 or height <= 0:
            raise ValueError("Crop target must be positive")

        image_w, image_h = image.size
        crop_w, crop_h = fit_aspect(image_w, image_h, width, height)

        # Downsample for speed
        factor = max(1.0, max(image_w, image_h) / self.analysis_size)
        small_w = max(1, round(image_w / factor))
        small_h = max(1, round(image_h / factor))
        small = image.convert("L").resize((small_w, small_h), Image.Resampling.BILINEAR)
        scale_x = image_w / small_w
        scale_y = image_h / small_h

        gray = np.array(small, dtype=np.float64)
        values = compute_saliency_map(gray) + self.center_bias * _center_weight(
            small_h, small_w
        )

        best: tuple[float, int, int, float] | None = None
        scale = 1.0
        while scale >= self.min_scale - 1e-9:
            win_w = max(1, min(small_w, round(crop_w * scale / scale_x)))
            win_h = max(1, min(small_h, round(crop_h * scale / scale_y)))
            means = _window_means(values, win_h, win_w)
            y, x = np.unravel_index(int(np.argmax(means)), means.shape)
            score = float(means[y, x])
            if best is None or score > best[0]:
                best = (score, int(x), int(y), scale)
            scale -= self.scale_step

        assert best is not None
        _, x, y, scale = best

        out_w = max(1, min(image_w, round(crop_w * scale)))
        out_h = max(1, min(image_h, round(crop_h * scale)))
        left = min(round(x * scale_x), image_w - out_w)
        top = min(round(y * scale_y), image_h - out_h)

        logger.debug(
            "Saliency crop %dx%d at (%d, %d), scale %.2f", out_w, out_h, left, top, scale
        )
        return CropResult(CropRect(x=left, y=top, width=out_w, height=out_h))

    def __repr__(self) -> str:
        return (
            f"SaliencyCrop(analysis_size={self.analysis_size}, "
            f"min_scale={self.min_scale})"
        )
