"""Tests for imgfit.cropping package."""

import asyncio

import numpy as np
import pytest
from PIL import Image

from imgfit.cropping import (
    CROP_STRATEGIES,
    CenterCrop,
    CropRect,
    SaliencyCrop,
    compute_saliency_map,
    fit_aspect,
    get_crop_strategy,
)


def make_test_image(
    w: int = 100, h: int = 100, color: tuple = (128, 128, 128)
) -> Image.Image:
    """Create a test image."""
    return Image.new("RGB", (w, h), color)


def make_busy_patch_image(w: int = 400, h: int = 100, x0: int = 300, x1: int = 380) -> Image.Image:
    """Dark image with a checkerboard patch between x0 and x1."""
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    yy, xx = np.mgrid[0:h, 0:w]
    checker = ((yy // 4 + xx // 4) % 2 == 0) * 255
    patch = (xx >= x0) & (xx < x1) & (yy >= 20) & (yy < 80)
    arr[patch] = checker[patch][:, None]
    return Image.fromarray(arr)


class TestFitAspect:
    def test_wide_image_square_target(self):
        assert fit_aspect(400, 100, 50, 50) == (100, 100)

    def test_tall_image_wide_target(self):
        assert fit_aspect(300, 900, 800, 600) == (300, 225)

    def test_same_aspect(self):
        assert fit_aspect(800, 600, 400, 300) == (800, 600)


class TestCenterCrop:
    def test_centered(self):
        result = asyncio.run(CenterCrop().crop(make_test_image(400, 100), 50, 50))
        assert result.top_crop == CropRect(150, 0, 100, 100)

    def test_vertical(self):
        result = asyncio.run(CenterCrop().crop(make_test_image(100, 300), 100, 100))
        assert result.top_crop == CropRect(0, 100, 100, 100)


class TestSaliencyMap:
    def test_flat_image_is_zero(self):
        gray = np.full((50, 50), 77.0)
        assert compute_saliency_map(gray).max() == 0

    def test_normalized(self):
        gray = np.array(make_busy_patch_image().convert("L"), dtype=np.float64)
        saliency = compute_saliency_map(gray)
        assert saliency.max() == pytest.approx(1.0)
        assert saliency.min() >= 0

    def test_busy_region_is_salient(self):
        gray = np.array(make_busy_patch_image().convert("L"), dtype=np.float64)
        saliency = compute_saliency_map(gray)
        assert saliency[:, 300:380].mean() > saliency[:, 0:200].mean()


class TestSaliencyCrop:
    def test_follows_busy_region(self):
        image = make_busy_patch_image()
        result = asyncio.run(SaliencyCrop().crop(image, 100, 100)).top_crop
        assert (result.width, result.height) == (100, 100)
        assert result.x >= 250
        assert result.x + result.width <= 400

    def test_flat_image_prefers_center(self):
        result = SaliencyCrop().find_crop(make_test_image(300, 100), 1, 1).top_crop
        assert (result.width, result.height) == (100, 100)
        assert 80 <= result.x <= 120

    def test_stays_inside_image(self):
        image = make_busy_patch_image(w=1000, h=700, x0=900, x1=1000)
        result = SaliencyCrop().find_crop(image, 640, 480).top_crop
        assert result.x >= 0 and result.y >= 0
        assert result.x + result.width <= 1000
        assert result.y + result.height <= 700

    def test_smaller_scales(self):
        image = make_busy_patch_image()
        cropper = SaliencyCrop(min_scale=0.5)
        result = cropper.find_crop(image, 100, 100).top_crop
        assert result.width == result.height
        assert 50 <= result.width <= 100

    def test_invalid_target(self):
        with pytest.raises(ValueError):
            SaliencyCrop().find_crop(make_test_image(), 0, 10)

    def test_invalid_options(self):
        with pytest.raises(ValueError):
            SaliencyCrop(min_scale=0)
        with pytest.raises(ValueError):
            SaliencyCrop(scale_step=0)


class TestGetCropStrategy:
    def test_known(self):
        assert isinstance(get_crop_strategy("saliency"), SaliencyCrop)
        assert isinstance(get_crop_strategy("center"), CenterCrop)
        assert set(CROP_STRATEGIES) == {"saliency", "center"}

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown crop strategy"):
            get_crop_strategy("faces")
