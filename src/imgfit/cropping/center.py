"""Centre crop strategy."""

from __future__ import annotations

from PIL import Image

from imgfit.cropping.types import CropRect, CropResult, fit_aspect


class CenterCrop:
    """Largest centred rectangle with the target aspect ratio."""

    async def crop(self, image: Image.Image, width: int, height: int) -> CropResult:
        image_w, image_h = image.size
        crop_w, crop_h = fit_aspect(image_w, image_h, width, height)
        return CropResult(
            CropRect(
                x=(image_w - crop_w) // 2,
                y=(image_h - crop_h) // 2,
                width=crop_w,
                height=crop_h,
            )
        )

    def __repr__(self) -> str:
        return "CenterCrop()"
