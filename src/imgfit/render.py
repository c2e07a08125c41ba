"""Render module: draw the planned rectangle through the transform and encode."""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass

from PIL import Image

from imgfit.errors import CollaboratorFailure, UnsupportedOutputFormat
from imgfit.geometry import GeometryPlan
from imgfit.transform import TransformPlan

logger = logging.getLogger(__name__)

RAW_SURFACE = "image"  # return the drawing surface instead of bytes
OUTPUT_FORMATS = ("jpg", "jpeg", "png", RAW_SURFACE)
DEFAULT_JPEG_QUALITY = 92
# Modes the PNG encoder writes as-is; anything else is converted first.
PNG_MODES = ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA")


def normalize_output_format(output_format: str) -> str:
    """Map a requested output format to "jpeg", "png" or RAW_SURFACE.

    Raises:
        UnsupportedOutputFormat: Anything other than jpg, jpeg, png or
            the raw surface sentinel (matching is case-sensitive).
    """
    if output_format not in OUTPUT_FORMATS:
        raise UnsupportedOutputFormat(
            f"outputFormat must be either jpe?g or png, got {output_format!r}"
        )
    if output_format == "jpg":
        return "jpeg"
    return output_format


@dataclass
class RenderOutput:
    """Rendered result: a raw surface or encoded bytes."""

    format: str  # "jpeg", "png" or RAW_SURFACE
    image: Image.Image | None = None
    data: bytes | None = None

    @property
    def is_raw(self) -> bool:
        return self.format == RAW_SURFACE

    @property
    def mime_type(self) -> str | None:
        return None if self.is_raw else f"image/{self.format}"

    @property
    def data_url(self) -> str:
        """Encoded bytes as a base64 data URL."""
        if self.data is None:
            raise ValueError("Raw surface output has no encoded data")
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


def draw(
    source: Image.Image, geometry: GeometryPlan, transform: TransformPlan
) -> Image.Image:
    """Draw geometry's source rectangle, scaled and transformed, on a new canvas."""
    drawn = source.crop(geometry.src_box).resize(
        geometry.dst_size, Image.Resampling.LANCZOS
    )
    if transform.is_identity and transform.canvas_size == geometry.dst_size:
        return drawn
    return drawn.transform(
        transform.canvas_size,
        Image.Transform.AFFINE,
        transform.affine_coefficients(),
        resample=Image.Resampling.NEAREST,
    )


def encode(surface: Image.Image, output_format: str, quality: int) -> bytes:
    """Encode a surface as JPEG or PNG bytes."""
    buf = io.BytesIO()
    try:
        if output_format == "jpeg":
            if surface.mode not in ("RGB", "L"):
                surface = surface.convert("RGB")
            surface.save(buf, "JPEG", quality=quality)
        else:
            if surface.mode not in PNG_MODES:
                surface = surface.convert("RGBA" if "A" in surface.getbands() else "RGB")
            surface.save(buf, "PNG")
    except (OSError, ValueError) as e:
        raise CollaboratorFailure(f"Encoding {output_format} failed: {e}") from e
    return buf.getvalue()


def render(
    source: Image.Image,
    geometry: GeometryPlan,
    transform: TransformPlan,
    output_format: str = "jpeg",
    quality: int = DEFAULT_JPEG_QUALITY,
) -> RenderOutput:
    """Render a planned resize.

    Args:
        source: Decoded source image, in stored orientation.
        geometry: Source rectangle and destination size.
        transform: Canvas size and orientation correction.
        output_format: jpg, jpeg, png or RAW_SURFACE.
        quality: JPEG quality (ignored for PNG).

    Returns:
        RenderOutput with the surface (RAW_SURFACE) or encoded bytes.
    """
    fmt = normalize_output_format(output_format)
    surface = draw(source, geometry, transform)
    logger.debug("Rendered %dx%d surface as %s", *surface.size, fmt)

    if fmt == RAW_SURFACE:
        return RenderOutput(format=fmt, image=surface)
    return RenderOutput(format=fmt, data=encode(surface, fmt, quality))
