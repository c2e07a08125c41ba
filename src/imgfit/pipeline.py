"""Pipeline: validate, read, decode, plan (orientation and geometry), render.

The orientation parse and the geometry plan are independent producers
over the same immutable inputs, so they run as sibling tasks and join
before the transform is planned.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from PIL import Image

from imgfit.cropping import CropStrategy
from imgfit.geometry import FitRequest, GeometryPlan, IntrinsicSize, plan_geometry
from imgfit.ingest import Source, check_media_type, decode_data_url, read_source, to_data_url
from imgfit.orientation import Orientation, read_orientation
from imgfit.render import (
    DEFAULT_JPEG_QUALITY,
    RenderOutput,
    normalize_output_format,
    render,
)
from imgfit.transform import TransformPlan, plan_transform

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "jpeg"


@dataclass
class ResizePlan:
    """Joined planning results for one resize, ready to render."""

    image: Image.Image
    orientation: Orientation
    geometry: GeometryPlan
    transform: TransformPlan


async def prepare(
    source: Source,
    media_type: str,
    request: FitRequest,
    output_format: str = DEFAULT_FORMAT,
    cropper: CropStrategy | None = None,
) -> ResizePlan:
    """Read, decode and plan a resize without rendering it.

    Raises:
        UnsupportedMediaType: Before any I/O.
        UnsupportedOutputFormat: Before any I/O.
        CollaboratorFailure: Reading, decoding or cropping failed.
    """
    check_media_type(media_type)
    normalize_output_format(output_format)

    data = await asyncio.to_thread(read_source, source)
    image = await asyncio.to_thread(decode_data_url, to_data_url(data, media_type))
    size = IntrinsicSize(*image.size)

    try:
        async with asyncio.TaskGroup() as tg:
            orientation_task = tg.create_task(asyncio.to_thread(read_orientation, data))
            geometry_task = tg.create_task(
                plan_geometry(size, request, cropper=cropper, image=image)
            )
    except ExceptionGroup as group:
        # Surface the collaborator's own error rather than the group.
        raise group.exceptions[0] from None

    orientation = orientation_task.result()
    geometry = geometry_task.result()
    transform = plan_transform(orientation, geometry)
    logger.debug(
        "Prepared %dx%d source: orientation %d, canvas %dx%d",
        size.width,
        size.height,
        orientation.code,
        transform.canvas_width,
        transform.canvas_height,
    )
    return ResizePlan(image, orientation, geometry, transform)


async def resize(
    source: Source,
    media_type: str,
    request: FitRequest,
    output_format: str = DEFAULT_FORMAT,
    cropper: CropStrategy | None = None,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> RenderOutput:
    """Resize an image, correcting its EXIF orientation.

    Args:
        source: Raw bytes, a path, or a binary file-like object.
        media_type: Media type of the source, e.g. "image/jpeg".
        request: Target size and fit policy.
        output_format: jpg, jpeg, png or "image" for the raw surface.
        cropper: Crop strategy used when request.crop is set.
        quality: JPEG quality.

    Returns:
        RenderOutput owned by the caller.
    """
    plan = await prepare(source, media_type, request, output_format, cropper)
    return await asyncio.to_thread(
        render, plan.image, plan.geometry, plan.transform, output_format, quality
    )


def resize_sync(
    source: Source,
    media_type: str,
    request: FitRequest,
    output_format: str = DEFAULT_FORMAT,
    cropper: CropStrategy | None = None,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> RenderOutput:
    """Blocking wrapper around resize() for callers without an event loop."""
    return asyncio.run(
        resize(source, media_type, request, output_format, cropper, quality)
    )


def resize_plan_sync(
    source: Source,
    media_type: str,
    request: FitRequest,
    output_format: str = DEFAULT_FORMAT,
    cropper: CropStrategy | None = None,
) -> ResizePlan:
    """Blocking wrapper around prepare()."""
    return asyncio.run(prepare(source, media_type, request, output_format, cropper))
