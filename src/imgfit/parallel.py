"""Parallel processing utilities for imgfit.

Uses ProcessPoolExecutor so decoding, resampling and encoding of a
batch spread across CPUs.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from imgfit.geometry import FitRequest
from imgfit.pipeline import DEFAULT_FORMAT
from imgfit.render import DEFAULT_JPEG_QUALITY

logger = logging.getLogger(__name__)


@dataclass
class ResizeResult:
    """Result of resizing a single file."""

    path: str
    success: bool
    output_path: str | None = None
    orientation: int | None = None
    error: str | None = None


def resize_single_file(
    path_str: str,
    out_path_str: str,
    request: FitRequest,
    output_format: str,
    crop_strategy: str,
    quality: int,
) -> ResizeResult:
    """Resize one file and write the result (runs in worker process).

    Runs in worker processes, so imports are local.

    Args:
        path_str: Absolute path to the source image.
        out_path_str: Path to write the encoded output to.
        request: Target size and fit policy.
        output_format: jpg, jpeg or png.
        crop_strategy: Crop strategy name, used in crop mode.
        quality: JPEG quality.

    Returns:
        ResizeResult with the output path and source orientation.
    """
    import asyncio

    from imgfit.cropping import get_crop_strategy
    from imgfit.errors import ImgfitError
    from imgfit.export import write_output
    from imgfit.ingest import guess_media_type
    from imgfit.pipeline import prepare
    from imgfit.render import render

    path = Path(path_str)

    try:
        cropper = get_crop_strategy(crop_strategy) if request.crop else None
        plan = asyncio.run(
            prepare(path, guess_media_type(path), request, output_format, cropper)
        )
        output = render(plan.image, plan.geometry, plan.transform, output_format, quality)
        write_output(output, Path(out_path_str))

        return ResizeResult(
            path=path_str,
            success=True,
            output_path=out_path_str,
            orientation=plan.orientation.code,
        )

    except (ImgfitError, OSError, ValueError) as e:
        return ResizeResult(
            path=path_str,
            success=False,
            error=str(e),
        )


def resize_files_parallel(
    files: list[Path],
    out_dir: Path,
    request: FitRequest,
    output_format: str = DEFAULT_FORMAT,
    crop_strategy: str = "saliency",
    quality: int = DEFAULT_JPEG_QUALITY,
    workers: int | None = None,
) -> Iterator[ResizeResult]:
    """Resize multiple files in parallel.

    Args:
        files: Source image paths.
        out_dir: Directory for outputs (created if needed).
        request: Target size and fit policy.
        output_format: jpg, jpeg or png.
        crop_strategy: Crop strategy name, used in crop mode.
        quality: JPEG quality.
        workers: Number of worker processes (default: CPU count - 1).

    Yields:
        ResizeResult for each file, in completion order.
    """
    from imgfit.export import output_path_for

    if not files:
        return

    if workers is None:
        workers = get_default_workers()

    # Limit workers to reasonable bounds
    workers = max(1, min(workers, 16, len(files)))

    out_dir.mkdir(parents=True, exist_ok=True)

    # Name outputs up front so workers never race on collisions
    taken: set[Path] = set()
    jobs = [
        (path, output_path_for(path, out_dir, output_format, taken)) for path in files
    ]

    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(
                resize_single_file,
                str(path.resolve()),
                str(out_path),
                request,
                output_format,
                crop_strategy,
                quality,
            ): path
            for path, out_path in jobs
        }

        for future in as_completed(futures):
            result = future.result()
            if not result.success:
                logger.warning("Failed to resize %s: %s", result.path, result.error)
            yield result


def get_default_workers() -> int:
    """Get default number of workers based on CPU count."""
    cpu_count = os.cpu_count() or 4
    # Use N-1 CPUs to leave headroom, minimum 1
    return max(1, cpu_count - 1)
