"""imgfit: orientation-aware image resizing."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from imgfit.errors import (
    CollaboratorFailure,
    ImgfitError,
    UnsupportedMediaType,
    UnsupportedOutputFormat,
)
from imgfit.geometry import FitRequest, GeometryPlan, IntrinsicSize, fit_size
from imgfit.orientation import Orientation, read_orientation, read_orientation_code
from imgfit.render import DEFAULT_JPEG_QUALITY
from imgfit.transform import TransformPlan, plan_transform

__version__ = "0.1.0"

# Output formats accepted on the command line (the raw surface is API-only)
CLI_FORMATS = ("jpg", "jpeg", "png")
DEFAULT_FORMAT = "jpg"

__all__ = [
    "CollaboratorFailure",
    "FitRequest",
    "GeometryPlan",
    "ImgfitError",
    "IntrinsicSize",
    "Orientation",
    "TransformPlan",
    "UnsupportedMediaType",
    "UnsupportedOutputFormat",
    "fit_size",
    "main",
    "plan_transform",
    "read_orientation",
    "read_orientation_code",
]


def _add_fit_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by commands that build a FitRequest."""
    from imgfit.cropping import CROP_STRATEGIES

    parser.add_argument("--width", type=int, required=True, help="Target width")
    parser.add_argument("--height", type=int, required=True, help="Target height")
    parser.add_argument(
        "--crop",
        action="store_true",
        help="Crop to the exact target size instead of scaling",
    )
    parser.add_argument(
        "--crop-strategy",
        choices=CROP_STRATEGIES,
        default="saliency",
        help="How --crop picks the source region (default: saliency)",
    )
    parser.add_argument(
        "--force-ratio",
        action="store_true",
        help="Stretch to the target size, ignoring the aspect ratio",
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="imgfit",
        description="Orientation-aware image resizing.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # resize command
    resize_parser = subparsers.add_parser("resize", help="Resize JPEG/PNG images")
    resize_parser.add_argument("inputs", type=Path, nargs="+", help="Images to resize")
    resize_parser.add_argument(
        "--out", type=Path, required=True, help="Output directory"
    )
    _add_fit_arguments(resize_parser)
    resize_parser.add_argument(
        "--format",
        choices=CLI_FORMATS,
        default=DEFAULT_FORMAT,
        help=f"Output format (default: {DEFAULT_FORMAT})",
    )
    resize_parser.add_argument(
        "--quality",
        type=int,
        default=DEFAULT_JPEG_QUALITY,
        help=f"JPEG quality (default: {DEFAULT_JPEG_QUALITY})",
    )
    resize_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker processes for multiple inputs (default: CPU count - 1)",
    )

    # orientation command
    orientation_parser = subparsers.add_parser(
        "orientation", help="Show the EXIF orientation of images"
    )
    orientation_parser.add_argument("files", type=Path, nargs="+", help="Images")

    # plan command - dry run
    plan_parser = subparsers.add_parser(
        "plan", help="Show the geometry and transform plan without rendering"
    )
    plan_parser.add_argument("file", type=Path, help="Image to plan")
    _add_fit_arguments(plan_parser)

    args = parser.parse_args(argv)

    from imgfit.ui import configure_logging

    configure_logging(args.verbose)

    if args.command == "resize":
        return cmd_resize(
            args.inputs,
            args.out,
            args.width,
            args.height,
            args.crop,
            args.crop_strategy,
            args.force_ratio,
            args.format,
            args.quality,
            args.workers,
        )
    if args.command == "orientation":
        return cmd_orientation(args.files)
    if args.command == "plan":
        return cmd_plan(
            args.file,
            args.width,
            args.height,
            args.crop,
            args.crop_strategy,
            args.force_ratio,
        )

    parser.print_help()
    return 1


def cmd_resize(
    inputs: list[Path],
    out: Path,
    width: int,
    height: int,
    crop: bool,
    crop_strategy: str,
    force_ratio: bool,
    fmt: str,
    quality: int,
    workers: int | None,
) -> int:
    """Resize images into an output directory."""
    from imgfit.export import output_path_for
    from imgfit.parallel import resize_files_parallel, resize_single_file
    from imgfit.ui import create_progress

    try:
        request = FitRequest(width, height, crop=crop, force_ratio=force_ratio)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    missing = [p for p in inputs if not p.is_file()]
    if missing:
        for p in missing:
            print(f"Error: {p} is not a file", file=sys.stderr)
        return 1

    if out.exists() and not out.is_dir():
        print(f"Error: {out} is not a directory", file=sys.stderr)
        return 1

    failed = 0
    written = 0

    with create_progress() as progress:
        task = progress.add_task("[cyan]Resizing images...", total=len(inputs))

        if len(inputs) == 1 or workers == 1:
            out.mkdir(parents=True, exist_ok=True)
            taken: set[Path] = set()
            results = (
                resize_single_file(
                    str(path.resolve()),
                    str(output_path_for(path, out, fmt, taken)),
                    request,
                    fmt,
                    crop_strategy,
                    quality,
                )
                for path in inputs
            )
        else:
            results = resize_files_parallel(
                inputs,
                out,
                request,
                output_format=fmt,
                crop_strategy=crop_strategy,
                quality=quality,
                workers=workers,
            )

        for result in results:
            name = Path(result.path).name
            progress.update(task, description=f"[cyan]Resized {name}")
            if result.success:
                written += 1
            else:
                failed += 1
                print(f"  Warning: failed to resize {name}: {result.error}")
            progress.advance(task)

    print(f"\n✓ Wrote {written} images to {out}")
    if failed:
        print(f"{failed} images failed", file=sys.stderr)
        return 1
    return 0


def cmd_orientation(files: list[Path]) -> int:
    """Print the EXIF orientation of each file."""
    status = 0
    for path in files:
        try:
            data = path.read_bytes()
        except OSError as e:
            print(f"Error: cannot read {path}: {e}", file=sys.stderr)
            status = 1
            continue

        orientation = read_orientation(data)
        print(f"{orientation.code:>3}  {orientation.describe():<36} {path}")
    return status


def cmd_plan(
    file: Path,
    width: int,
    height: int,
    crop: bool,
    crop_strategy: str,
    force_ratio: bool,
) -> int:
    """Print the resize plan for one file."""
    from imgfit.cropping import get_crop_strategy
    from imgfit.ingest import guess_media_type
    from imgfit.pipeline import resize_plan_sync

    if not file.is_file():
        print(f"Error: {file} is not a file", file=sys.stderr)
        return 1

    try:
        request = FitRequest(width, height, crop=crop, force_ratio=force_ratio)
        cropper = get_crop_strategy(crop_strategy) if crop else None
        plan = resize_plan_sync(file, guess_media_type(file), request, cropper=cropper)
    except (ImgfitError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    g = plan.geometry
    t = plan.transform
    print(f"Source:      {plan.image.width}x{plan.image.height} {file}")
    print(f"Orientation: {plan.orientation.code} ({plan.orientation.describe()})")
    print(
        f"Geometry:    src ({g.src_x}, {g.src_y}) {g.src_width}x{g.src_height}"
        f" -> dst {g.dst_width}x{g.dst_height}"
    )
    print(
        f"Transform:   canvas {t.canvas_width}x{t.canvas_height}"
        f" rotate {t.rotation:.4f} rad translate ({t.translate_x}, {t.translate_y})"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
