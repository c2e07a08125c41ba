"""Export module: name and write rendered outputs."""

from __future__ import annotations

from pathlib import Path

from imgfit.render import RAW_SURFACE, RenderOutput, normalize_output_format

_EXTENSIONS = {"jpeg": ".jpg", "png": ".png"}


def output_path_for(
    src: Path,
    out_dir: Path,
    output_format: str,
    taken: set[Path] | None = None,
) -> Path:
    """Pick a free output path in out_dir for a source file.

    Args:
        src: Source file path (only its stem is used).
        out_dir: Destination directory.
        output_format: jpg, jpeg or png.
        taken: Paths already reserved by this run; the result is added.
               Lets a batch name its outputs before any file exists.

    Returns:
        out_dir/<stem>.<ext>, or <stem>_N.<ext> if that name is taken.
    """
    fmt = normalize_output_format(output_format)
    if fmt == RAW_SURFACE:
        raise ValueError("Raw surface output cannot be written to a file")

    suffix = _EXTENSIONS[fmt]
    dest = out_dir / f"{src.stem}{suffix}"

    if taken is None:
        taken = set()

    # Handle name collisions
    counter = 1
    while dest.exists() or dest in taken:
        dest = out_dir / f"{src.stem}_{counter}{suffix}"
        counter += 1

    taken.add(dest)
    return dest


def write_output(output: RenderOutput, out_path: Path) -> Path:
    """Write encoded output bytes to out_path (parents created)."""
    if output.is_raw or output.data is None:
        raise ValueError("Raw surface output cannot be written to a file")

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(output.data)
    return out_path
