"""Ingest module: media type checks, byte reading and decoding."""

from __future__ import annotations

import base64
import binascii
import io
import logging
import mimetypes
import re
from pathlib import Path
from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from imgfit.errors import CollaboratorFailure, UnsupportedMediaType

logger = logging.getLogger(__name__)

MEDIA_TYPE_PATTERN = re.compile(r"(jpe?g|png)$", re.IGNORECASE)

Source = bytes | bytearray | str | Path | BinaryIO


def check_media_type(media_type: str) -> None:
    """Raise UnsupportedMediaType unless media_type ends in jpg, jpeg or png."""
    if not MEDIA_TYPE_PATTERN.search(media_type or ""):
        raise UnsupportedMediaType(
            f"image must be either jpeg or png, got {media_type!r}"
        )


def guess_media_type(path: Path | str) -> str:
    """Guess a media type from a filename suffix."""
    media_type, _ = mimetypes.guess_type(str(path))
    return media_type or "application/octet-stream"


def read_source(source: Source) -> bytes:
    """Read all bytes of a source.

    Args:
        source: Raw bytes, a file path, or a binary file-like object.

    Raises:
        CollaboratorFailure: The source could not be read.
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    try:
        if isinstance(source, (str, Path)):
            return Path(source).read_bytes()
        return source.read()
    except OSError as e:
        raise CollaboratorFailure(f"Could not read source: {e}") from e


def to_data_url(data: bytes, media_type: str) -> str:
    """Wrap raw bytes in a base64 data URL."""
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(url: str) -> Image.Image:
    """Decode a base64 data URL into a fully loaded PIL image.

    Pixels stay in stored orientation (EXIF is not applied).

    Raises:
        CollaboratorFailure: Malformed URL or undecodable image data.
    """
    header, sep, payload = url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise CollaboratorFailure("Not a base64 data URL")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CollaboratorFailure(f"Malformed base64 payload: {e}") from e

    return decode_bytes(data)


def decode_bytes(data: bytes) -> Image.Image:
    """Decode raw image bytes into a fully loaded PIL image."""
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as e:
        raise CollaboratorFailure(f"Could not decode image: {e}") from e

    logger.debug("Decoded %s image %dx%d (%s)", img.format, *img.size, img.mode)
    return img
