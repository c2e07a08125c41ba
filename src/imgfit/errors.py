"""Error kinds raised by the resize pipeline."""

from __future__ import annotations


class ImgfitError(Exception):
    """Base class for all imgfit errors."""


class UnsupportedMediaType(ImgfitError, TypeError):
    """Source media type is not a JPEG or PNG image."""


class UnsupportedOutputFormat(ImgfitError, ValueError):
    """Requested output format is not one of jpg, jpeg, png or the raw surface."""


class CollaboratorFailure(ImgfitError):
    """Reading, decoding, cropping or encoding failed outside the core.

    Always chained to the underlying exception.
    """
