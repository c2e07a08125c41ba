"""Orientation module: read the EXIF orientation tag from raw JPEG bytes.

The reader never raises. Buffers that are not JPEG resolve to the
UNRECOGNIZED sentinel (-2); JPEGs without a usable orientation tag, or
with malformed or truncated metadata, resolve to NO_METADATA (-1).
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

SOI_MARKER = 0xFFD8
APP1_MARKER = 0xFFE1
EXIF_SIGNATURE = 0x45786966  # "Exif"
LITTLE_ENDIAN_MARK = 0x4949  # "II"
ORIENTATION_TAG = 0x0112
IFD_ENTRY_SIZE = 12

UNRECOGNIZED_CODE = -2
NO_METADATA_CODE = -1

_DESCRIPTIONS = {
    1: "normal",
    2: "mirrored horizontal",
    3: "rotated 180",
    4: "mirrored vertical",
    5: "mirrored horizontal, rotated 90 CCW",
    6: "rotated 90 CW",
    7: "mirrored horizontal, rotated 90 CW",
    8: "rotated 90 CCW",
}


class OrientationStatus(Enum):
    """Outcome of an orientation read."""

    UNRECOGNIZED = "unrecognized"  # not a JPEG
    NO_METADATA = "no_metadata"  # JPEG without a usable tag
    KNOWN = "known"


@dataclass(frozen=True)
class Orientation:
    """EXIF orientation of an image, or the reason there is none."""

    status: OrientationStatus
    value: int | None = None  # 1..8 when status is KNOWN

    @classmethod
    def from_code(cls, code: int) -> Orientation:
        """Build from the integer form (-2, -1 or 1..8).

        Anything else is treated as malformed metadata.
        """
        if code == UNRECOGNIZED_CODE:
            return UNRECOGNIZED
        if 1 <= code <= 8:
            return cls(OrientationStatus.KNOWN, code)
        return NO_METADATA

    @property
    def code(self) -> int:
        """Integer form: -2, -1 or the tag value."""
        if self.status is OrientationStatus.UNRECOGNIZED:
            return UNRECOGNIZED_CODE
        if self.status is OrientationStatus.NO_METADATA:
            return NO_METADATA_CODE
        assert self.value is not None
        return self.value

    @property
    def is_known(self) -> bool:
        return self.status is OrientationStatus.KNOWN

    @property
    def is_mirrored(self) -> bool:
        return self.code in (2, 4, 5, 7)

    @property
    def swaps_dimensions(self) -> bool:
        """True for 5..8, whose correction involves a quarter turn."""
        return self.code > 4

    def describe(self) -> str:
        if self.status is OrientationStatus.UNRECOGNIZED:
            return "not a JPEG"
        if self.status is OrientationStatus.NO_METADATA:
            return "no orientation metadata"
        return _DESCRIPTIONS[self.code]


UNRECOGNIZED = Orientation(OrientationStatus.UNRECOGNIZED)
NO_METADATA = Orientation(OrientationStatus.NO_METADATA)


def _u16(data: bytes, offset: int, little: bool = False) -> int:
    return struct.unpack_from("<H" if little else ">H", data, offset)[0]


def _u32(data: bytes, offset: int, little: bool = False) -> int:
    return struct.unpack_from("<I" if little else ">I", data, offset)[0]


def _scan_segments(data: bytes) -> Orientation:
    """Walk the JPEG marker segments looking for an EXIF orientation tag.

    Raises struct.error when a read runs past the end of the buffer.
    """
    offset = 2
    while offset < len(data):
        # Segment length covers itself; anything this short cannot hold EXIF.
        if _u16(data, offset + 2) <= 8:
            return NO_METADATA

        marker = _u16(data, offset)
        length = _u16(data, offset + 2)

        if marker == APP1_MARKER:
            payload = offset + 4
            if _u32(data, payload) != EXIF_SIGNATURE:
                return NO_METADATA

            tiff = payload + 6
            little = _u16(data, tiff) == LITTLE_ENDIAN_MARK
            ifd = tiff + _u32(data, tiff + 4, little)
            count = _u16(data, ifd, little)

            for index in range(count):
                entry = ifd + 2 + index * IFD_ENTRY_SIZE
                if _u16(data, entry, little) == ORIENTATION_TAG:
                    return Orientation.from_code(_u16(data, entry + 8, little))
        elif marker & 0xFF00 != 0xFF00:
            # Left the marker segments (entropy-coded data or garbage).
            break

        offset += 2 + length

    return NO_METADATA


def read_orientation(data: bytes) -> Orientation:
    """Read the EXIF orientation of a raw image buffer.

    Args:
        data: Raw file bytes (not decoded pixels).

    Returns:
        Orientation; UNRECOGNIZED if the buffer does not start with the
        JPEG SOI marker, NO_METADATA if no usable tag was found.
    """
    if len(data) < 2 or _u16(data, 0) != SOI_MARKER:
        logger.debug("No JPEG SOI marker, orientation unrecognized")
        return UNRECOGNIZED

    try:
        orientation = _scan_segments(data)
    except struct.error:
        logger.debug("Truncated JPEG metadata, treating as no orientation")
        return NO_METADATA

    logger.debug("Read orientation code %d", orientation.code)
    return orientation


def read_orientation_code(data: bytes) -> int:
    """Read the EXIF orientation as an integer (-2, -1 or 1..8)."""
    return read_orientation(data).code
