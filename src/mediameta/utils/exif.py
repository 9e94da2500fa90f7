"""EXIF container reading and tag decoding.

The container itself is parsed by ExifRead. Each raw tag is normalized into a
:class:`TagValue`, a small tagged variant over the TIFF field types with typed
accessors that return ``None`` instead of raising when the value has the
wrong shape.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from fractions import Fraction
from typing import Any, BinaryIO, Callable

import exifread

from mediameta.errors import MediaIOError, UnsupportedFormatError

logger = logging.getLogger(__name__)


class FieldType(IntEnum):
    """TIFF/EXIF field types."""

    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    SBYTE = 6
    UNDEFINED = 7
    SSHORT = 8
    SLONG = 9
    SRATIONAL = 10
    FLOAT = 11
    DOUBLE = 12


RATIONAL_TYPES = (FieldType.RATIONAL, FieldType.SRATIONAL)
UNSIGNED_TYPES = (FieldType.BYTE, FieldType.SHORT, FieldType.LONG)


class Tag(Enum):
    """Tags read by the image extractor, keyed by their ExifRead names."""

    MAKE = "Image Make"
    MODEL = "Image Model"
    DATE_TIME = "Image DateTime"
    X_RESOLUTION = "Image XResolution"
    Y_RESOLUTION = "Image YResolution"
    EXIF_VERSION = "EXIF ExifVersion"
    PIXEL_X_DIMENSION = "EXIF ExifImageWidth"
    PIXEL_Y_DIMENSION = "EXIF ExifImageLength"
    FLASH = "EXIF Flash"
    EXPOSURE_TIME = "EXIF ExposureTime"
    F_NUMBER = "EXIF FNumber"
    APERTURE_VALUE = "EXIF ApertureValue"
    GPS_LATITUDE_REF = "GPS GPSLatitudeRef"
    GPS_LATITUDE = "GPS GPSLatitude"
    GPS_LONGITUDE_REF = "GPS GPSLongitudeRef"
    GPS_LONGITUDE = "GPS GPSLongitude"
    GPS_ALTITUDE = "GPS GPSAltitude"
    GPS_SPEED = "GPS GPSSpeed"


@dataclass(frozen=True)
class TagValue:
    """A decoded EXIF value.

    ``values`` holds a single ``str`` for ASCII fields, a single ``bytes`` for
    UNDEFINED fields, ``(numerator, denominator)`` pairs for rationals and
    plain numbers for everything else.
    """

    field_type: int
    values: tuple[Any, ...] = ()

    @classmethod
    def from_ifd_tag(cls, ifd_tag: Any) -> TagValue:
        """Normalize an ExifRead ``IfdTag``."""
        field_type = int(ifd_tag.field_type)
        raw = ifd_tag.values

        if field_type == FieldType.ASCII:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8", errors="replace")
            return cls(field_type, (str(raw),))

        if isinstance(raw, (str, bytes)):
            raw = list(raw.encode("latin-1") if isinstance(raw, str) else raw)
        elif not isinstance(raw, (list, tuple)):
            raw = [raw]

        if field_type == FieldType.UNDEFINED:
            return cls(field_type, (bytes(int(v) & 0xFF for v in raw),))
        if field_type in RATIONAL_TYPES:
            return cls(field_type, tuple((int(v.numerator), int(v.denominator)) for v in raw))
        return cls(field_type, tuple(raw))

    @property
    def is_rational(self) -> bool:
        return self.field_type in RATIONAL_TYPES

    def rationals(self) -> list[float] | None:
        """Return the rational list as floats.

        ``None`` for non-rational fields, empty lists and any entry with a
        zero denominator.
        """
        if not self.is_rational or not self.values:
            return None
        if any(den == 0 for _, den in self.values):
            return None
        return [num / den for num, den in self.values]

    def fraction(self, index: int = 0) -> Fraction | None:
        """Return one rational entry as an exact fraction."""
        if not self.is_rational or index >= len(self.values):
            return None
        num, den = self.values[index]
        if den == 0:
            return None
        return Fraction(num, den)

    def uint(self, index: int = 0) -> int | None:
        """Return an unsigned integer entry, ``None`` on type mismatch."""
        if self.field_type not in UNSIGNED_TYPES or index >= len(self.values):
            return None
        return int(self.values[index])

    def text(self) -> str | None:
        """Return ASCII content without trailing NULs or whitespace."""
        if self.field_type != FieldType.ASCII:
            return None
        return self.values[0].rstrip("\x00").strip()


# Tag display rendering

_EXIF_DATETIME = re.compile(r"^(\d{4}):(\d{2}):(\d{2}) (\d{2}):(\d{2}):(\d{2})$")

_FLASH_RETURN = {
    0: "",
    1: ", unknown return light",
    2: ", return light not detected",
    3: ", return light detected",
}
_FLASH_MODE = {
    0: "",
    1: ", forced",
    2: ", suppressed",
    3: ", auto mode",
}


def _display_default(value: TagValue) -> str:
    if value.field_type == FieldType.ASCII:
        return value.text() or ""
    if value.field_type == FieldType.UNDEFINED:
        payload = value.values[0]
        if payload.isascii() and payload.decode("ascii").isprintable():
            return payload.decode("ascii")
        return payload.hex()
    if value.is_rational:
        return ", ".join(f"{num}/{den}" for num, den in value.values)
    return ", ".join(str(v) for v in value.values)


def _display_datetime(value: TagValue) -> str:
    text = _display_default(value)
    match = _EXIF_DATETIME.match(text)
    if not match:
        return text
    year, month, day, hour, minute, second = match.groups()
    return f"{year}-{month}-{day} {hour}:{minute}:{second}"


def _display_flash(value: TagValue) -> str:
    bits = value.uint(0)
    if bits is None:
        return _display_default(value)
    parts = ["fired" if bits & 0x01 else "not fired"]
    parts.append(_FLASH_RETURN[(bits >> 1) & 0x03])
    parts.append(_FLASH_MODE[(bits >> 3) & 0x03])
    if bits & 0x20:
        parts.append(", no flash function")
    if bits & 0x40:
        parts.append(", red-eye reduction")
    return "".join(parts)


def _display_exposure_time(value: TagValue) -> str:
    exposure = value.fraction(0)
    if exposure is None:
        return _display_default(value)
    if 0 < exposure < 1 and (1 / exposure).denominator == 1:
        return f"1/{1 / exposure} s"
    return f"{float(exposure):g} s"


def _display_f_number(value: TagValue) -> str:
    f_number = value.fraction(0)
    if f_number is None:
        return _display_default(value)
    return f"f/{float(f_number):g}"


_DISPLAY: dict[Tag, Callable[[TagValue], str]] = {
    Tag.DATE_TIME: _display_datetime,
    Tag.FLASH: _display_flash,
    Tag.EXPOSURE_TIME: _display_exposure_time,
    Tag.F_NUMBER: _display_f_number,
}


class ExifContainer:
    """Lookup-by-tag view over a parsed EXIF container."""

    def __init__(self, fields: dict[Tag, TagValue]):
        self._fields = dict(fields)

    @classmethod
    def from_exifread(cls, tags: dict[str, Any]) -> ExifContainer:
        """Build a container from the dict returned by ``exifread.process_file``."""
        fields: dict[Tag, TagValue] = {}
        for tag in Tag:
            ifd_tag = tags.get(tag.value)
            if ifd_tag is None or not hasattr(ifd_tag, "field_type"):
                continue
            try:
                fields[tag] = TagValue.from_ifd_tag(ifd_tag)
            except (TypeError, ValueError, AttributeError) as e:
                logger.debug("Dropping undecodable tag %s: %s", tag.value, e)
        return cls(fields)

    def get(self, tag: Tag) -> TagValue | None:
        return self._fields.get(tag)

    def display(self, tag: Tag) -> str | None:
        """Render a tag as text using its tag-specific formatting."""
        value = self._fields.get(tag)
        if value is None:
            return None
        return _DISPLAY.get(tag, _display_default)(value)

    def __contains__(self, tag: object) -> bool:
        return tag in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(tags={[t.name for t in self._fields]!r})"


def read_exif(fh: BinaryIO, details: bool = False) -> ExifContainer:
    """Parse the EXIF container of an open binary file.

    Args:
        fh: Binary file handle positioned at the start of the file
        details: Also decode maker notes (slower)

    Returns:
        ExifContainer with the recognized tags

    Raises:
        MediaIOError: If reading the file fails
        UnsupportedFormatError: If no valid EXIF container is found
    """
    try:
        tags = exifread.process_file(fh, details=details)
    except OSError as e:
        raise MediaIOError(f"Cannot read EXIF data: {e}") from e
    except Exception as e:
        raise UnsupportedFormatError(f"Malformed EXIF container: {e}") from e

    if not tags:
        raise UnsupportedFormatError("No EXIF container found")

    return ExifContainer.from_exifread(tags)
