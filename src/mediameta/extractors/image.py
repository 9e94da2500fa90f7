"""EXIF metadata extractor for still images."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import ClassVar
from uuid import UUID

from mediameta.config import get_config
from mediameta.errors import MediaIOError
from mediameta.extractors.base import BaseExtractor
from mediameta.models import GeoPoint, ImageMetadata, MediaType
from mediameta.utils.exif import ExifContainer, Tag, read_exif

logger = logging.getLogger(__name__)

# Rendered form of the DateTime tag
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Hemisphere references that flip the sign of a coordinate
NEGATIVE_REFS = ("S", "W")


class ImageExtractor(BaseExtractor):
    """Extract capture metadata from an image's EXIF container.

    A missing or malformed tag only clears its own field. The call fails as
    a whole when the file cannot be read or holds no EXIF container.
    """

    name: ClassVar[str] = "exif"
    media_type: ClassVar[MediaType] = MediaType.IMAGE

    def __init__(self, details: bool | None = None):
        self.details = get_config().extraction.exif_details if details is None else details

    def extract(self, media_item_id: UUID, path: str) -> ImageMetadata:
        """Extract metadata from an image file.

        Raises:
            MediaIOError: If the file cannot be opened or read
            UnsupportedFormatError: If the file has no valid EXIF container
        """
        try:
            with open(path, "rb") as f:
                exif = read_exif(f, details=self.details)
        except OSError as e:
            raise MediaIOError(f"Cannot open {path}: {e}") from e

        logger.debug("Read %d EXIF tags from %s", len(exif), path)
        return build_image_metadata(media_item_id, exif)


def build_image_metadata(media_item_id: UUID, exif: ExifContainer) -> ImageMetadata:
    """Map the tags of a parsed container onto an ImageMetadata record."""
    return ImageMetadata(
        media_item_id=media_item_id,
        exif_version=get_float(exif, Tag.EXIF_VERSION),
        pixel_width=get_uint(exif, Tag.PIXEL_X_DIMENSION),
        pixel_height=get_uint(exif, Tag.PIXEL_Y_DIMENSION),
        x_resolution=get_uint(exif, Tag.X_RESOLUTION),
        y_resolution=get_uint(exif, Tag.Y_RESOLUTION),
        capture_time=get_datetime(exif, Tag.DATE_TIME),
        flash_fired=get_flash(exif),
        make=exif.display(Tag.MAKE),
        model=exif.display(Tag.MODEL),
        exposure_time=exif.display(Tag.EXPOSURE_TIME),
        f_number=exif.display(Tag.F_NUMBER),
        aperture_value=get_float(exif, Tag.APERTURE_VALUE),
        location=get_location(exif),
        altitude=get_float(exif, Tag.GPS_ALTITUDE),
        speed=get_float(exif, Tag.GPS_SPEED),
    )


def get_float(exif: ExifContainer, tag: Tag) -> float | None:
    """Return the first entry of a rational tag."""
    value = exif.get(tag)
    if value is None:
        return None
    rationals = value.rationals()
    return rationals[0] if rationals else None


def get_uint(exif: ExifContainer, tag: Tag) -> int | None:
    value = exif.get(tag)
    return value.uint(0) if value is not None else None


def get_datetime(exif: ExifContainer, tag: Tag) -> datetime | None:
    text = exif.display(tag)
    if text is None:
        return None
    try:
        return datetime.strptime(text, DATETIME_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        logger.debug("Unparseable %s value: %r", tag.name, text)
        return None


def get_flash(exif: ExifContainer) -> bool | None:
    text = exif.display(Tag.FLASH)
    if text is None:
        return None
    return text.startswith("fired")


def dms_to_decimal(degrees: float, minutes: float, seconds: float) -> float:
    """Convert degrees/minutes/seconds to unsigned decimal degrees."""
    return degrees + minutes / 60.0 + seconds / 3600.0


def reference_factor(reference: str | None) -> float:
    """Map a hemisphere letter to a sign: S and W are negative."""
    return -1.0 if reference in NEGATIVE_REFS else 1.0


def calculate_coordinate(exif: ExifContainer, dms_tag: Tag, ref_tag: Tag) -> float:
    """Reconstruct one signed coordinate from a DMS tag and its reference.

    Returns 0.0 when the DMS tag is absent or not a rational list. Missing
    minute or second entries count as zero.
    """
    value = exif.get(dms_tag)
    dms = value.rationals() if value is not None else None
    if not dms:
        return 0.0

    degrees, minutes, seconds = (dms + [0.0, 0.0])[:3]
    return dms_to_decimal(degrees, minutes, seconds) * reference_factor(exif.display(ref_tag))


def get_location(exif: ExifContainer) -> GeoPoint | None:
    """Build a GeoPoint from the GPS tags.

    A zero latitude or longitude is treated as missing data, so no point is
    produced on the equator or the prime meridian.
    """
    latitude = calculate_coordinate(exif, Tag.GPS_LATITUDE, Tag.GPS_LATITUDE_REF)
    longitude = calculate_coordinate(exif, Tag.GPS_LONGITUDE, Tag.GPS_LONGITUDE_REF)

    if latitude == 0.0 or longitude == 0.0:
        return None
    return GeoPoint(x=longitude, y=latitude)


def extract_image_metadata(media_item_id: UUID, file_path: str) -> ImageMetadata:
    """Extract EXIF metadata for one image file.

    Raises:
        MediaIOError: If the file cannot be opened or read
        UnsupportedFormatError: If the file has no valid EXIF container
    """
    return ImageExtractor().extract(media_item_id, file_path)
