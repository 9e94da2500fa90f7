"""Image metadata record."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .geo import GeoPoint


class ImageMetadata(BaseModel):
    """Metadata decoded from an image's EXIF container.

    Every field except ``media_item_id`` is optional and is left as ``None``
    when the source tag is missing or malformed.
    """

    model_config = ConfigDict(frozen=True)

    media_item_id: UUID

    exif_version: float | None = None

    # Dimensions and resolution
    pixel_width: int | None = None
    pixel_height: int | None = None
    x_resolution: int | None = None
    y_resolution: int | None = None

    # Capture
    capture_time: datetime | None = None
    flash_fired: bool | None = None
    make: str | None = None
    model: str | None = None
    exposure_time: str | None = None  # e.g. "1/125 s"
    f_number: str | None = None  # e.g. "f/2.8"
    aperture_value: float | None = None

    # GPS
    location: GeoPoint | None = None
    altitude: float | None = None
    speed: float | None = None

    @classmethod
    def empty(cls, media_item_id: UUID) -> "ImageMetadata":
        """Return a record carrying only the media item id."""
        return cls(media_item_id=media_item_id)

    @property
    def has_location(self) -> bool:
        return self.location is not None

    @property
    def resolution(self) -> str | None:
        """Return pixel dimensions as WxH string."""
        if self.pixel_width and self.pixel_height:
            return f"{self.pixel_width}x{self.pixel_height}"
        return None
