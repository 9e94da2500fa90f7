"""Pydantic models for mediameta."""

from .geo import GeoPoint
from .image import ImageMetadata
from .media import MediaType
from .video import VideoMetadata

__all__ = [
    # Records
    "ImageMetadata",
    "VideoMetadata",
    # Shared
    "GeoPoint",
    "MediaType",
]
