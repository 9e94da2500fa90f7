"""Container parsing utilities for mediameta."""

from .exif import ExifContainer, FieldType, Tag, TagValue, read_exif
from .mp4 import (
    MediaContext,
    Mp4ParseError,
    SampleEntry,
    Track,
    TrackHeader,
    TrackType,
    read_mp4,
)

__all__ = [
    # EXIF
    "read_exif",
    "ExifContainer",
    "TagValue",
    "FieldType",
    "Tag",
    # MP4
    "read_mp4",
    "MediaContext",
    "Track",
    "TrackHeader",
    "TrackType",
    "SampleEntry",
    "Mp4ParseError",
]
