"""mediameta - media metadata extraction.

Read EXIF capture metadata from images and track metadata from MP4 videos.

Usage:
    import uuid

    from mediameta import MediaType, extract_metadata

    # Extract an image record
    record = extract_metadata(uuid.uuid4(), "photo.jpg", MediaType.IMAGE)
    if record.location:
        print(f"Taken at: {record.location.coordinates}")

    # Video records never fail on a bad container, they come back empty
    video = extract_metadata(uuid.uuid4(), "clip.mp4", MediaType.VIDEO)
    print(video.resolution, video.video_codec)

    # Export as JSON
    print(record.model_dump_json())
"""

from mediameta._version import __version__
from mediameta.analyze import extract_many, extract_metadata, extract_metadata_async
from mediameta.errors import (
    ExtractionError,
    ExtractionTimeoutError,
    MediaIOError,
    UnsupportedFormatError,
)
from mediameta.extractors import (
    extract_image_metadata,
    extract_video_metadata,
    get_extractor,
    get_supported_media_types,
)
from mediameta.formatters import (
    format_json,
    format_json_list,
    format_quiet,
    to_dict,
)
from mediameta.models import GeoPoint, ImageMetadata, MediaType, VideoMetadata

__all__ = [
    # Version
    "__version__",
    # Main functions
    "extract_metadata",
    "extract_metadata_async",
    "extract_many",
    "extract_image_metadata",
    "extract_video_metadata",
    "get_extractor",
    "get_supported_media_types",
    # Models
    "ImageMetadata",
    "VideoMetadata",
    "GeoPoint",
    "MediaType",
    # Errors
    "ExtractionError",
    "MediaIOError",
    "UnsupportedFormatError",
    "ExtractionTimeoutError",
    # Formatters
    "format_json",
    "format_json_list",
    "format_quiet",
    "to_dict",
]
