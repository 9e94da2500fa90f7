"""Metadata extractors for mediameta."""

from mediameta.extractors.base import BaseExtractor
from mediameta.extractors.image import ImageExtractor, extract_image_metadata
from mediameta.extractors.video import VideoExtractor, extract_video_metadata
from mediameta.models import MediaType

# One extractor class per declared media type
_EXTRACTORS: dict[MediaType, type[BaseExtractor]] = {
    MediaType.IMAGE: ImageExtractor,
    MediaType.VIDEO: VideoExtractor,
}


def get_extractor(media_type: MediaType | str) -> BaseExtractor:
    """Get an extractor instance for a declared media type.

    Args:
        media_type: MediaType member or its string value ("image", "video")

    Returns:
        A new extractor instance

    Raises:
        ValueError: If the media type is not supported
    """
    try:
        extractor_cls = _EXTRACTORS[MediaType(media_type)]
    except (KeyError, ValueError) as e:
        raise ValueError(f"Unsupported media type: {media_type!r}") from e
    return extractor_cls()


def get_supported_media_types() -> list[str]:
    """Return the media type values that have an extractor."""
    return [media_type.value for media_type in _EXTRACTORS]


__all__ = [
    # Base class
    "BaseExtractor",
    # Extractors
    "ImageExtractor",
    "VideoExtractor",
    # Functions
    "extract_image_metadata",
    "extract_video_metadata",
    "get_extractor",
    "get_supported_media_types",
]
