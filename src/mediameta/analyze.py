"""Core extraction entry points."""

from __future__ import annotations

import asyncio
import warnings
from collections.abc import Iterable
from uuid import UUID

from mediameta.config import get_config
from mediameta.errors import ExtractionError, ExtractionTimeoutError
from mediameta.extractors import get_extractor
from mediameta.models import ImageMetadata, MediaType, VideoMetadata

MetadataRecord = ImageMetadata | VideoMetadata


def extract_metadata(
    media_item_id: UUID, path: str, media_type: MediaType | str
) -> MetadataRecord:
    """Extract metadata for one uploaded file.

    This is the main entry point. The caller declares the media type; the
    file content is never sniffed.

    Args:
        media_item_id: Identifier of the media item the file belongs to
        path: Path to the stored file
        media_type: Declared type, MediaType.IMAGE or MediaType.VIDEO

    Returns:
        ImageMetadata or VideoMetadata tagged with ``media_item_id``

    Raises:
        ValueError: If the media type is not supported
        MediaIOError: If the file cannot be opened or read
        UnsupportedFormatError: If an image has no valid EXIF container
    """
    extractor = get_extractor(media_type)
    return extractor.extract(media_item_id, path)


async def extract_metadata_async(
    media_item_id: UUID,
    path: str,
    media_type: MediaType | str,
    timeout: float | None = None,
) -> MetadataRecord:
    """Run :func:`extract_metadata` in a worker thread with a time bound.

    Args:
        media_item_id: Identifier of the media item the file belongs to
        path: Path to the stored file
        media_type: Declared type
        timeout: Seconds to wait; defaults to the configured timeout,
            ``0`` or a negative value waits indefinitely

    The timeout bounds how long the caller waits, not the work itself. A
    worker thread cannot be interrupted, so after a timeout it keeps reading
    the file until it finishes on its own. ParseLimits is what bounds the
    parse.

    Raises:
        ExtractionTimeoutError: If the extraction does not finish in time
    """
    if timeout is None:
        timeout = get_config().extraction.timeout_seconds

    call = asyncio.to_thread(extract_metadata, media_item_id, path, media_type)
    try:
        return await asyncio.wait_for(call, timeout if timeout > 0 else None)
    except asyncio.TimeoutError as e:
        raise ExtractionTimeoutError(
            f"Extraction of {path} did not finish within {timeout}s"
        ) from e


def extract_many(
    items: Iterable[tuple[UUID, str, MediaType | str]],
) -> list[MetadataRecord]:
    """Extract metadata for several files.

    Args:
        items: ``(media_item_id, path, media_type)`` triples

    Returns:
        Records for the items that succeeded, in input order
    """
    results = []
    for media_item_id, path, media_type in items:
        try:
            results.append(extract_metadata(media_item_id, path, media_type))
        except ExtractionError as e:
            warnings.warn(f"Failed to extract {path}: {e}", stacklevel=2)
    return results
