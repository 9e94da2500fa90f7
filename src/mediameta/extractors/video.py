"""MP4 track table extractor for video files."""

from __future__ import annotations

import logging
from typing import Any, ClassVar
from uuid import UUID

from mediameta.config import ParseLimits, get_config
from mediameta.errors import MediaIOError
from mediameta.extractors.base import BaseExtractor
from mediameta.models import MediaType, VideoMetadata
from mediameta.utils.mp4 import MediaContext, Mp4ParseError, Track, TrackType, read_mp4

logger = logging.getLogger(__name__)


class VideoExtractor(BaseExtractor):
    """Extract codec, dimension and duration fields from an MP4 track table.

    Files whose container cannot be parsed produce an empty record instead
    of an error. When several tracks of the same kind are present, the last
    one in container order wins.
    """

    name: ClassVar[str] = "mp4"
    media_type: ClassVar[MediaType] = MediaType.VIDEO

    def __init__(self, limits: ParseLimits | None = None):
        self.limits = limits or get_config().limits

    def extract(self, media_item_id: UUID, path: str) -> VideoMetadata:
        """Extract metadata from a video file.

        Raises:
            MediaIOError: If the file cannot be opened or read
        """
        try:
            with open(path, "rb") as f:
                try:
                    context = read_mp4(f, self.limits)
                except Mp4ParseError as e:
                    logger.debug("Not a parseable MP4 container (%s): %s", path, e)
                    return VideoMetadata.empty(media_item_id)
        except OSError as e:
            raise MediaIOError(f"Cannot read {path}: {e}") from e

        return build_video_metadata(media_item_id, context)


def _video_fields(track: Track) -> dict[str, Any]:
    fields: dict[str, Any] = {"duration": track.duration}

    if track.tkhd is not None:
        fields["width"] = track.tkhd.width
        fields["height"] = track.tkhd.height

    entry = track.first_sample_description()
    fields["video_codec"] = entry.codec_type if entry is not None and entry.is_video else None
    return fields


def _audio_fields(track: Track) -> dict[str, Any]:
    entry = track.first_sample_description()
    return {
        "audio_track_id": track.track_id,
        "audio_codec": entry.codec_type if entry is not None and entry.is_audio else None,
    }


def build_video_metadata(media_item_id: UUID, context: MediaContext) -> VideoMetadata:
    """Fold the tracks of a parsed container into a VideoMetadata record."""
    fields: dict[str, Any] = {}
    for track in context.tracks:
        if track.track_type is TrackType.VIDEO:
            fields.update(_video_fields(track))
        elif track.track_type is TrackType.AUDIO:
            fields.update(_audio_fields(track))
        else:
            logger.debug("Skipping %s track #%d", track.track_type.value, track.index)

    return VideoMetadata(media_item_id=media_item_id, **fields)


def extract_video_metadata(media_item_id: UUID, file_path: str) -> VideoMetadata:
    """Extract track metadata for one video file.

    Raises:
        MediaIOError: If the file cannot be opened or read
    """
    return VideoExtractor().extract(media_item_id, file_path)
