"""Quiet output formatter - one-line summary."""

from pydantic import BaseModel

from mediameta.models import ImageMetadata, VideoMetadata


def _format_image(record: ImageMetadata) -> list[str]:
    parts = []

    # Camera
    camera = " ".join(p for p in (record.make, record.model) if p)
    parts.append(camera or "N/A")

    parts.append(record.resolution or "N/A")
    parts.append(record.capture_time.isoformat() if record.capture_time else "N/A")

    # GPS
    if record.location is not None:
        parts.append(f"GPS: {record.location.coordinates}")
    else:
        parts.append("GPS: no")

    return parts


def _format_video(record: VideoMetadata) -> list[str]:
    parts = []

    parts.append(record.resolution or "N/A")
    parts.append(record.video_codec or "N/A")
    parts.append(str(record.duration) if record.duration is not None else "N/A")

    # Audio
    if record.has_audio:
        parts.append(f"audio: {record.audio_codec or 'Unknown'}")
    else:
        parts.append("audio: no")

    return parts


def format_quiet(record: BaseModel) -> str:
    """Format a metadata record as one-line summary.

    Image format: id | camera | resolution | capture time | GPS
    Video format: id | resolution | codec | duration | audio
    """
    if isinstance(record, ImageMetadata):
        parts = _format_image(record)
    elif isinstance(record, VideoMetadata):
        parts = _format_video(record)
    else:
        raise TypeError(f"Unsupported record type: {type(record).__name__}")

    return " | ".join([str(record.media_item_id), *parts])


def format_quiet_list(records: list[BaseModel]) -> str:
    """Format multiple records as one-line summaries.

    Args:
        records: List of metadata records

    Returns:
        Multiple lines, one per record
    """
    return "\n".join(format_quiet(r) for r in records)
