"""Video metadata record."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class VideoMetadata(BaseModel):
    """Metadata read from an MP4 track table.

    ``duration`` is expressed in the video track's media timescale units.
    """

    model_config = ConfigDict(frozen=True)

    media_item_id: UUID

    # Video track
    duration: int | None = None
    width: int | None = None
    height: int | None = None
    video_codec: str | None = None

    # Audio track
    audio_track_id: int | None = None
    audio_codec: str | None = None

    @classmethod
    def empty(cls, media_item_id: UUID) -> "VideoMetadata":
        """Return a record carrying only the media item id."""
        return cls(media_item_id=media_item_id)

    @property
    def resolution(self) -> str | None:
        """Return video resolution as WxH string."""
        if self.width and self.height:
            return f"{self.width}x{self.height}"
        return None

    @property
    def has_audio(self) -> bool:
        return self.audio_track_id is not None or self.audio_codec is not None
