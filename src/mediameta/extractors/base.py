"""Base extractor class."""

from abc import ABC, abstractmethod
from typing import ClassVar
from uuid import UUID

from pydantic import BaseModel

from mediameta.models import MediaType


class BaseExtractor(ABC):
    """Abstract base class for metadata extractors.

    Each extractor handles one declared media type. Extractors hold no state
    between calls: every ``extract`` opens its own file handle and returns a
    fresh record.

    Attributes:
        name: Human-readable name of the extractor
        media_type: The media type this extractor is selected for
    """

    name: ClassVar[str] = "base"
    media_type: ClassVar[MediaType]

    @abstractmethod
    def extract(self, media_item_id: UUID, path: str) -> BaseModel:
        """Extract metadata from a file.

        Args:
            media_item_id: Identifier of the media item the file belongs to
            path: Path to the media file

        Returns:
            Metadata record tagged with ``media_item_id``

        Raises:
            ExtractionError: If the call fails as a whole
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, media_type={self.media_type.value!r})"
