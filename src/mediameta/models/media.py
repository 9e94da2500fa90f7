"""Media type discriminator supplied by the caller."""

from enum import Enum


class MediaType(str, Enum):
    """Kind of media a file was declared as at upload time."""

    IMAGE = "image"
    VIDEO = "video"
