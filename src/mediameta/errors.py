"""Exceptions raised by mediameta extractors."""


class ExtractionError(Exception):
    """Base class for call-level extraction failures."""


class MediaIOError(ExtractionError):
    """The media file could not be opened or read."""


class UnsupportedFormatError(ExtractionError):
    """The file does not contain a parseable metadata container."""


class ExtractionTimeoutError(ExtractionError):
    """An extraction call ran longer than its allowed timeout."""
