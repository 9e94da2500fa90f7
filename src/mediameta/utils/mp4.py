"""MP4/ISO base media file format track table parsing."""

from __future__ import annotations

import struct
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO

from mediameta.config import ParseLimits


# Size of the fixed part of each sample entry type, after the 8 byte box header
SAMPLE_ENTRY_HEADER = 8  # reserved(6) + data_reference_index(2)
AUDIO_SAMPLE_ENTRY_FIELDS = 20
AUDIO_SAMPLE_ENTRY_V1_EXTRA = 16
AUDIO_SAMPLE_ENTRY_V2_EXTRA = 36

UINT32_MAX = 0xFFFFFFFF
UINT64_MAX = 0xFFFFFFFFFFFFFFFF


class Mp4ParseError(Exception):
    """The file is not a well-formed MP4 container."""


class TrackType(Enum):
    """Track kind declared by the ``hdlr`` box."""

    VIDEO = "video"
    AUDIO = "audio"
    METADATA = "metadata"
    UNKNOWN = "unknown"


HANDLER_TYPES = {
    "vide": TrackType.VIDEO,
    "soun": TrackType.AUDIO,
    "meta": TrackType.METADATA,
}

VIDEO_CODECS = {
    "avc1": "H264",
    "avc3": "H264",
    "hvc1": "HEVC",
    "hev1": "HEVC",
    "vp08": "VP8",
    "vp09": "VP9",
    "av01": "AV1",
    "mp4v": "MP4V",
    "s263": "H263",
    "h263": "H263",
    "encv": "EncryptedVideo",
}

AUDIO_CODECS = {
    ".mp3": "MP3",
    "Opus": "Opus",
    "fLaC": "FLAC",
    "alac": "ALAC",
    "lpcm": "LPCM",
    "ipcm": "LPCM",
    "sowt": "LPCM",
    "twos": "LPCM",
    "samr": "AMRNB",
    "sawb": "AMRWB",
    "ac-3": "AC3",
    "ec-3": "EC3",
    "enca": "EncryptedAudio",
}

# MPEG-4 object type indications (ISO/IEC 14496-1, table 5)
ESDS_AUDIO_CODECS = {
    0x40: "AAC",
    0x66: "AAC",
    0x67: "AAC",
    0x68: "AAC",
    0x69: "MP3",
    0x6B: "MP3",
}

UNKNOWN_CODEC = "Unknown"

# Descriptor tags inside an esds box
ES_DESCRIPTOR_TAG = 0x03
DECODER_CONFIG_DESCRIPTOR_TAG = 0x04


@dataclass(frozen=True)
class BoxHeader:
    """Location of one box within the file."""

    type: str
    offset: int
    size: int
    header_size: int

    @property
    def payload_offset(self) -> int:
        return self.offset + self.header_size

    @property
    def payload_size(self) -> int:
        return self.size - self.header_size

    @property
    def end(self) -> int:
        return self.offset + self.size


@dataclass(frozen=True)
class TrackHeader:
    """Fields of a ``tkhd`` box. Width and height are whole pixels."""

    track_id: int
    duration: int | None
    width: int
    height: int


@dataclass(frozen=True)
class SampleEntry:
    """One sample description from a track's ``stsd`` box."""

    kind: TrackType
    fourcc: str
    codec_type: str

    @property
    def is_video(self) -> bool:
        return self.kind is TrackType.VIDEO

    @property
    def is_audio(self) -> bool:
        return self.kind is TrackType.AUDIO


@dataclass
class Track:
    """A single ``trak`` of the track table."""

    index: int
    track_type: TrackType = TrackType.UNKNOWN
    track_id: int | None = None
    timescale: int | None = None
    duration: int | None = None
    tkhd: TrackHeader | None = None
    sample_descriptions: list[SampleEntry] | None = None

    def first_sample_description(self) -> SampleEntry | None:
        if not self.sample_descriptions:
            return None
        return self.sample_descriptions[0]


@dataclass
class MediaContext:
    """Parsed ``moov`` box."""

    timescale: int | None = None
    duration: int | None = None
    tracks: list[Track] = field(default_factory=list)


class Mp4Reader:
    """Walk the box tree of an MP4 file and build its track table.

    Only the boxes needed for the track table are decoded; everything else
    is skipped by seeking past it.
    """

    def __init__(self, f: BinaryIO, limits: ParseLimits | None = None):
        self.f = f
        self.limits = limits or ParseLimits()
        self._boxes_seen = 0

    # Low level reading

    def _read_exact(self, size: int) -> bytes:
        data = self.f.read(size)
        if len(data) < size:
            raise Mp4ParseError(f"Unexpected end of data (wanted {size} bytes, got {len(data)})")
        return data

    def _unpack(self, fmt: str, size: int) -> tuple:
        return struct.unpack(fmt, self._read_exact(size))

    def _iter_boxes(self, start: int, end: int, depth: int) -> Iterator[BoxHeader]:
        """Yield the child boxes between ``start`` and ``end``.

        The file position is left at the start of each box's payload when the
        box is yielded, and moved past the box before the next one is read.
        """
        if depth > self.limits.max_depth:
            raise Mp4ParseError(f"Box nesting deeper than {self.limits.max_depth}")

        pos = start
        while pos < end:
            if end - pos < 8:
                if depth == 0:
                    # Trailing bytes too short for a box header end the file
                    break
                raise Mp4ParseError(f"Truncated box header at offset {pos}")

            self.f.seek(pos)
            size, box_type_bytes = self._unpack(">I4s", 8)
            header_size = 8
            box_type = box_type_bytes.decode("latin-1")

            # Handle extended size
            if size == 1:
                (size,) = self._unpack(">Q", 8)
                header_size = 16
            elif size == 0:
                size = end - pos

            if size < header_size:
                raise Mp4ParseError(f"Box {box_type!r} at offset {pos} is smaller than its header")
            if pos + size > end:
                raise Mp4ParseError(f"Box {box_type!r} at offset {pos} overruns its parent")

            self._boxes_seen += 1
            if self._boxes_seen > self.limits.max_boxes:
                raise Mp4ParseError(f"More than {self.limits.max_boxes} boxes")

            box = BoxHeader(type=box_type, offset=pos, size=size, header_size=header_size)
            self.f.seek(box.payload_offset)
            yield box
            pos = box.end

    def _read_full_box_header(self) -> tuple[int, int]:
        (version_flags,) = self._unpack(">I", 4)
        return version_flags >> 24, version_flags & 0xFFFFFF

    def _check_within(self, box: BoxHeader) -> None:
        """Fail if the fields just read extend past the end of ``box``."""
        if self.f.tell() > box.end:
            raise Mp4ParseError(f"Truncated {box.type!r} box at offset {box.offset}")

    # Box parsers

    def read(self) -> MediaContext:
        """Parse the file and return its track table.

        Only the first ``moov`` box is read. Boxes after it are not examined.

        Raises:
            Mp4ParseError: If the file is not a well-formed MP4 container
        """
        self.f.seek(0, 2)
        file_size = self.f.tell()

        for box in self._iter_boxes(0, file_size, 0):
            if box.type == "moov":
                return self._read_moov(box, 1)

        raise Mp4ParseError("No moov box found")

    def _read_moov(self, moov: BoxHeader, depth: int) -> MediaContext:
        context = MediaContext()
        for box in self._iter_boxes(moov.payload_offset, moov.end, depth):
            if box.type == "mvhd":
                context.timescale, context.duration = self._read_time_fields(box)
            elif box.type == "trak":
                if len(context.tracks) >= self.limits.max_tracks:
                    raise Mp4ParseError(f"More than {self.limits.max_tracks} tracks")
                context.tracks.append(self._read_trak(box, len(context.tracks), depth + 1))
        return context

    def _read_trak(self, trak: BoxHeader, index: int, depth: int) -> Track:
        track = Track(index=index)
        raw_entries: list[tuple[str, str]] | None = None

        for box in self._iter_boxes(trak.payload_offset, trak.end, depth):
            if box.type == "tkhd":
                track.tkhd = self._read_tkhd(box)
                track.track_id = track.tkhd.track_id
            elif box.type == "mdia":
                raw_entries = self._read_mdia(box, track, depth + 1)

        # Sample entries are interpreted according to the track's handler,
        # which may appear after minf inside mdia.
        if raw_entries is not None:
            track.sample_descriptions = [
                self._classify_entry(track.track_type, fourcc, codec)
                for fourcc, codec in raw_entries
            ]
        return track

    def _read_tkhd(self, box: BoxHeader) -> TrackHeader:
        version, _flags = self._read_full_box_header()
        if version == 1:
            _created, _modified, track_id, _reserved, duration = self._unpack(">QQIIQ", 32)
            unknown = UINT64_MAX
        else:
            _created, _modified, track_id, _reserved, duration = self._unpack(">IIIII", 20)
            unknown = UINT32_MAX

        # reserved(8) layer(2) alternate_group(2) volume(2) reserved(2) matrix(36)
        self._read_exact(52)
        width, height = self._unpack(">II", 8)
        self._check_within(box)

        return TrackHeader(
            track_id=track_id,
            duration=None if duration == unknown else duration,
            width=width >> 16,
            height=height >> 16,
        )

    def _read_time_fields(self, box: BoxHeader) -> tuple[int, int | None]:
        """Read timescale and duration from an ``mvhd`` or ``mdhd`` box."""
        version, _flags = self._read_full_box_header()
        if version == 1:
            _created, _modified, timescale, duration = self._unpack(">QQIQ", 28)
            unknown = UINT64_MAX
        else:
            _created, _modified, timescale, duration = self._unpack(">IIII", 16)
            unknown = UINT32_MAX
        self._check_within(box)
        return timescale, None if duration == unknown else duration

    def _read_mdia(
        self, mdia: BoxHeader, track: Track, depth: int
    ) -> list[tuple[str, str]] | None:
        raw_entries = None
        for box in self._iter_boxes(mdia.payload_offset, mdia.end, depth):
            if box.type == "mdhd":
                track.timescale, track.duration = self._read_time_fields(box)
            elif box.type == "hdlr":
                track.track_type = self._read_hdlr(box)
            elif box.type == "minf":
                raw_entries = self._find_stsd(box, depth + 1)
        return raw_entries

    def _read_hdlr(self, box: BoxHeader) -> TrackType:
        self._read_full_box_header()
        _pre_defined, handler = self._unpack(">I4s", 8)
        self._check_within(box)
        return HANDLER_TYPES.get(handler.decode("latin-1"), TrackType.UNKNOWN)

    def _find_stsd(self, minf: BoxHeader, depth: int) -> list[tuple[str, str]] | None:
        for box in self._iter_boxes(minf.payload_offset, minf.end, depth):
            if box.type == "stbl":
                for child in self._iter_boxes(box.payload_offset, box.end, depth + 1):
                    if child.type == "stsd":
                        return self._read_stsd(child, depth + 2)
        return None

    def _read_stsd(self, stsd: BoxHeader, depth: int) -> list[tuple[str, str]]:
        """Return ``(fourcc, codec)`` for each sample entry."""
        self._read_full_box_header()
        (entry_count,) = self._unpack(">I", 4)
        self._check_within(stsd)
        if entry_count > self.limits.max_sample_entries:
            raise Mp4ParseError(f"More than {self.limits.max_sample_entries} sample entries")

        entries: list[tuple[str, str]] = []
        if entry_count == 0:
            return entries
        for box in self._iter_boxes(stsd.payload_offset + 8, stsd.end, depth):
            entries.append((box.type, self._identify_codec(box, depth + 1)))
            if len(entries) == entry_count:
                break
        return entries

    def _identify_codec(self, entry: BoxHeader, depth: int) -> str:
        if entry.type in VIDEO_CODECS:
            return VIDEO_CODECS[entry.type]
        if entry.type in AUDIO_CODECS:
            return AUDIO_CODECS[entry.type]
        if entry.type == "mp4a":
            return self._read_mp4a_codec(entry, depth)
        return UNKNOWN_CODEC

    def _read_mp4a_codec(self, entry: BoxHeader, depth: int) -> str:
        # reserved(6) data_reference_index(2) version(2) ...
        self._read_exact(SAMPLE_ENTRY_HEADER)
        (version,) = self._unpack(">H", 2)
        children = entry.payload_offset + SAMPLE_ENTRY_HEADER + AUDIO_SAMPLE_ENTRY_FIELDS
        if version == 1:
            children += AUDIO_SAMPLE_ENTRY_V1_EXTRA
        elif version == 2:
            children += AUDIO_SAMPLE_ENTRY_V2_EXTRA
        if children > entry.end:
            raise Mp4ParseError("Truncated audio sample entry")

        for box in self._iter_boxes(children, entry.end, depth):
            if box.type == "esds":
                return self._read_esds(box)
            if box.type == "wave":
                # QuickTime wraps esds in a wave box
                for child in self._iter_boxes(box.payload_offset, box.end, depth + 1):
                    if child.type == "esds":
                        return self._read_esds(child)
        return UNKNOWN_CODEC

    def _read_esds(self, esds: BoxHeader) -> str:
        if esds.payload_size < 4:
            raise Mp4ParseError("Truncated esds box")
        self._read_full_box_header()
        data = self._read_exact(esds.payload_size - 4)
        object_type = parse_object_type_indication(data)
        if object_type is None:
            return UNKNOWN_CODEC
        return ESDS_AUDIO_CODECS.get(object_type, UNKNOWN_CODEC)

    @staticmethod
    def _classify_entry(track_type: TrackType, fourcc: str, codec: str) -> SampleEntry:
        kind = track_type if track_type in (TrackType.VIDEO, TrackType.AUDIO) else TrackType.UNKNOWN
        return SampleEntry(kind=kind, fourcc=fourcc, codec_type=codec)


def _read_descriptor_length(data: bytes, pos: int) -> tuple[int, int]:
    """Decode an expandable descriptor size (up to four 7-bit groups)."""
    length = 0
    for _ in range(4):
        if pos >= len(data):
            raise Mp4ParseError("Truncated descriptor length")
        byte = data[pos]
        pos += 1
        length = (length << 7) | (byte & 0x7F)
        if not byte & 0x80:
            break
    return length, pos


def parse_object_type_indication(data: bytes) -> int | None:
    """Return the objectTypeIndication of an ES_Descriptor payload.

    Args:
        data: Contents of an esds box after its version/flags

    Returns:
        The object type byte, or None if no DecoderConfigDescriptor is present
    """
    if not data or data[0] != ES_DESCRIPTOR_TAG:
        return None
    _length, pos = _read_descriptor_length(data, 1)

    # ES_ID(2) flags(1)
    if pos + 3 > len(data):
        raise Mp4ParseError("Truncated ES descriptor")
    flags = data[pos + 2]
    pos += 3
    if flags & 0x80:  # streamDependenceFlag
        pos += 2
    if flags & 0x40:  # URL_Flag
        if pos >= len(data):
            raise Mp4ParseError("Truncated ES descriptor URL")
        pos += 1 + data[pos]
    if flags & 0x20:  # OCRstreamFlag
        pos += 2

    if pos >= len(data) or data[pos] != DECODER_CONFIG_DESCRIPTOR_TAG:
        return None
    _length, pos = _read_descriptor_length(data, pos + 1)
    if pos >= len(data):
        raise Mp4ParseError("Truncated decoder config descriptor")
    return data[pos]


def read_mp4(f: BinaryIO, limits: ParseLimits | None = None) -> MediaContext:
    """Parse the track table of an MP4 file.

    Args:
        f: Binary file handle
        limits: Parse bounds (defaults to ParseLimits())

    Returns:
        MediaContext with one Track per ``trak`` box, in container order

    Raises:
        Mp4ParseError: If the file is not a well-formed MP4 container
    """
    return Mp4Reader(f, limits).read()
