"""Pytest configuration and fixtures.

The fixtures build minimal TIFF/EXIF and MP4 files byte by byte, so the
suite does not depend on binary sample assets.
"""

import os
import uuid

import pytest
from builders import (
    APERTURE_VALUE,
    DATE_TIME,
    EXIF_VERSION,
    EXPOSURE_TIME,
    F_NUMBER,
    FLASH,
    GPS_ALTITUDE,
    GPS_LATITUDE,
    GPS_LATITUDE_REF,
    GPS_LONGITUDE,
    GPS_LONGITUDE_REF,
    GPS_SPEED,
    MAKE,
    MODEL,
    PIXEL_X_DIMENSION,
    PIXEL_Y_DIMENSION,
    X_RESOLUTION,
    Y_RESOLUTION,
    build_mp4,
    build_tiff,
    mdhd,
    mp4a_entry,
    tkhd,
    trak,
    visual_entry,
)

from mediameta.config import reset_config


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate tests from user config files and MEDIAMETA_* variables."""
    monkeypatch.setattr("mediameta.config.CONFIG_LOCATIONS", [])
    for key in [k for k in os.environ if k.startswith("MEDIAMETA_")]:
        monkeypatch.delenv(key)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def media_id() -> uuid.UUID:
    return uuid.UUID("3fa85f64-5717-4562-b3fc-2c963f66afa6")


@pytest.fixture
def write_file(tmp_path):
    """Write bytes to a file under tmp_path and return its path as str."""

    def _write(data: bytes, name: str = "media.bin") -> str:
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)

    return _write


@pytest.fixture
def camera_tiff() -> bytes:
    """A fully tagged image: camera, exposure, flash and a Sydney GPS fix."""
    return build_tiff(
        {
            MAKE: ("ascii", "Canon"),
            MODEL: ("ascii", "Canon EOS 5D"),
            X_RESOLUTION: ("long", [300]),
            Y_RESOLUTION: ("long", [300]),
            DATE_TIME: ("ascii", "2023:05:01 12:00:00"),
        },
        exif={
            EXIF_VERSION: ("undefined", b"0232"),
            EXPOSURE_TIME: ("rational", [(1, 125)]),
            F_NUMBER: ("rational", [(28, 10)]),
            APERTURE_VALUE: ("rational", [(297, 100)]),
            FLASH: ("short", [0x19]),
            PIXEL_X_DIMENSION: ("long", [6000]),
            PIXEL_Y_DIMENSION: ("short", [4000]),
        },
        gps={
            GPS_LATITUDE_REF: ("ascii", "S"),
            GPS_LATITUDE: ("rational", [(33, 1), (52, 1), (4, 1)]),
            GPS_LONGITUDE_REF: ("ascii", "E"),
            GPS_LONGITUDE: ("rational", [(151, 1), (12, 1), (36, 1)]),
            GPS_ALTITUDE: ("rational", [(585, 10)]),
            GPS_SPEED: ("rational", [(12, 1)]),
        },
    )


@pytest.fixture
def av_mp4() -> bytes:
    """One 1920x1080 H.264 video track and one AAC audio track."""
    video = trak(
        handler="vide",
        header=tkhd(1, duration=5000, width=1920, height=1080),
        media_header=mdhd(1000, 5000),
        entries=(visual_entry("avc1"),),
    )
    audio = trak(
        handler="soun",
        header=tkhd(2, duration=5000),
        media_header=mdhd(44100, 220500),
        entries=(mp4a_entry(0x40),),
    )
    return build_mp4(video, audio)
