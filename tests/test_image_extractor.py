"""Tests for the image (EXIF) extractor."""

from datetime import datetime, timezone

import pytest
from builders import (
    APERTURE_VALUE,
    DATE_TIME,
    EXIF_VERSION,
    FLASH,
    GPS_LATITUDE,
    GPS_LATITUDE_REF,
    GPS_LONGITUDE,
    GPS_LONGITUDE_REF,
    MAKE,
    X_RESOLUTION,
    build_tiff,
)

from mediameta.errors import MediaIOError, UnsupportedFormatError
from mediameta.extractors.image import (
    ImageExtractor,
    calculate_coordinate,
    dms_to_decimal,
    extract_image_metadata,
    get_datetime,
    get_flash,
    get_float,
    get_location,
    reference_factor,
)
from mediameta.models import ImageMetadata
from mediameta.utils.exif import ExifContainer, FieldType, Tag, TagValue


def rational(*pairs):
    return TagValue(FieldType.RATIONAL, tuple(pairs))


def ascii_value(text):
    return TagValue(FieldType.ASCII, (text,))


def gps(lat=None, lat_ref=None, lon=None, lon_ref=None) -> ExifContainer:
    fields = {}
    if lat is not None:
        fields[Tag.GPS_LATITUDE] = rational(*lat)
    if lat_ref is not None:
        fields[Tag.GPS_LATITUDE_REF] = ascii_value(lat_ref)
    if lon is not None:
        fields[Tag.GPS_LONGITUDE] = rational(*lon)
    if lon_ref is not None:
        fields[Tag.GPS_LONGITUDE_REF] = ascii_value(lon_ref)
    return ExifContainer(fields)


class TestCoordinates:
    """Test DMS coordinate reconstruction."""

    def test_dms_to_decimal(self):
        assert dms_to_decimal(40, 30, 0) == pytest.approx(40.5, abs=1e-9)
        assert dms_to_decimal(0, 0, 36) == pytest.approx(0.01, abs=1e-9)

    @pytest.mark.parametrize(
        "ref,factor",
        [("N", 1.0), ("E", 1.0), ("S", -1.0), ("W", -1.0), ("X", 1.0), ("", 1.0), (None, 1.0)],
    )
    def test_reference_factor(self, ref, factor):
        assert reference_factor(ref) == factor

    def test_south_is_negative(self):
        exif = gps(lat=[(1, 1), (0, 1), (0, 1)], lat_ref="S")
        assert calculate_coordinate(exif, Tag.GPS_LATITUDE, Tag.GPS_LATITUDE_REF) == -1.0

    def test_north_is_positive(self):
        exif = gps(lat=[(1, 1), (0, 1), (0, 1)], lat_ref="N")
        assert calculate_coordinate(exif, Tag.GPS_LATITUDE, Tag.GPS_LATITUDE_REF) == 1.0

    def test_missing_reference_is_positive(self):
        exif = gps(lat=[(1, 1), (0, 1), (0, 1)])
        assert calculate_coordinate(exif, Tag.GPS_LATITUDE, Tag.GPS_LATITUDE_REF) == 1.0

    def test_missing_dms_is_zero(self):
        exif = gps(lat_ref="S")
        assert calculate_coordinate(exif, Tag.GPS_LATITUDE, Tag.GPS_LATITUDE_REF) == 0.0

    def test_non_rational_dms_is_zero(self):
        exif = ExifContainer({Tag.GPS_LATITUDE: TagValue(FieldType.SHORT, (40, 30, 0))})
        assert calculate_coordinate(exif, Tag.GPS_LATITUDE, Tag.GPS_LATITUDE_REF) == 0.0

    def test_short_dms_list(self):
        exif = gps(lat=[(40, 1)], lat_ref="N")
        assert calculate_coordinate(exif, Tag.GPS_LATITUDE, Tag.GPS_LATITUDE_REF) == 40.0

    def test_fractional_seconds(self):
        exif = gps(lat=[(51, 1), (30, 1), (2655, 100)], lat_ref="N")
        value = calculate_coordinate(exif, Tag.GPS_LATITUDE, Tag.GPS_LATITUDE_REF)
        assert value == pytest.approx(51 + 30 / 60 + 26.55 / 3600, abs=1e-9)

    def test_location(self):
        exif = gps(
            lat=[(40, 1), (30, 1), (0, 1)],
            lat_ref="N",
            lon=[(73, 1), (59, 1), (0, 1)],
            lon_ref="W",
        )
        point = get_location(exif)
        assert point is not None
        assert point.y == pytest.approx(40.5, abs=1e-9)
        assert point.x == pytest.approx(-(73 + 59 / 60), abs=1e-9)
        assert point.spatial_reference_id is None

    def test_no_gps_tags(self):
        assert get_location(ExifContainer({})) is None

    def test_zero_latitude_suppresses_point(self):
        exif = gps(lat=[(0, 1), (0, 1), (0, 1)], lat_ref="N", lon=[(10, 1), (0, 1), (0, 1)])
        assert get_location(exif) is None

    def test_zero_longitude_suppresses_point(self):
        exif = gps(lat=[(10, 1), (0, 1), (0, 1)], lon=[(0, 1), (0, 1), (0, 1)], lon_ref="E")
        assert get_location(exif) is None

    def test_missing_longitude_suppresses_point(self):
        exif = gps(lat=[(10, 1), (0, 1), (0, 1)], lat_ref="N")
        assert get_location(exif) is None


class TestFieldResolution:
    """Test per-field helpers."""

    def test_flash_fired(self):
        exif = ExifContainer({Tag.FLASH: TagValue(FieldType.SHORT, (0x07,))})
        assert get_flash(exif) is True

    def test_flash_not_fired(self):
        exif = ExifContainer({Tag.FLASH: TagValue(FieldType.SHORT, (0x10,))})
        assert get_flash(exif) is False

    def test_flash_missing(self):
        assert get_flash(ExifContainer({})) is None

    def test_datetime(self):
        exif = ExifContainer({Tag.DATE_TIME: ascii_value("2023:05:01 12:00:00")})
        assert get_datetime(exif, Tag.DATE_TIME) == datetime(2023, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_datetime_already_dashed(self):
        exif = ExifContainer({Tag.DATE_TIME: ascii_value("2023-05-01 12:00:00")})
        assert get_datetime(exif, Tag.DATE_TIME) == datetime(2023, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_datetime_unparseable(self):
        exif = ExifContainer({Tag.DATE_TIME: ascii_value("not-a-date")})
        assert get_datetime(exif, Tag.DATE_TIME) is None

    def test_datetime_blank(self):
        exif = ExifContainer({Tag.DATE_TIME: ascii_value("    :  :     :  :  ")})
        assert get_datetime(exif, Tag.DATE_TIME) is None

    def test_exif_version_undefined_digits_is_none(self):
        exif = ExifContainer({Tag.EXIF_VERSION: TagValue(FieldType.UNDEFINED, (b"0232",))})
        assert get_float(exif, Tag.EXIF_VERSION) is None

    def test_exif_version_rational(self):
        exif = ExifContainer({Tag.EXIF_VERSION: rational((22, 10))})
        assert get_float(exif, Tag.EXIF_VERSION) == pytest.approx(2.2)

    def test_exif_version_garbage(self):
        exif = ExifContainer({Tag.EXIF_VERSION: TagValue(FieldType.UNDEFINED, (b"\x00\x01",))})
        assert get_float(exif, Tag.EXIF_VERSION) is None


class TestImageExtractor:
    """Test extraction from files."""

    def test_full_record(self, media_id, camera_tiff, write_file):
        path = write_file(camera_tiff, "camera.tif")
        record = extract_image_metadata(media_id, path)

        assert isinstance(record, ImageMetadata)
        assert record.media_item_id == media_id
        assert record.exif_version is None
        assert record.pixel_width == 6000
        assert record.pixel_height == 4000
        assert record.x_resolution == 300
        assert record.y_resolution == 300
        assert record.capture_time == datetime(2023, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert record.flash_fired is True
        assert record.make == "Canon"
        assert record.model == "Canon EOS 5D"
        assert record.exposure_time == "1/125 s"
        assert record.f_number == "f/2.8"
        assert record.aperture_value == pytest.approx(2.97)
        assert record.altitude == pytest.approx(58.5)
        assert record.speed == pytest.approx(12.0)

        assert record.location is not None
        assert record.location.y == pytest.approx(-(33 + 52 / 60 + 4 / 3600), abs=1e-9)
        assert record.location.x == pytest.approx(151 + 12 / 60 + 36 / 3600, abs=1e-9)

    def test_sparse_record(self, media_id, write_file):
        path = write_file(build_tiff({MAKE: ("ascii", "Apple")}), "sparse.tif")
        record = extract_image_metadata(media_id, path)

        assert record.make == "Apple"
        assert record.model is None
        assert record.capture_time is None
        assert record.flash_fired is None
        assert record.location is None
        assert record.altitude is None
        assert record.exif_version is None

    def test_malformed_tags_degrade_to_none(self, media_id, write_file):
        data = build_tiff(
            {
                X_RESOLUTION: ("rational", [(72, 1)]),
                DATE_TIME: ("ascii", "yesterday"),
            },
            exif={
                APERTURE_VALUE: ("short", [3]),
                EXIF_VERSION: ("undefined", b"??"),
                FLASH: ("short", [0x00]),
            },
            gps={
                GPS_LATITUDE: ("short", [40, 30, 0]),
                GPS_LATITUDE_REF: ("ascii", "N"),
                GPS_LONGITUDE: ("rational", [(10, 1), (0, 1), (0, 1)]),
            },
        )
        record = extract_image_metadata(media_id, write_file(data, "odd.tif"))

        assert record.x_resolution is None
        assert record.capture_time is None
        assert record.aperture_value is None
        assert record.exif_version is None
        assert record.flash_fired is False
        assert record.location is None
        assert record.altitude is None

    def test_standard_exif_version_is_not_rational(self, media_id, write_file):
        data = build_tiff({MAKE: ("ascii", "Canon")}, exif={EXIF_VERSION: ("undefined", b"0232")})
        assert extract_image_metadata(media_id, write_file(data, "v.tif")).exif_version is None

    def test_rational_exif_version_from_file(self, media_id, write_file):
        data = build_tiff({MAKE: ("ascii", "Canon")}, exif={EXIF_VERSION: ("rational", [(22, 10)])})
        record = extract_image_metadata(media_id, write_file(data, "v.tif"))
        assert record.exif_version == pytest.approx(2.2)

    def test_west_longitude_from_file(self, media_id, write_file):
        data = build_tiff(
            {},
            gps={
                GPS_LATITUDE: ("rational", [(40, 1), (30, 1), (0, 1)]),
                GPS_LATITUDE_REF: ("ascii", "N"),
                GPS_LONGITUDE: ("rational", [(73, 1), (58, 1), (30, 1)]),
                GPS_LONGITUDE_REF: ("ascii", "W"),
            },
        )
        record = extract_image_metadata(media_id, write_file(data, "nyc.tif"))

        assert record.location.y == pytest.approx(40.5, abs=1e-9)
        assert record.location.x == pytest.approx(-(73 + 58 / 60 + 30 / 3600), abs=1e-9)

    def test_no_exif_container(self, media_id, write_file):
        path = write_file(b"not an image at all" + bytes(64), "plain.jpg")
        with pytest.raises(UnsupportedFormatError):
            extract_image_metadata(media_id, path)

    def test_missing_file(self, media_id, tmp_path):
        with pytest.raises(MediaIOError):
            extract_image_metadata(media_id, str(tmp_path / "missing.jpg"))

    def test_directory_is_io_error(self, media_id, tmp_path):
        with pytest.raises(MediaIOError):
            extract_image_metadata(media_id, str(tmp_path))

    def test_idempotent(self, media_id, camera_tiff, write_file):
        path = write_file(camera_tiff, "camera.tif")
        first = extract_image_metadata(media_id, path)
        second = extract_image_metadata(media_id, path)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_extractor_attributes(self):
        extractor = ImageExtractor(details=True)
        assert extractor.name == "exif"
        assert extractor.media_type.value == "image"
        assert extractor.details is True
        assert "ImageExtractor" in repr(extractor)

    def test_details_default_from_config(self, monkeypatch):
        monkeypatch.setenv("MEDIAMETA_EXIF_DETAILS", "true")
        assert ImageExtractor().details is True
