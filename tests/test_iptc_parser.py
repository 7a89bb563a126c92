import struct

from autocat.iptc_parser import IPTCParser

from builders import (
    JPEG_EOI,
    JPEG_SOI,
    JFIF_APP0,
    SCAN_DATA,
    iim_keywords,
    iim_record,
    jpeg,
    photoshop_app13,
    photoshop_resource,
    segment,
)


def test_reads_repeated_keyword_datasets(write_file):
    iim = (
        iim_record(1, 90, b"\x1b%G")
        + iim_record(2, 5, b"Object name")
        + iim_keywords(["Paris", "Eiffel Tower"])
        + iim_record(2, 120, b"A caption")
        + iim_keywords(["night"])
    )
    path = write_file("photo.jpg", jpeg(photoshop_app13(photoshop_resource(0x0404, iim))))

    assert IPTCParser(str(path)).read_keywords() == ["Paris", "Eiffel Tower", "night"]


def test_skips_other_photoshop_resources():
    resources = (
        photoshop_resource(0x03ED, b"\x00\x48\x00\x00\x00\x01", name=b"res")
        + photoshop_resource(0x0404, iim_keywords(["odd"]), name=b"ab")
        + photoshop_resource(0x040C, b"\x01\x02\x03")
    )

    assert IPTCParser(file_data=jpeg(photoshop_app13(resources))).read_keywords() == ["odd"]


def test_raw_iim_app13_segment():
    data = jpeg(segment(0xED, iim_keywords(["raw"])))

    assert IPTCParser(file_data=data).read_keywords() == ["raw"]


def test_utf8_coded_character_set():
    iim = iim_record(1, 90, b"\x1b%G") + iim_keywords(["Zürich"])
    data = jpeg(photoshop_app13(photoshop_resource(0x0404, iim)))

    assert IPTCParser(file_data=data).read_keywords() == ["Zürich"]


def test_latin1_fallback_without_character_set():
    iim = iim_keywords(["Zürich"], encoding="latin-1")
    data = jpeg(photoshop_app13(photoshop_resource(0x0404, iim)))

    assert IPTCParser(file_data=data).read_keywords() == ["Zürich"]


def test_extended_length_dataset():
    value = b"long keyword"
    record = b"\x1c\x02\x19" + struct.pack(">H", 0x8002) + struct.pack(">H", len(value)) + value
    data = jpeg(photoshop_app13(photoshop_resource(0x0404, record)))

    assert IPTCParser(file_data=data).read_keywords() == ["long keyword"]


def test_truncated_record_keeps_earlier_keywords():
    iim = iim_keywords(["kept"]) + b"\x1c\x02\x19" + struct.pack(">H", 500) + b"short"
    data = jpeg(photoshop_app13(photoshop_resource(0x0404, iim)))

    assert IPTCParser(file_data=data).read_keywords() == ["kept"]


def test_keywords_from_every_app13_segment():
    data = jpeg(
        photoshop_app13(photoshop_resource(0x0404, iim_keywords(["one"]))),
        photoshop_app13(photoshop_resource(0x0404, iim_keywords(["two"]))),
    )

    assert IPTCParser(file_data=data).read_keywords() == ["one", "two"]


def test_no_app13_is_empty():
    assert IPTCParser(file_data=jpeg(segment(0xE1, b"Exif\x00\x00"))).read_keywords() == []


def test_no_keywords_dataset_is_empty():
    iim = iim_record(2, 5, b"Object name")
    data = jpeg(photoshop_app13(photoshop_resource(0x0404, iim)))

    assert IPTCParser(file_data=data).read_keywords() == []


def test_not_a_jpeg_is_empty():
    assert IPTCParser(file_data=b"\x89PNG\r\n\x1a\n" + iim_keywords(["x"])).read_keywords() == []


def test_segments_after_start_of_scan_are_ignored():
    app13 = photoshop_app13(photoshop_resource(0x0404, iim_keywords(["hidden"])))
    data = JPEG_SOI + JFIF_APP0 + SCAN_DATA + app13 + JPEG_EOI

    assert IPTCParser(file_data=data).read_keywords() == []
