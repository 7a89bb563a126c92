import pytest

from autocat.exceptions import MetadataReadError
from autocat.xmp_parser import XMPParser

from builders import subject_bag, xmp_meta, xmp_packet


def test_reads_subject_bag(write_file):
    path = write_file("photo.jpg", b"\xff\xd8junk" + xmp_packet(subject_bag(["Paris", " Eiffel Tower "])) + b"more")

    assert XMPParser(str(path)).read_keywords() == ["Paris", "Eiffel Tower"]


def test_reads_subject_seq_from_memory():
    subject = (
        "<dc:subject><rdf:Seq><rdf:li>one</rdf:li><rdf:li>two</rdf:li></rdf:Seq></dc:subject>"
    )

    assert XMPParser(file_data=xmp_packet(subject)).read_keywords() == ["one", "two"]


def test_plain_subject_text_is_split():
    packet = xmp_packet("<dc:subject> red; green, blue ;yellow </dc:subject>")

    assert XMPParser(file_data=packet).read_keywords() == ["red", "green, blue", "yellow"]


def test_no_xmp_block_is_empty(write_file):
    path = write_file("plain.bin", b"\x00" * 10000)

    parser = XMPParser(str(path))
    assert parser.find_xmp_packet() is None
    assert parser.read_keywords() == []


def test_no_subject_is_empty():
    packet = xmp_packet('<dc:title><rdf:Alt><rdf:li xml:lang="x-default">T</rdf:li></rdf:Alt></dc:title>')

    assert XMPParser(file_data=packet).read_keywords() == []


def test_packet_recovered_across_chunk_boundary(write_file):
    fragment = xmp_meta(["boundary"])
    # Start tag straddles the first 4096-byte chunk boundary
    data = b"A" * 4090 + fragment + b"B" * 5000
    path = write_file("straddle.dat", data)

    parser = XMPParser(str(path))
    assert parser.find_xmp_packet() == fragment
    assert parser.read_keywords() == ["boundary"]


def test_end_tag_straddling_chunk_boundary(write_file):
    fragment = xmp_meta(["tail"])
    # Closing tag begins 5 bytes before the boundary
    offset = 4096 - len(fragment) + 7
    path = write_file("end.dat", b"A" * offset + fragment + b"B" * 100)

    assert XMPParser(str(path)).find_xmp_packet() == fragment


@pytest.mark.parametrize("chunk_size", [7, 16, 33, 100, 4096])
@pytest.mark.parametrize("offset", [0, 5, 61, 250])
def test_packet_is_not_duplicated_for_any_chunk_size(chunk_size, offset):
    fragment = xmp_meta([f"kw{i}" for i in range(20)])
    data = b"x" * offset + fragment + b"<x:xmpmeta>second</x:xmpmeta>"

    parser = XMPParser(file_data=data, chunk_size=chunk_size)
    assert parser.find_xmp_packet() == fragment
    assert parser.read_keywords()[-1] == "kw19"


def test_only_first_block_is_used():
    data = xmp_meta(["first"]) + b"\n" + xmp_meta(["second"])

    assert XMPParser(file_data=data).read_keywords() == ["first"]


def test_malformed_xml_raises():
    data = b"<x:xmpmeta xmlns:x='adobe:ns:meta/'><dc:subject>unbound</dc:subject></x:xmpmeta>"

    with pytest.raises(MetadataReadError):
        XMPParser(file_data=data).read_keywords()


def test_unterminated_block_raises():
    data = xmp_meta(["cut"])[:-20]

    with pytest.raises(MetadataReadError):
        XMPParser(file_data=data).read_keywords()


def test_requires_a_source():
    with pytest.raises(ValueError):
        XMPParser()


def test_rejects_non_positive_chunk_size():
    with pytest.raises(ValueError):
        XMPParser(file_data=b"", chunk_size=0)
