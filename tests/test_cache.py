import hashlib

import pytest

from autocat import KeywordCache, file_fingerprint

from builders import (
    MPEG_AUDIO,
    comment_frame,
    id3_tag,
    iim_keywords,
    jpeg,
    photoshop_app13,
    photoshop_resource,
)


def test_fingerprint_hashes_full_content(write_file):
    data = b"\x00\x01" * 70000
    path = write_file("big.bin", data)

    assert file_fingerprint(path) == hashlib.sha1(data).hexdigest()
    assert file_fingerprint(path, "SHA256") == hashlib.sha256(data).hexdigest()


def test_fingerprint_rejects_unknown_hash(write_file):
    with pytest.raises(ValueError):
        file_fingerprint(write_file("a.bin", b"a"), "crc32")
    with pytest.raises(ValueError):
        KeywordCache("whirlpool")


def test_get_or_extract_caches_by_content(write_file):
    data = id3_tag(comment_frame("cat;dog")) + MPEG_AUDIO
    first = write_file("one.mp3", data)
    second = write_file("two.mp3", data)
    cache = KeywordCache()

    assert cache.get(first) is None
    assert cache.get_or_extract(first) == ["cat", "dog"]
    assert len(cache) == 1
    assert second in cache

    # Same content under another name is served from the cache
    assert cache.get_or_extract(second) == ["cat", "dog"]
    assert len(cache) == 1


def test_changed_content_misses(write_file):
    path = write_file("song.mp3", id3_tag(comment_frame("old")) + MPEG_AUDIO)
    cache = KeywordCache("md5")
    cache.get_or_extract(path)

    path.write_bytes(id3_tag(comment_frame("new")) + MPEG_AUDIO)

    assert path not in cache
    assert cache.get_or_extract(path) == ["new"]
    assert len(cache) == 2


def test_put_get_and_clear(write_file):
    path = write_file("photo.jpg", b"not really a jpeg")
    cache = KeywordCache()

    cache.put(path, ["manual"])
    assert cache.get(path) == ["manual"]

    cache.clear()
    assert len(cache) == 0
    assert cache.get(path) is None


def test_returned_lists_are_copies(write_file):
    path = write_file("song.mp3", id3_tag(comment_frame("a;b")) + MPEG_AUDIO)
    cache = KeywordCache()

    cache.get_or_extract(path).append("mutated")
    cache.get(path).append("mutated")

    assert cache.get(path) == ["a", "b"]


def test_extension_is_part_of_the_key(write_file):
    data = jpeg(photoshop_app13(photoshop_resource(0x0404, iim_keywords(["iptc"]))))
    path = write_file("upload.tmp", data)
    cache = KeywordCache()

    assert cache.get_or_extract(path) == []
    assert cache.get_or_extract(path, "jpg") == ["iptc"]
    assert cache.get(path, ".JPEG") == ["iptc"]
    assert cache.get(path) == []
    assert len(cache) == 2
