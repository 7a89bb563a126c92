# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
ID3v2 keyword parser

This module parses ID3v2.2, v2.3 and v2.4 tags at the start of MP3
files and returns the keywords stored in the comment frame whose
description is empty (COM in v2.2, COMM in v2.3/v2.4).

The tag is read in one linear pass:
- 10-byte tag header with a syncsafe body size
- optional reversal of tag-level unsynchronisation
- optional extended header (v2.3/v2.4)
- frames until the body is exhausted or padding starts

Copyright 2025 DNAi inc.
"""

import io
import logging
import zlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple

from autocat.byte_cursor import ByteCursor
from autocat.exceptions import MetadataReadError, TruncatedDataError, UnsupportedEncodingError
from autocat.keywords import split_keywords

logger = logging.getLogger(__name__)


def decode_syncsafe(data: bytes) -> int:
    """
    Decode a syncsafe integer.

    Each byte contributes its low 7 bits, most significant byte first,
    so four bytes hold a 28-bit value.

    Example:
        >>> decode_syncsafe(b'\\x00\\x00\\x02\\x01')
        257
    """
    value = 0
    for byte in data:
        value = (value << 7) | (byte & 0x7F)
    return value


def encode_syncsafe(value: int, width: int = 4) -> bytes:
    """
    Encode an integer as a syncsafe field of the given width.

    Raises:
        ValueError: If value does not fit in 7 * width bits
    """
    if value < 0 or value >= 1 << (7 * width):
        raise ValueError(f"Value {value} does not fit in a {width}-byte syncsafe integer")
    return bytes((value >> (7 * shift)) & 0x7F for shift in reversed(range(width)))


def unsynchronise(data: bytes) -> bytes:
    """
    Apply the ID3 unsynchronisation scheme.

    A 0x00 byte is inserted after every 0xFF that is followed by a byte
    of 0xE0 or above (a false MPEG sync) or by 0x00.
    """
    out = bytearray()
    last = len(data) - 1
    for index, byte in enumerate(data):
        out.append(byte)
        if byte == 0xFF and index < last:
            following = data[index + 1]
            if following >= 0xE0 or following == 0x00:
                out.append(0x00)
    return bytes(out)


def resynchronise(data: bytes) -> bytes:
    """Reverse unsynchronisation by replacing every 0xFF 0x00 pair with 0xFF."""
    return data.replace(b'\xff\x00', b'\xff')


class TextEncoding(Enum):
    """
    Text encodings declared by the first byte of ID3 text frames.

    Encoding 1 is UCS-2 in v2.2/v2.3 and UTF-16 in v2.4; both carry a
    byte order mark and decode with the same codec.
    """
    ISO_8859_1 = 0
    UTF_16 = 1
    UTF_16BE = 2
    UTF_8 = 3

    @property
    def codec(self) -> str:
        return _ENCODING_CODECS[self]

    @property
    def terminator_width(self) -> int:
        """Width in bytes of the null terminator after a string."""
        return 2 if self in (TextEncoding.UTF_16, TextEncoding.UTF_16BE) else 1

    @classmethod
    def from_byte(cls, value: int) -> 'TextEncoding':
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedEncodingError(value) from None

    def decode(self, data: bytes) -> str:
        """Decode a string field and trim nulls and surrounding whitespace."""
        return data.decode(self.codec, errors='ignore').strip('\x00').strip()


_ENCODING_CODECS = {
    TextEncoding.ISO_8859_1: 'latin-1',
    TextEncoding.UTF_16: 'utf-16',
    TextEncoding.UTF_16BE: 'utf-16-be',
    TextEncoding.UTF_8: 'utf-8',
}


@dataclass(frozen=True)
class ID3TagHeader:
    """The 10-byte header at the start of an ID3v2 tag."""
    major_version: int
    minor_version: int
    flags: int
    declared_size: int

    @property
    def unsynchronised(self) -> bool:
        return bool(self.flags & ID3Parser.FLAG_UNSYNCHRONISATION)

    @property
    def extended_header(self) -> bool:
        return bool(self.flags & ID3Parser.FLAG_EXTENDED_HEADER)

    @property
    def footer_present(self) -> bool:
        return bool(self.flags & ID3Parser.FLAG_FOOTER)


@dataclass(frozen=True)
class ID3FrameHeader:
    """Frame id, payload size and flag word of one frame."""
    frame_id: str
    size: int
    flags: int = 0


@dataclass(frozen=True)
class ID3FrameLayout:
    """
    Version-specific frame header layout and flag bits.

    A flag mask of 0 means the version has no such flag.
    """
    version: int
    id_size: int
    size_width: int
    syncsafe_size: bool
    has_flags: bool
    comment_id: str
    supports_extended_header: bool
    compressed: int = 0
    encrypted: int = 0
    grouped: int = 0
    data_length_indicator: int = 0
    unsynchronised: int = 0
    # Bytes of decompressed-size field that follow the header of a compressed frame
    compression_extra: int = 0

    @property
    def header_size(self) -> int:
        return self.id_size + self.size_width + (2 if self.has_flags else 0)


ID3_LAYOUTS: Dict[int, ID3FrameLayout] = {
    2: ID3FrameLayout(
        version=2,
        id_size=3,
        size_width=3,
        syncsafe_size=False,
        has_flags=False,
        comment_id='COM',
        supports_extended_header=False,
    ),
    3: ID3FrameLayout(
        version=3,
        id_size=4,
        size_width=4,
        syncsafe_size=False,
        has_flags=True,
        comment_id='COMM',
        supports_extended_header=True,
        compressed=0x0080,
        encrypted=0x0040,
        grouped=0x0020,
        compression_extra=4,
    ),
    4: ID3FrameLayout(
        version=4,
        id_size=4,
        size_width=4,
        syncsafe_size=True,
        has_flags=True,
        comment_id='COMM',
        supports_extended_header=True,
        grouped=0x0040,
        compressed=0x0008,
        encrypted=0x0004,
        unsynchronised=0x0002,
        data_length_indicator=0x0001,
    ),
}


@dataclass(frozen=True)
class ID3Frame:
    """A frame with its extra flag fields removed and its payload inflated."""
    header: ID3FrameHeader
    payload: bytes
    layout: ID3FrameLayout

    @property
    def is_comment(self) -> bool:
        return self.header.frame_id == self.layout.comment_id


def read_frame_header(cursor: ByteCursor, layout: ID3FrameLayout) -> ID3FrameHeader:
    """Read one frame header laid out for the given tag version."""
    frame_id = cursor.take(layout.id_size).decode('latin-1')
    if layout.syncsafe_size:
        size = cursor.take_syncsafe()
    else:
        size = cursor.take_uint(layout.size_width)
    flags = cursor.take_uint(2) if layout.has_flags else 0
    return ID3FrameHeader(frame_id=frame_id, size=size, flags=flags)


def split_terminated(data: bytes, width: int) -> Tuple[bytes, bytes]:
    """
    Split data at the first null terminator of the given width.

    Two-byte terminators only match at even offsets so that a UTF-16
    code unit ending in 0x00 followed by one starting with 0x00 is not
    mistaken for the terminator.

    Returns:
        (before, after) with the terminator removed; after is empty if
        there is no terminator
    """
    if width == 1:
        index = data.find(b'\x00')
        if index == -1:
            return data, b''
        return data[:index], data[index + 1:]

    for index in range(0, len(data) - 1, 2):
        if data[index] == 0 and data[index + 1] == 0:
            return data[:index], data[index + 2:]
    return data, b''


class ID3Parser:
    """
    Parser for the keyword comment in an ID3v2 tag.

    Example:
        >>> parser = ID3Parser('song.mp3')
        >>> parser.read_keywords()
        ['cat', 'dog']
    """

    ID3_IDENTIFIER = b'ID3'
    HEADER_SIZE = 10
    FOOTER_SIZE = 10
    SUPPORTED_VERSIONS = (2, 3, 4)
    # Encoding byte plus language code
    COMMENT_HEADER_SIZE = 4

    FLAG_UNSYNCHRONISATION = 0x80
    FLAG_EXTENDED_HEADER = 0x40
    FLAG_FOOTER = 0x10

    def __init__(self, file_path: Optional[str] = None, file_data: Optional[bytes] = None):
        """
        Initialize ID3 parser.

        Args:
            file_path: Path to audio file
            file_data: Raw file data
        """
        if file_path:
            self.file_path = Path(file_path)
            self.file_data = None
        elif file_data is not None:
            self.file_data = file_data
            self.file_path = None
        else:
            raise ValueError("Either file_path or file_data must be provided")
        self.header: Optional[ID3TagHeader] = None

    def _open(self) -> BinaryIO:
        if self.file_path is not None:
            return open(self.file_path, 'rb')
        return io.BytesIO(self.file_data)

    @classmethod
    def parse_header(cls, data: bytes) -> Optional[ID3TagHeader]:
        """
        Parse the 10-byte tag header.

        Returns:
            The header, or None if there is no ID3v2.2-2.4 tag
        """
        if len(data) < cls.HEADER_SIZE or data[:3] != cls.ID3_IDENTIFIER:
            return None
        major_version, minor_version, flags = data[3], data[4], data[5]
        if major_version not in cls.SUPPORTED_VERSIONS:
            logger.debug("Unsupported ID3v2 major version: %d", major_version)
            return None
        return ID3TagHeader(
            major_version=major_version,
            minor_version=minor_version,
            flags=flags,
            declared_size=decode_syncsafe(data[6:10]),
        )

    def read_header(self) -> Optional[ID3TagHeader]:
        """Read only the tag header from the file."""
        with self._open() as stream:
            self.header = self.parse_header(stream.read(self.HEADER_SIZE))
        return self.header

    def _read_tag(self) -> Optional[Tuple[ID3TagHeader, bytes]]:
        """
        Read the tag header and exactly the declared number of body bytes.

        Raises:
            TruncatedDataError: If the file ends inside the tag body
        """
        with self._open() as stream:
            header = self.parse_header(stream.read(self.HEADER_SIZE))
            self.header = header
            if header is None:
                return None

            body = stream.read(header.declared_size)
            if len(body) < header.declared_size:
                raise TruncatedDataError(
                    f"ID3 tag declares {header.declared_size} bytes but file holds {len(body)}",
                    requested=header.declared_size,
                    available=len(body),
                )
            if header.footer_present:
                stream.read(self.FOOTER_SIZE)

        if header.unsynchronised:
            body = resynchronise(body)
        return header, body

    def _skip_extended_header(self, cursor: ByteCursor, version: int) -> None:
        """
        Skip the extended header at the start of the tag body.

        The v2.3 size excludes its own 4 bytes; the v2.4 size is
        syncsafe and includes them.
        """
        if version == 3:
            cursor.skip(cursor.take_uint(4))
            return

        size = cursor.take_syncsafe()
        if size < 4:
            raise MetadataReadError(f"Invalid ID3v2.4 extended header size: {size}")
        cursor.skip(size - 4)

    def iter_frames(self) -> Iterator[ID3Frame]:
        """
        Iterate over the frames of the tag.

        Encrypted frames and compressed frames that fail to inflate are
        skipped. Iteration stops at padding or when the body is used up.

        Raises:
            TruncatedDataError: If a frame claims more bytes than remain
        """
        tag = self._read_tag()
        if tag is None:
            return
        header, body = tag
        layout = ID3_LAYOUTS[header.major_version]
        cursor = ByteCursor(body)

        if header.extended_header and layout.supports_extended_header:
            self._skip_extended_header(cursor, header.major_version)

        while not cursor.at_end():
            if cursor.remaining() < layout.header_size:
                logger.debug("Ignoring %d trailing bytes after last frame", cursor.remaining())
                return

            frame_header = read_frame_header(cursor, layout)
            if frame_header.frame_id.startswith('\x00'):
                # Padding runs to the end of the tag
                return

            if frame_header.flags & layout.encrypted:
                logger.debug("Skipping encrypted frame %s", frame_header.frame_id)
                cursor.skip(frame_header.size + 1)
                continue

            payload = self._frame_payload(frame_header, cursor.take(frame_header.size), layout, header)
            if payload is None:
                continue
            yield ID3Frame(header=frame_header, payload=payload, layout=layout)

    def _frame_payload(
        self,
        frame_header: ID3FrameHeader,
        data: bytes,
        layout: ID3FrameLayout,
        tag_header: ID3TagHeader
    ) -> Optional[bytes]:
        """
        Strip flag-dependent extra fields from frame data and inflate it.

        Returns:
            The frame payload, or None if a compressed payload is corrupt
        """
        flags = frame_header.flags
        cursor = ByteCursor(data)
        if flags & layout.compressed:
            cursor.skip(layout.compression_extra)
        if flags & layout.grouped:
            cursor.skip(1)
        if flags & layout.data_length_indicator:
            cursor.skip(4)
        payload = cursor.rest()

        if flags & layout.unsynchronised and not tag_header.unsynchronised:
            payload = resynchronise(payload)

        if flags & layout.compressed:
            try:
                payload = zlib.decompress(payload)
            except zlib.error as e:
                logger.debug("Skipping frame %s, failed to inflate: %s", frame_header.frame_id, e)
                return None
        return payload

    @staticmethod
    def parse_comment(payload: bytes) -> Tuple[str, str]:
        """
        Parse a comment frame payload.

        Layout:
        - 1 byte: Text encoding
        - 3 bytes: Language code (ignored)
        - Description, null terminated
        - Comment text

        Returns:
            (description, text), both decoded and trimmed

        Raises:
            UnsupportedEncodingError: If the encoding byte is not 0-3
        """
        cursor = ByteCursor(payload)
        encoding = TextEncoding.from_byte(cursor.take_byte())
        cursor.skip(3)
        description, text = split_terminated(cursor.rest(), encoding.terminator_width)
        return encoding.decode(description), encoding.decode(text)

    def read_keywords(self) -> List[str]:
        """
        Read keywords from the first comment frame with an empty description.

        Returns:
            List of keywords, empty if there is no tag or no such frame

        Raises:
            MetadataReadError: If the tag is malformed
        """
        for frame in self.iter_frames():
            if not frame.is_comment:
                continue
            if len(frame.payload) < self.COMMENT_HEADER_SIZE:
                logger.debug("Skipping comment frame with %d-byte payload", len(frame.payload))
                continue
            description, text = self.parse_comment(frame.payload)
            if description:
                logger.debug("Ignoring comment frame with description %r", description)
                continue
            return split_keywords(text)
        return []
