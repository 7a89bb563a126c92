# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
IPTC keyword parser

This module reads the Keywords dataset (2:25) of the IPTC Information
Interchange Model (IIM) from JPEG files. IIM records live in the APP13
segment, usually wrapped in a Photoshop image resource block.

Copyright 2025 DNAi inc.
"""

import io
import logging
import struct
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional

from autocat.byte_cursor import ByteCursor
from autocat.exceptions import TruncatedDataError

logger = logging.getLogger(__name__)


class IPTCParser:
    """
    Parser for IPTC-IIM keywords in JPEG files.

    Each occurrence of dataset 2:25 is one keyword; IIM repeats the
    dataset for multi-valued fields instead of using a delimiter.
    """

    JPEG_SOI = b'\xff\xd8'
    APP13_MARKER = 0xED
    SOS_MARKER = 0xDA
    EOI_MARKER = 0xD9
    # Markers without a length field (TEM, RST0-RST7)
    STANDALONE_MARKERS = {0x01} | set(range(0xD0, 0xD8))

    PHOTOSHOP_HEADER = b'Photoshop 3.0\x00'
    RESOURCE_SIGNATURE = b'8BIM'
    IPTC_RESOURCE_ID = 0x0404

    TAG_MARKER = 0x1C
    KEYWORDS = (2, 25)
    CODED_CHARACTER_SET = (1, 90)
    UTF8_ESCAPE = b'\x1b%G'

    def __init__(self, file_path: Optional[str] = None, file_data: Optional[bytes] = None):
        """
        Initialize the IPTC parser.

        Args:
            file_path: Path to the image file
            file_data: Raw file data (alternative to file_path)
        """
        if file_path:
            self.file_path = Path(file_path)
            self.file_data = None
        elif file_data is not None:
            self.file_data = file_data
            self.file_path = None
        else:
            raise ValueError("Either file_path or file_data must be provided")

    def _open(self) -> BinaryIO:
        if self.file_path is not None:
            return open(self.file_path, 'rb')
        return io.BytesIO(self.file_data)

    def read_keywords(self) -> List[str]:
        """
        Read IPTC keywords from the file.

        Returns:
            List of keywords in file order, empty if the file is not a
            JPEG or carries no IPTC keywords
        """
        keywords = []
        for segment in self._iter_app13_segments():
            for block in self._iter_iim_blocks(segment):
                keywords.extend(self._parse_iim_keywords(block))
        return keywords

    def _iter_app13_segments(self) -> Iterator[bytes]:
        """Yield the payload of every APP13 segment before the image data."""
        with self._open() as stream:
            if stream.read(2) != self.JPEG_SOI:
                logger.debug("Not a JPEG file, skipping IPTC: %s", self.file_path or '<memory>')
                return

            while True:
                if stream.read(1) != b'\xff':
                    return
                marker = stream.read(1)
                # Skip fill bytes before the marker code
                while marker == b'\xff':
                    marker = stream.read(1)
                if not marker:
                    return

                marker_code = marker[0]
                if marker_code in self.STANDALONE_MARKERS:
                    continue
                if marker_code in (self.SOS_MARKER, self.EOI_MARKER):
                    return

                length_bytes = stream.read(2)
                if len(length_bytes) < 2:
                    return
                length = struct.unpack('>H', length_bytes)[0]
                if length < 2:
                    return

                if marker_code == self.APP13_MARKER:
                    yield stream.read(length - 2)
                else:
                    stream.seek(length - 2, io.SEEK_CUR)

    def _iter_iim_blocks(self, segment: bytes) -> Iterator[bytes]:
        """Yield the raw IIM blocks carried by one APP13 segment."""
        if segment.startswith(self.PHOTOSHOP_HEADER):
            yield from self._iter_photoshop_iptc(segment[len(self.PHOTOSHOP_HEADER):])
        elif segment[:1] == bytes([self.TAG_MARKER]):
            yield segment

    def _iter_photoshop_iptc(self, resources: bytes) -> Iterator[bytes]:
        """
        Walk Photoshop image resources and yield IPTC (0x0404) resource data.

        Each resource is:
        - 4 bytes: "8BIM" signature
        - 2 bytes: Resource ID (big-endian)
        - Pascal string name, padded to an even length
        - 4 bytes: Data size (big-endian)
        - N bytes: Data, padded to an even length
        """
        cursor = ByteCursor(resources)
        try:
            while cursor.remaining() >= 12:
                if cursor.take(4) != self.RESOURCE_SIGNATURE:
                    break
                resource_id = cursor.take_uint(2)
                name_length = cursor.take_byte()
                # Length byte plus name must be even
                cursor.skip(name_length if name_length % 2 else name_length + 1)
                size = cursor.take_uint(4)
                data = cursor.take(size)
                if size % 2 and not cursor.at_end():
                    cursor.skip(1)

                if resource_id == self.IPTC_RESOURCE_ID:
                    yield data
        except TruncatedDataError as e:
            logger.debug("Photoshop resource block truncated: %s", e)

    def _parse_iim_keywords(self, iim_data: bytes) -> List[str]:
        """
        Parse raw IIM records and collect the Keywords dataset.

        IIM data is stored as a series of records, each containing:
        - 1 byte: Tag marker (0x1C)
        - 1 byte: Record number
        - 1 byte: Dataset number
        - 2 bytes: Data length (big-endian); if the high bit is set the
          low 15 bits give the size of a longer length field that follows
        - N bytes: Data

        Args:
            iim_data: Raw IIM data bytes

        Returns:
            Keywords in record order
        """
        cursor = ByteCursor(iim_data)
        keywords = []
        utf8 = False

        while cursor.remaining() >= 5:
            if cursor.take_byte() != self.TAG_MARKER:
                continue

            record = cursor.take_byte()
            dataset = cursor.take_byte()
            length = cursor.take_uint(2)
            if length & 0x8000:
                length_size = length & 0x7FFF
                if not 0 < length_size <= 4 or length_size > cursor.remaining():
                    break
                length = int.from_bytes(cursor.take(length_size), 'big')

            if length > cursor.remaining():
                logger.debug("IIM dataset %d:%d runs past the block", record, dataset)
                break
            value = cursor.take(length)

            if (record, dataset) == self.CODED_CHARACTER_SET:
                utf8 = value.startswith(self.UTF8_ESCAPE)
            elif (record, dataset) == self.KEYWORDS:
                keywords.append(self._decode_value(value, utf8))

        return keywords

    @staticmethod
    def _decode_value(value: bytes, utf8: bool) -> str:
        if utf8:
            text = value.decode('utf-8', errors='replace')
        else:
            try:
                text = value.decode('utf-8')
            except UnicodeDecodeError:
                text = value.decode('latin-1')
        return text.strip('\x00').strip()
