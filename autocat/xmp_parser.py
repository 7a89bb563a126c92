# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
XMP (Extensible Metadata Platform) keyword parser

This module locates an embedded <x:xmpmeta> block in any file by
streaming it in fixed-size chunks, then reads the Dublin Core
subject (dc:subject) keywords from the captured XML.

Copyright 2025 DNAi inc.
"""

import io
import logging
import xml.etree.ElementTree as ET
from enum import Enum
from pathlib import Path
from typing import BinaryIO, List, Optional

from autocat.exceptions import MetadataReadError
from autocat.keywords import split_keywords

logger = logging.getLogger(__name__)


class XMPScanState(Enum):
    """Progress of the chunked search for the <x:xmpmeta> block."""
    SEARCHING = 0
    FOUND_START_THIS_CHUNK = 1
    FOUND_START_PRIOR_CHUNK = 2
    FOUND_BOTH_THIS_CHUNK = 3
    FOUND_END_PRIOR_CHUNK = 4


class XMPParser:
    """
    Parser for dc:subject keywords in an embedded XMP block.

    The block can sit anywhere in the file (JPEG APP1, TIFF tag, MP3
    PRIV frame, sidecar file), so the scan does not depend on the
    container format. Only the first <x:xmpmeta> block is used.
    """

    XMP_META_START = b'<x:xmpmeta'
    XMP_META_END = b'</x:xmpmeta>'

    # Overlap carried between chunks; longer than both tags so a tag
    # split across a chunk boundary is still found
    TAIL_SIZE = 16
    DEFAULT_CHUNK_SIZE = 4096

    NAMESPACES = {
        'dc': 'http://purl.org/dc/elements/1.1/',
        'rdf': 'http://www.w3.org/1999/02/22-rdf-syntax-ns#',
    }

    def __init__(
        self,
        file_path: Optional[str] = None,
        file_data: Optional[bytes] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ):
        """
        Initialize XMP parser.

        Args:
            file_path: Path to file (if reading from file)
            file_data: File data bytes (if reading from memory)
            chunk_size: Number of bytes read per chunk while scanning
        """
        if file_path:
            self.file_path = Path(file_path)
            self.file_data = None
        elif file_data is not None:
            self.file_data = file_data
            self.file_path = None
        else:
            raise ValueError("Either file_path or file_data must be provided")

        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    def _open(self) -> BinaryIO:
        if self.file_path is not None:
            return open(self.file_path, 'rb')
        return io.BytesIO(self.file_data)

    def find_xmp_packet(self) -> Optional[bytes]:
        """
        Capture the <x:xmpmeta>...</x:xmpmeta> block from the file.

        Reading stops as soon as the end tag has been seen. If the start
        tag is found but the file ends before the end tag, the partial
        block is returned and fails later as malformed XML.

        Returns:
            Block bytes including both tags, or None if there is no start tag
        """
        state = XMPScanState.SEARCHING
        tail = b''
        packet = bytearray()

        with self._open() as stream:
            while True:
                chunk = stream.read(self.chunk_size)
                if not chunk:
                    break
                data = tail + chunk

                if state is XMPScanState.SEARCHING:
                    start = data.find(self.XMP_META_START)
                    if start != -1:
                        state = XMPScanState.FOUND_START_THIS_CHUNK
                        data = data[start:]

                if state in (XMPScanState.FOUND_START_THIS_CHUNK, XMPScanState.FOUND_START_PRIOR_CHUNK):
                    end = data.find(self.XMP_META_END)
                    if end != -1:
                        data = data[:end + len(self.XMP_META_END)]
                        if state is XMPScanState.FOUND_START_THIS_CHUNK:
                            state = XMPScanState.FOUND_BOTH_THIS_CHUNK
                        else:
                            state = XMPScanState.FOUND_END_PRIOR_CHUNK

                    if state in (XMPScanState.FOUND_START_THIS_CHUNK, XMPScanState.FOUND_BOTH_THIS_CHUNK):
                        packet += data
                    else:
                        # The tail is already in the packet
                        packet += data[len(tail):]

                if state is XMPScanState.FOUND_START_THIS_CHUNK:
                    state = XMPScanState.FOUND_START_PRIOR_CHUNK
                elif state in (XMPScanState.FOUND_BOTH_THIS_CHUNK, XMPScanState.FOUND_END_PRIOR_CHUNK):
                    break

                tail = data[-self.TAIL_SIZE:]

        if state is XMPScanState.SEARCHING:
            logger.debug("No XMP block in %s", self.file_path or '<memory>')
            return None
        return bytes(packet)

    def read_keywords(self) -> List[str]:
        """
        Read dc:subject keywords from the XMP block.

        Returns:
            List of keywords, empty if there is no XMP block or no dc:subject

        Raises:
            MetadataReadError: If the captured block is not well-formed XML
        """
        packet = self.find_xmp_packet()
        if packet is None:
            return []

        try:
            root = ET.fromstring(packet)
        except ET.ParseError as e:
            raise MetadataReadError(f"Failed to parse XMP block: {str(e)}") from e

        return self._extract_subject(root)

    def _extract_subject(self, root: ET.Element) -> List[str]:
        """
        Extract keywords from the first dc:subject element under root.

        dc:subject is normally an rdf:Bag of rdf:li items, one keyword
        each. Some writers store a plain delimited string instead.
        """
        subject = root.find('.//dc:subject', self.NAMESPACES)
        if subject is None:
            return []

        items = subject.findall('.//rdf:li', self.NAMESPACES)
        if items:
            return [(item.text or '').strip() for item in items]

        return split_keywords((subject.text or '').strip())
