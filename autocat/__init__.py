# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
autocat - Keyword extraction from media file metadata

Reads the keyword lists embedded in media files so they can be turned
into classification tags. Keywords come from XMP dc:subject (any file),
IPTC Keywords (JPEG) and the keyword comment of ID3v2 tags (MP3).
All metadata parsing is done by directly reading binary file structures.

Copyright 2025 DNAi inc.
"""

__version__ = "0.1.0"
__author__ = "DNAi inc."

from autocat.core import KeywordExtractor, extract_keywords
from autocat.cache import KeywordCache, file_fingerprint
from autocat.byte_cursor import ByteCursor
from autocat.exceptions import (
    AutoCatError,
    MetadataReadError,
    TruncatedDataError,
    UnsupportedEncodingError,
    UnsupportedFormatError,
)
from autocat.format_detector import FormatDetector
from autocat.id3_parser import ID3Parser, decode_syncsafe, encode_syncsafe, resynchronise, unsynchronise
from autocat.iptc_parser import IPTCParser
from autocat.keywords import clean_keywords, merge_unique, split_keywords
from autocat.xmp_parser import XMPParser

__all__ = [
    "extract_keywords",
    "KeywordExtractor",
    "KeywordCache",
    "file_fingerprint",
    "ByteCursor",
    "AutoCatError",
    "MetadataReadError",
    "TruncatedDataError",
    "UnsupportedEncodingError",
    "UnsupportedFormatError",
    "FormatDetector",
    "ID3Parser",
    "decode_syncsafe",
    "encode_syncsafe",
    "unsynchronise",
    "resynchronise",
    "IPTCParser",
    "split_keywords",
    "merge_unique",
    "clean_keywords",
    "XMPParser",
]
