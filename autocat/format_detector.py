# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
File format detector

This module maps file extensions to the formats that carry format-specific
keyword metadata, and each format to the keyword sources that apply to it.

Copyright 2025 DNAi inc.
"""

from typing import Dict, Optional, Tuple

from autocat.exceptions import UnsupportedFormatError


SOURCE_XMP = 'XMP'
SOURCE_IPTC = 'IPTC'
SOURCE_ID3 = 'ID3'


class FormatDetector:
    """
    Detects file formats from extensions.

    XMP can be embedded in any file, so every file gets the XMP source.
    IPTC is only read from JPEG and ID3 only from MP3.
    """

    # Extension to format mapping
    EXTENSION_FORMATS: Dict[str, str] = {
        '.jpg': 'JPEG', '.jpeg': 'JPEG', '.jpe': 'JPEG', '.jfif': 'JPEG',
        '.mp3': 'MP3',
    }

    # Keyword sources per format, in merge order
    FORMAT_SOURCES: Dict[Optional[str], Tuple[str, ...]] = {
        None: (SOURCE_XMP,),
        'JPEG': (SOURCE_XMP, SOURCE_IPTC),
        'MP3': (SOURCE_XMP, SOURCE_ID3),
    }

    @staticmethod
    def normalize_extension(extension: str) -> str:
        """Lower-case an extension and make sure it has a leading dot."""
        extension = extension.strip().lower()
        if extension and not extension.startswith('.'):
            extension = '.' + extension
        return extension

    @classmethod
    def detect_format(cls, extension: Optional[str]) -> Optional[str]:
        """
        Detect file format from a file extension.

        Args:
            extension: Extension with or without the leading dot ('jpg', '.MP3')

        Returns:
            Format name or None if the format has no format-specific source
        """
        if not extension:
            return None
        return cls.EXTENSION_FORMATS.get(cls.normalize_extension(extension))

    @classmethod
    def keyword_sources(cls, format_name: Optional[str]) -> Tuple[str, ...]:
        """
        Return the keyword sources to read for a format.

        Raises:
            UnsupportedFormatError: If format_name is not a known format
        """
        if format_name not in cls.FORMAT_SOURCES:
            raise UnsupportedFormatError(f"Unsupported file format: {format_name}")
        return cls.FORMAT_SOURCES[format_name]
