# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Core keyword extraction

This module provides the main API for extracting keywords from a media
file. It runs the XMP, IPTC and ID3 parsers that apply to the file and
merges their keywords into one duplicate-free list.

Copyright 2025 DNAi inc.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from autocat.exceptions import MetadataReadError
from autocat.format_detector import FormatDetector, SOURCE_ID3, SOURCE_IPTC, SOURCE_XMP
from autocat.id3_parser import ID3Parser
from autocat.iptc_parser import IPTCParser
from autocat.keywords import clean_keywords, merge_unique
from autocat.xmp_parser import XMPParser

logger = logging.getLogger(__name__)


class KeywordExtractor:
    """
    Extracts classification keywords from a media file.

    Example:
        >>> extractor = KeywordExtractor('photo.jpg')
        >>> extractor.extract()
        ['Paris', 'Eiffel Tower']
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        extension: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the extractor for one file.

        Args:
            file_path: Path to the media file
            extension: File extension used to pick format-specific sources.
                       Defaults to the suffix of file_path.
            options: Option values to apply on top of the defaults

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If an option name is not recognized
        """
        self.file_path = Path(file_path)
        if not self.file_path.is_file():
            raise FileNotFoundError(f"File not found: {file_path}")

        if extension is None:
            extension = self.file_path.suffix
        self.extension = extension
        self.format = FormatDetector.detect_format(extension)
        self.source_keywords: Dict[str, List[str]] = {}

        # Initialize API options with defaults
        self.options: Dict[str, Any] = {}
        self._initialize_default_options()
        for option_name, value in (options or {}).items():
            self.set_option(option_name, value)

    @staticmethod
    def available_options() -> Dict[str, Dict[str, Any]]:
        """
        Return a dictionary of available options.

        Returns:
            Dictionary mapping option names to their description, type and default
        """
        return {
            'ChunkSize': {
                'description': 'Number of bytes read per chunk while scanning for XMP',
                'type': 'int',
                'default': XMPParser.DEFAULT_CHUNK_SIZE,
            },
            'IgnoreMinorErrors': {
                'description': 'Treat a source with malformed metadata as having no keywords',
                'type': 'bool',
                'default': True,
            },
            'SkipEmptyKeywords': {
                'description': 'Drop keywords that are empty after trimming',
                'type': 'bool',
                'default': True,
            },
        }

    def _initialize_default_options(self) -> None:
        for option_name, option_info in self.available_options().items():
            self.options[option_name] = option_info['default']

    def set_option(self, option_name: str, value: Any) -> None:
        """
        Set an option value.

        Args:
            option_name: Name of the option (e.g., 'ChunkSize')
            value: Value to set; strings are converted to the option's type

        Raises:
            ValueError: If option name is not recognized or value has the wrong type or range
        """
        available = self.available_options()
        if option_name not in available:
            raise ValueError(f"Unknown option: {option_name}. Use available_options() to see valid options.")

        expected_type = available[option_name]['type']
        if expected_type == 'bool' and not isinstance(value, bool):
            if isinstance(value, str):
                value = value.lower() in ('true', '1', 'yes', 'on')
            else:
                value = bool(value)
        elif expected_type == 'int' and (isinstance(value, bool) or not isinstance(value, int)):
            try:
                value = int(value)
            except (ValueError, TypeError):
                raise ValueError(f"Option {option_name} requires int value, got {type(value).__name__}")

        if option_name == 'ChunkSize' and value < 1:
            raise ValueError(f"Option ChunkSize must be positive, got {value}")

        self.options[option_name] = value

    def get_option(self, option_name: str, default: Any = None) -> Any:
        return self.options.get(option_name, default)

    def _read_source(self, source: str) -> List[str]:
        path = str(self.file_path)
        if source == SOURCE_XMP:
            return XMPParser(path, chunk_size=self.get_option('ChunkSize')).read_keywords()
        if source == SOURCE_IPTC:
            return IPTCParser(path).read_keywords()
        if source == SOURCE_ID3:
            return ID3Parser(path).read_keywords()
        raise ValueError(f"Unknown keyword source: {source}")

    def extract(self) -> List[str]:
        """
        Extract keywords from every source that applies to the file.

        Sources are read in the order XMP, IPTC, ID3. A source whose
        metadata is malformed contributes nothing and the others still
        run. I/O errors propagate.

        Returns:
            Ordered list of unique keywords

        Raises:
            OSError: If the file cannot be read
            MetadataReadError: If IgnoreMinorErrors is False and a source is malformed
        """
        self.source_keywords = {}
        for source in FormatDetector.keyword_sources(self.format):
            try:
                keywords = self._read_source(source)
            except MetadataReadError as e:
                if not self.get_option('IgnoreMinorErrors'):
                    raise
                logger.warning("Ignoring %s metadata in %s: %s", source, self.file_path, e)
                keywords = []

            if self.get_option('SkipEmptyKeywords'):
                keywords = clean_keywords(keywords)
            logger.debug("%s keywords from %s: %r", source, self.file_path, keywords)
            self.source_keywords[source] = keywords

        return merge_unique(*self.source_keywords.values())

    def get_source_keywords(self) -> Dict[str, List[str]]:
        """Keywords found per source by the last call to extract()."""
        return {source: list(keywords) for source, keywords in self.source_keywords.items()}


def extract_keywords(file_path: Union[str, Path], extension: Optional[str] = None) -> List[str]:
    """
    Extract keywords embedded in a media file's metadata.

    XMP is read from every file, IPTC additionally from JPEG files and
    ID3 additionally from MP3 files.

    Args:
        file_path: Path to the media file
        extension: File extension ('jpg', 'mp3', ...); defaults to the path's suffix

    Returns:
        Ordered list of unique keywords
    """
    return KeywordExtractor(file_path, extension).extract()
