# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Keyword cache keyed by file content

Extraction holds no state between calls. Callers that see the same file
more than once (a page rendered repeatedly, a re-upload) can keep the
results in a KeywordCache, which keys them by the file's format and a
hash of its content rather than by its path. There is no eviction.

Copyright 2025 DNAi inc.
"""

import hashlib
from pathlib import Path
from typing import Dict, List, Optional, Union

from autocat.core import extract_keywords
from autocat.format_detector import FormatDetector

HASH_BLOCK_SIZE = 65536
SUPPORTED_HASH_TYPES = ('md5', 'sha1', 'sha256')


def file_fingerprint(file_path: Union[str, Path], hash_type: str = 'sha1') -> str:
    """
    Hash the full content of a file.

    Args:
        file_path: Path to the file
        hash_type: Type of hash to calculate ('md5', 'sha1', 'sha256')

    Returns:
        Hexadecimal hash string
    """
    hash_type = hash_type.lower()
    if hash_type not in SUPPORTED_HASH_TYPES:
        raise ValueError(f"Unsupported hash type: {hash_type}")
    hasher = hashlib.new(hash_type)
    with open(file_path, 'rb') as f:
        for block in iter(lambda: f.read(HASH_BLOCK_SIZE), b''):
            hasher.update(block)
    return hasher.hexdigest()


class KeywordCache:
    """
    In-memory map from file content and format to extracted keywords.

    The format decides which sources are read, so the same content
    under a JPEG and an unrecognised extension is cached separately.

    Example:
        >>> cache = KeywordCache()
        >>> cache.get_or_extract('photo.jpg', 'jpg')
        ['Paris']
    """

    def __init__(self, hash_type: str = 'sha1'):
        if hash_type.lower() not in SUPPORTED_HASH_TYPES:
            raise ValueError(f"Unsupported hash type: {hash_type}")
        self.hash_type = hash_type.lower()
        self._entries: Dict[str, List[str]] = {}

    def fingerprint(self, file_path: Union[str, Path]) -> str:
        return file_fingerprint(file_path, self.hash_type)

    def cache_key(self, file_path: Union[str, Path], extension: Optional[str] = None) -> str:
        """
        Build the cache key for a file.

        Args:
            file_path: Path to the media file
            extension: File extension; defaults to the path's suffix

        Returns:
            "<format>:<content hash>", with format None for files read for XMP only
        """
        if extension is None:
            extension = Path(file_path).suffix
        return f"{FormatDetector.detect_format(extension)}:{self.fingerprint(file_path)}"

    def get(self, file_path: Union[str, Path], extension: Optional[str] = None) -> Optional[List[str]]:
        """Return cached keywords for the file's content and format, or None."""
        keywords = self._entries.get(self.cache_key(file_path, extension))
        return list(keywords) if keywords is not None else None

    def put(self, file_path: Union[str, Path], keywords: List[str], extension: Optional[str] = None) -> None:
        self._entries[self.cache_key(file_path, extension)] = list(keywords)

    def get_or_extract(self, file_path: Union[str, Path], extension: Optional[str] = None) -> List[str]:
        """Return cached keywords, extracting and caching them on a miss."""
        key = self.cache_key(file_path, extension)
        if key not in self._entries:
            self._entries[key] = extract_keywords(file_path, extension)
        return list(self._entries[key])

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, file_path: Union[str, Path]) -> bool:
        return self.cache_key(file_path) in self._entries
