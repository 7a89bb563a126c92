# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for autocat

This module defines the exceptions raised by the keyword extractors.
Absence of metadata is never an exception: extractors return an empty
keyword list. These classes cover malformed input only.

Copyright 2025 DNAi inc.
"""

from typing import Optional


class AutoCatError(Exception):
    """
    Base exception for all autocat errors.
    
    All autocat exceptions inherit from this class, allowing
    catch-all error handling for any extraction-related errors.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.
        
        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class MetadataReadError(AutoCatError):
    """
    Raised when an embedded metadata block is present but cannot be parsed.
    
    This exception is raised when:
    - A captured XMP fragment is not well-formed XML
    - An ID3 extended header declares an impossible size
    - A structure inside a metadata block contradicts itself
    
    The failure is scoped to the extractor that raised it; the
    dispatcher treats it as that source contributing no keywords.
    """
    pass


class TruncatedDataError(MetadataReadError):
    """
    Raised when a read would run past the end of a bounded buffer.
    
    Frame and extended-header sizes are read from the file itself, so a
    size larger than what remains of the tag body ends up here instead
    of reading outside the declared tag boundary.
    """
    def __init__(self, message: str = "", requested: Optional[int] = None,
                 available: Optional[int] = None):
        self.requested = requested
        self.available = available
        super().__init__(message)


class UnsupportedEncodingError(MetadataReadError):
    """
    Raised when an ID3 text frame declares an unknown encoding byte.
    
    Once the encoding selector is wrong, none of the following frame
    boundaries can be trusted, so this aborts the whole ID3 parse.
    """
    def __init__(self, encoding: int):
        self.encoding = encoding
        super().__init__(f"Unsupported ID3 text encoding: {encoding}")


class UnsupportedFormatError(AutoCatError):
    """
    Raised when a format name has no keyword sources registered for it.
    """
    pass
