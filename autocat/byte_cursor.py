# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Forward-only byte cursor

A read-only view over a byte buffer plus an offset. Parsers read
fixed-size fields with take() instead of slicing and re-slicing
the buffer by hand, and every read is bounded by what remains.

Copyright 2025 DNAi inc.
"""

import struct

from autocat.exceptions import TruncatedDataError


class ByteCursor:
    """
    Bounded, forward-only reader over a bytes object.

    Example:
        >>> cursor = ByteCursor(b'ID3\\x03\\x00')
        >>> cursor.take(3)
        b'ID3'
        >>> cursor.remaining()
        2
    """

    # Big-endian unsigned integer formats by width
    _UINT_FORMATS = {1: '>B', 2: '>H', 4: '>I'}

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._offset = 0

    def take(self, n: int) -> bytes:
        """
        Return the next n bytes and advance past them.

        Raises:
            TruncatedDataError: If fewer than n bytes remain
        """
        if n < 0:
            raise ValueError(f"Cannot take a negative number of bytes: {n}")
        available = self.remaining()
        if n > available:
            raise TruncatedDataError(
                f"Requested {n} bytes but only {available} remain",
                requested=n,
                available=available,
            )
        start = self._offset
        self._offset += n
        return self._data[start:self._offset]

    def remaining(self) -> int:
        """Number of bytes left to read."""
        return len(self._data) - self._offset

    def at_end(self) -> bool:
        return self.remaining() == 0

    def skip(self, n: int) -> None:
        """Advance past n bytes without returning them."""
        self.take(n)

    def take_byte(self) -> int:
        return self.take(1)[0]

    def take_uint(self, width: int) -> int:
        """
        Read a big-endian unsigned integer of 1 to 4 bytes.

        Args:
            width: Field width in bytes

        Returns:
            Decoded integer
        """
        if width in self._UINT_FORMATS:
            return struct.unpack(self._UINT_FORMATS[width], self.take(width))[0]
        if width == 3:
            return int.from_bytes(self.take(3), 'big')
        raise ValueError(f"Unsupported integer width: {width}")

    def take_syncsafe(self) -> int:
        """Read a 4-byte syncsafe integer (7 significant bits per byte)."""
        value = 0
        for byte in self.take(4):
            value = (value << 7) | (byte & 0x7F)
        return value

    def rest(self) -> bytes:
        """Return everything that remains and move to the end."""
        return self.take(self.remaining())
