"""Most-significant-bit-first reader over a byte string."""

from __future__ import annotations


class BitReader:
    """Read unsigned fields of arbitrary width from a byte string, MSB first."""

    def __init__(self, data: bytes):
        raw = bytes(data)
        self._value = int.from_bytes(raw, "big")
        self._size = len(raw) * 8
        self._position = 0

    def read(self, count: int) -> int:
        """Return the next ``count`` bits as an unsigned integer.

        Raises EOFError if fewer than ``count`` bits remain.
        """
        if count < 0:
            raise ValueError("bit count must not be negative")
        if count == 0:
            return 0
        end = self._position + count
        if end > self._size:
            raise EOFError(
                f"requested {count} bits with only {self.bits_left()} remaining"
            )
        shift = self._size - end
        self._position = end
        return (self._value >> shift) & ((1 << count) - 1)

    def read_flag(self) -> bool:
        """Return the next bit as a boolean."""
        return bool(self.read(1))

    def bits_left(self) -> int:
        """Return the number of unread bits."""
        return self._size - self._position