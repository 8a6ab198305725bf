"""A fixed-size bit set stored in bytes, least significant bit first."""

from __future__ import annotations


class Bitmap:
    """A bitmap of ``size`` bytes, all bits initially clear."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("bitmap size cannot be negative")
        self._bytes = bytearray(size)

    def _locate(self, bit: int) -> tuple[int, int]:
        if not 0 <= bit < len(self):
            raise IndexError(f"bit {bit} out of range for {len(self)} bits")
        return bit // 8, 1 << (bit % 8)

    def set(self, bit: int) -> None:
        """Set ``bit``."""
        index, mask = self._locate(bit)
        self._bytes[index] |= mask

    def clear(self, bit: int) -> None:
        """Clear ``bit``."""
        index, mask = self._locate(bit)
        self._bytes[index] &= ~mask & 0xFF

    def test(self, bit: int) -> bool:
        """Whether ``bit`` is set."""
        index, mask = self._locate(bit)
        return bool(self._bytes[index] & mask)

    def __len__(self) -> int:
        return len(self._bytes) * 8

    def __bytes__(self) -> bytes:
        return bytes(self._bytes)