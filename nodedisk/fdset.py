"""A bit set of file descriptors in the layout used by select()."""

from __future__ import annotations

from dataclasses import dataclass, field

_WORD_BITS = 64
_WORDS = 16


def _empty_bits() -> list[int]:
    return [0] * _WORDS


@dataclass
class FdSet:
    """File descriptor set stored as sixteen 64-bit words."""

    bits: list[int] = field(default_factory=_empty_bits)

    def _locate(self, fd: int) -> tuple[int, int]:
        if not 0 <= fd < _WORD_BITS * len(self.bits):
            raise ValueError(f"file descriptor out of range: {fd}")
        return fd // _WORD_BITS, 1 << (fd % _WORD_BITS)

    def set(self, fd: int) -> None:
        """Add ``fd`` to the set."""
        word, mask = self._locate(fd)
        self.bits[word] |= mask

    def isset(self, fd: int) -> bool:
        """Return True if ``fd`` is in the set."""
        word, mask = self._locate(fd)
        return bool(self.bits[word] & mask)

    def zero(self) -> None:
        """Clear every descriptor from the set."""
        self.bits = [0] * len(self.bits)