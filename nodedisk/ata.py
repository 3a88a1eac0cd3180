"""Decoding of the ATA IDENTIFY DEVICE page."""

from __future__ import annotations

from dataclasses import dataclass

from nodedisk.smart_types import (
    ATA_MAJOR_VERSIONS,
    ATA_MINOR_VERSIONS,
    NATIVE_ENDIAN,
    SERIAL_ATA_TYPES,
    most_significant_bit,
)

ATA_IDENTIFY_PAGE_LEN = 512

_SERIAL_OFFSET = 20  # words 10..19
_SERIAL_LEN = 20
_MAJOR_VER_OFFSET = 160  # word 80
_MINOR_VER_OFFSET = 162  # word 81
_SECTOR_SIZE_OFFSET = 212  # word 106
_WWN_OFFSET = 216  # words 108..111
_ROTATION_RATE_OFFSET = 434  # word 217
_TRANSPORT_MAJOR_OFFSET = 444  # word 222

_DEFAULT_SECTOR_SIZE = 512


def swap_byte_order(data: bytes) -> bytes:
    """Return ``data`` with the two bytes of every 16-bit word swapped."""
    if len(data) % 2:
        raise ValueError(f"data length must be even, got {len(data)}")
    swapped = bytearray(len(data))
    swapped[0::2] = data[1::2]
    swapped[1::2] = data[0::2]
    return bytes(swapped)


def _word(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 2], NATIVE_ENDIAN)


@dataclass(frozen=True)
class ATACSPage:
    """The words of an ATA IDENTIFY DEVICE page that are used."""

    raw_serial: bytes
    major_ver: int
    minor_ver: int
    sector_size_word: int
    wwn_words: tuple[int, int, int, int]
    rotation_rate: int
    transport_major: int

    @classmethod
    def from_bytes(cls, data: bytes) -> ATACSPage:
        """Decode a 512 byte identify page."""
        if len(data) < ATA_IDENTIFY_PAGE_LEN:
            raise ValueError(
                f"ATA identify page too short: {len(data)} bytes, "
                f"need {ATA_IDENTIFY_PAGE_LEN}"
            )
        data = bytes(data[:ATA_IDENTIFY_PAGE_LEN])
        wwn = tuple(_word(data, _WWN_OFFSET + 2 * n) for n in range(4))
        return cls(
            raw_serial=data[_SERIAL_OFFSET : _SERIAL_OFFSET + _SERIAL_LEN],
            major_ver=_word(data, _MAJOR_VER_OFFSET),
            minor_ver=_word(data, _MINOR_VER_OFFSET),
            sector_size_word=_word(data, _SECTOR_SIZE_OFFSET),
            wwn_words=(wwn[0], wwn[1], wwn[2], wwn[3]),
            rotation_rate=_word(data, _ROTATION_RATE_OFFSET),
            transport_major=_word(data, _TRANSPORT_MAJOR_OFFSET),
        )

    def serial_number(self) -> str:
        """Return the serial number; ATA strings store each byte pair swapped."""
        return swap_byte_order(self.raw_serial).decode("utf-8", errors="replace")

    def wwn(self) -> str:
        """Return the World Wide Name as NAA, IEEE OUI and unique id."""
        w0, w1, w2, w3 = self.wwn_words
        naa = w0 >> 12
        ieee_oui = ((w0 & 0x0FFF) << 12) | (w1 >> 4)
        unique_id = ((w1 & 0xF) << 32) | (w2 << 16) | w3
        return f"{naa:x} {ieee_oui:06x} {unique_id:09x}"

    def sector_sizes(self) -> tuple[int, int]:
        """Return the logical and physical sector sizes."""
        logical = physical = _DEFAULT_SECTOR_SIZE
        if (self.sector_size_word & 0xC000) != 0x4000:
            return logical, physical
        if self.sector_size_word & 0x2000:
            # Physical sector size is a power-of-two multiple of the logical one.
            physical <<= self.sector_size_word & 0x0F
        return logical, physical

    def ata_major_version(self) -> str:
        """Return the ATA major version the device reports."""
        if self.major_ver in (0, 0xFFFF):
            return "This device does not report ATA major version"
        return ATA_MAJOR_VERSIONS.get(most_significant_bit(self.major_ver), "unknown")

    def ata_minor_version(self) -> str:
        """Return the ATA minor version the device reports."""
        if self.minor_ver in (0, 0xFFFF):
            return "This device does not report ATA minor version"
        return ATA_MINOR_VERSIONS.get(self.minor_ver, "unknown")

    def transport(self) -> str:
        """Return the kind of ATA transport, such as serial or parallel ATA."""
        value = self.transport_major
        if value in (0, 0xFFFF):
            return "This device does not report Transport"
        kind = value >> 12
        if kind == 0x0:
            return "Parallel ATA"
        if kind == 0x1:
            return self.serial_ata_type()
        if kind == 0xE:
            return f"PCIe (0x{value & 0x0FFF:03x})"
        return f"Unknown (0x{value:04x})"

    def serial_ata_type(self) -> str:
        """Return the serial ATA transport version."""
        minor_bits = self.transport_major & 0x0FFF
        version = SERIAL_ATA_TYPES.get(most_significant_bit(minor_bits))
        if version is not None:
            return "Serial ATA" + version
        return f"Serial ATA SATA (0x{minor_bits:03x})"