"""Building and decoding the standard SCSI INQUIRY command."""

from __future__ import annotations

from dataclasses import dataclass

from nodedisk.smart_types import (
    COMPLIANCE,
    FIRMWARE_REV,
    MODEL_NUMBER,
    SERIAL_NUMBER,
    VENDOR,
)

SCSI_INQUIRY = 0x12
INQ_RESP_LEN = 56

_ATA_VENDOR_ID = b"ATA     "


def build_inquiry_cdb() -> bytes:
    """Return the six byte INQUIRY command asking for a full standard response."""
    cdb = bytearray(6)
    cdb[0] = SCSI_INQUIRY
    cdb[3:5] = INQ_RESP_LEN.to_bytes(2, "big")
    return bytes(cdb)


def _text(field_bytes: bytes, width: int) -> str:
    return field_bytes.decode("utf-8", errors="replace")[:width]


@dataclass(frozen=True)
class InquiryResponse:
    """The fields of a standard INQUIRY response that are used."""

    version: int
    vendor_id: bytes
    product_id: bytes
    product_rev: bytes
    serial_number: bytes

    @classmethod
    def from_bytes(cls, data: bytes) -> InquiryResponse:
        """Decode a response of at least 56 bytes."""
        if len(data) < INQ_RESP_LEN:
            raise ValueError(
                f"inquiry response too short: {len(data)} bytes, need {INQ_RESP_LEN}"
            )
        data = bytes(data)
        return cls(
            version=data[2],
            vendor_id=data[8:16],
            product_id=data[16:32],
            product_rev=data[32:36],
            serial_number=data[36:56],
        )

    def values(self) -> dict[str, str]:
        """Return the attributes the response carries, keyed by attribute name."""
        spc = (self.version - 0x02) & 0xFF
        return {
            COMPLIANCE: "SPC-" + (str(spc) if spc else ""),
            VENDOR: _text(self.vendor_id, 8),
            MODEL_NUMBER: _text(self.product_id, 16),
            FIRMWARE_REV: _text(self.product_rev, 4),
            SERIAL_NUMBER: _text(self.serial_number, 20),
        }

    def is_ata(self) -> bool:
        """Return True if the device reports itself as an ATA device."""
        return self.vendor_id == _ATA_VENDOR_ID