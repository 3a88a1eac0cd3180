"""SCSI generic commands sent to a block device through the SG_IO ioctl."""

from __future__ import annotations

import fcntl
import os
import struct
from array import array
from pathlib import Path

from nodedisk.inquiry import INQ_RESP_LEN, InquiryResponse, build_inquiry_cdb
from nodedisk.smart_types import (
    DEFAULT_TIMEOUT,
    SG_DXFER_FROM_DEV,
    SG_INFO_OK,
    SG_INFO_OK_MASK,
    SG_IO,
)

SCSI_MODE_SENSE = 0x1A
SCSI_READ_CAPACITY10 = 0x25
SCSI_READ_CAPACITY16 = 0x9E
SCSI_READ_CAPACITY_SERVICE_ACTION = 0x10
SCSI_ATA_PASSTHRU = 0x85

CAP_SYS_RAWIO = 1 << 17
CAP_SYS_ADMIN = 1 << 21

_PROC_STATUS = "/proc/self/status"

_SENSE_LEN = 32
_READ_CAPACITY10_LEN = 8
_READ_CAPACITY16_LEN = 32
_MODE_SENSE_LEN = 64
_UINT64_MASK = (1 << 64) - 1

# sg_io_hdr_t in native layout; "0P" pads the end to pointer alignment.
_SG_IO_HDR = struct.Struct("@iiBBHIPPPIIiPBBBBHHiII0P")
_STATUS_FIELD = 13
_HOST_STATUS_FIELD = 17
_DRIVER_STATUS_FIELD = 18
_INFO_FIELD = 21


class SgIOError(Exception):
    """A SCSI generic command completed with an error status."""

    def __init__(self, scsi_status: int, host_status: int, driver_status: int) -> None:
        self.scsi_status = scsi_status
        self.host_status = host_status
        self.driver_status = driver_status
        super().__init__(
            f"SCSI status: 0x{scsi_status:02x}, host status: 0x{host_status:02x}, "
            f"driver status: 0x{driver_status:02x}"
        )


class ReadCapacityOverflow(Exception):
    """READ CAPACITY (10) cannot represent the device's last block address."""

    def __init__(self) -> None:
        super().__init__("READ CAPACITY (10) overflow")


def check_binary_perm() -> int:
    """Return the effective capability mask if raw device access is allowed.

    Raises PermissionError unless CAP_SYS_RAWIO or CAP_SYS_ADMIN is in effect.
    """
    try:
        status = Path(_PROC_STATUS).read_text(encoding="utf-8")
    except OSError as exc:
        raise PermissionError(f"unable to read process capabilities: {exc}") from exc
    for line in status.splitlines():
        name, _, value = line.partition(":")
        if name == "CapEff":
            try:
                effective = int(value.strip(), 16)
            except ValueError as exc:
                raise PermissionError(f"malformed capability set: {value.strip()!r}") from exc
            break
    else:
        raise PermissionError("unable to find the effective capability set")
    if not effective & (CAP_SYS_RAWIO | CAP_SYS_ADMIN):
        raise PermissionError(
            "capSysRawIO and capSysAdmin are not in effect, device access will fail"
        )
    return effective


def _require_len(data: bytes, length: int, what: str) -> None:
    if len(data) < length:
        raise ValueError(f"{what} response too short: {len(data)} bytes, need {length}")


def parse_read_capacity10(data: bytes) -> int:
    """Return the capacity in bytes from a READ CAPACITY (10) response."""
    _require_len(data, _READ_CAPACITY10_LEN, "READ CAPACITY (10)")
    last_lba = int.from_bytes(data[0:4], "big")
    block_size = int.from_bytes(data[4:8], "big")
    if last_lba == 0xFFFFFFFF:
        raise ReadCapacityOverflow()
    return (last_lba + 1) * block_size


def parse_read_capacity16(data: bytes) -> int:
    """Return the capacity in bytes from a READ CAPACITY (16) response."""
    _require_len(data, 12, "READ CAPACITY (16)")
    last_lba = int.from_bytes(data[0:8], "big")
    block_size = int.from_bytes(data[8:12], "big")
    return ((last_lba + 1) * block_size) & _UINT64_MASK


def build_mode_sense_cdb(
    page: int, subpage: int, page_control: int, disable_block_desc: bool, length: int
) -> bytes:
    """Return a six byte MODE SENSE command."""
    return bytes(
        [
            SCSI_MODE_SENSE,
            (1 << 3) if disable_block_desc else 0,
            ((page_control << 6) | page) & 0xFF,
            subpage & 0xFF,
            length & 0xFF,
            0,
        ]
    )


def _read_capacity10_cdb() -> bytes:
    return bytes([SCSI_READ_CAPACITY10]) + bytes(9)


def _read_capacity16_cdb(length: int) -> bytes:
    cdb = bytearray(16)
    cdb[0] = SCSI_READ_CAPACITY16
    cdb[1] = SCSI_READ_CAPACITY_SERVICE_ACTION
    cdb[10:14] = length.to_bytes(4, "big")
    return bytes(cdb)


class SCSIDevice:
    """A SCSI block device addressed by its path, such as /dev/sda."""

    def __init__(self, dev_name: str) -> None:
        self.dev_name = dev_name
        self.fd: int | None = None

    def __enter__(self) -> SCSIDevice:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.dev_name!r})"

    def open(self) -> None:
        """Open the device for reading and writing."""
        self.fd = os.open(self.dev_name, os.O_RDWR)

    def close(self) -> None:
        """Close the device if it is open."""
        if self.fd is not None:
            fd, self.fd = self.fd, None
            os.close(fd)

    def _require_fd(self) -> int:
        if self.fd is None:
            raise ValueError(f"device {self.dev_name} is not open")
        return self.fd

    def send_cdb(self, cdb: bytes, length: int) -> bytes:
        """Send a command descriptor block and return ``length`` bytes of response."""
        fd = self._require_fd()
        response = array("B", bytes(length))
        command = array("B", bytes(cdb))
        sense = array("B", bytes(_SENSE_LEN))
        header = bytearray(
            _SG_IO_HDR.pack(
                ord("S"),
                SG_DXFER_FROM_DEV,
                len(command),
                len(sense),
                0,
                len(response),
                response.buffer_info()[0],
                command.buffer_info()[0],
                sense.buffer_info()[0],
                DEFAULT_TIMEOUT,
                0,
                0,
                0,
                0,
                0,
                0,
                0,
                0,
                0,
                0,
                0,
                0,
            )
        )
        fcntl.ioctl(fd, SG_IO, header, True)
        fields = _SG_IO_HDR.unpack(header)
        if fields[_INFO_FIELD] & SG_INFO_OK_MASK != SG_INFO_OK:
            raise SgIOError(
                fields[_STATUS_FIELD],
                fields[_HOST_STATUS_FIELD],
                fields[_DRIVER_STATUS_FIELD],
            )
        return response.tobytes()

    def inquiry(self) -> InquiryResponse:
        """Send a standard INQUIRY and return the decoded response."""
        return InquiryResponse.from_bytes(self.send_cdb(build_inquiry_cdb(), INQ_RESP_LEN))

    def logical_block_size(self) -> int:
        """Return the logical block size reported by READ CAPACITY (10)."""
        data = self.send_cdb(_read_capacity10_cdb(), _READ_CAPACITY10_LEN)
        return int.from_bytes(data[4:8], "big")

    def read_capacity(self) -> int:
        """Return the capacity in bytes, using READ CAPACITY (16) on overflow."""
        try:
            return parse_read_capacity10(
                self.send_cdb(_read_capacity10_cdb(), _READ_CAPACITY10_LEN)
            )
        except ReadCapacityOverflow:
            return parse_read_capacity16(
                self.send_cdb(_read_capacity16_cdb(_READ_CAPACITY16_LEN), _READ_CAPACITY16_LEN)
            )

    def mode_sense(
        self, page: int, subpage: int, page_control: int, disable_block_desc: bool
    ) -> bytes:
        """Send a MODE SENSE (6) command and return the response."""
        cdb = build_mode_sense_cdb(
            page, subpage, page_control, disable_block_desc, _MODE_SENSE_LEN
        )
        return self.send_cdb(cdb, _MODE_SENSE_LEN)