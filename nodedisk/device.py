"""Basic disk details of SCSI and SATA disks read with SCSI commands."""

from __future__ import annotations

import re

from nodedisk.ata import ATA_IDENTIFY_PAGE_LEN, ATACSPage
from nodedisk.scsi import SCSI_ATA_PASSTHRU, SCSIDevice, check_binary_perm
from nodedisk.smart_types import (
    ATA_IDENTIFY_DEVICE,
    ATA_IDENTIFY_ERR,
    ATA_MAJOR,
    ATA_MINOR,
    ATA_TRANSPORT,
    ATACS_ATTRS,
    CAPACITY,
    COMPLIANCE,
    FIRMWARE_REV,
    LOGICAL_SECTOR_SIZE,
    MODEL_NUMBER,
    PHYSICAL_SECTOR_SIZE,
    RPM,
    SCSI_GET_LB_SIZE_ERR,
    SCSI_INQ_ATTRS,
    SCSI_INQ_ERR,
    SCSI_READ_CAP_ERR,
    SERIAL_NUMBER,
    SIMPLE_SCSI_ATTRS,
    SUPPORTED_BUS_TYPE,
    VENDOR,
    WWN,
    DiskAttr,
    ErrorCollector,
)

_NVME_DEVICE = re.compile(r"/dev/nvme[0-9]+n[0-9]+")


def detect_bus_type(path: str) -> str:
    """Return the bus type ("SCSI", "IDE", "NVMe" or "unknown") of a device path."""
    if path.startswith("/dev/sd"):
        return "SCSI"
    if path.startswith("/dev/hd"):
        return "IDE"
    if _NVME_DEVICE.fullmatch(path):
        return "NVMe"
    return "unknown"


def is_condition_satisfied(path: str) -> None:
    """Check that ``path`` can be probed: given, permitted and on a supported bus.

    Raises ValueError or PermissionError describing the first unmet condition.
    """
    if not path:
        raise ValueError("no disk device path given to get the disk details")
    try:
        check_binary_perm()
    except PermissionError as exc:
        raise PermissionError(
            f"error while checking device access permissions, Error: {exc}"
        ) from exc
    bus_type = detect_bus_type(path)
    if bus_type != SUPPORTED_BUS_TYPE:
        raise ValueError(f'the device type is not supported yet, device type: "{bus_type}"')


def _not_found(attr_name: str) -> LookupError:
    return LookupError(f'Value of attribute "{attr_name}" not found')


class SCSIDisk(SCSIDevice):
    """A SCSI disk whose details come from INQUIRY and READ CAPACITY."""

    def _fill_from_inquiry(self, details: DiskAttr) -> None:
        values = self.inquiry().values()
        details.compliance = values[COMPLIANCE]
        details.vendor = values[VENDOR]
        details.model_number = values[MODEL_NUMBER]
        details.firmware_revision = values[FIRMWARE_REV]
        details.serial_number = values[SERIAL_NUMBER]

    def _attr_from_inquiry(self, attr_name: str) -> str:
        try:
            response = self.inquiry()
        except Exception as exc:
            raise OSError(f"error in sending SCSI Inquiry command, Error: {exc}") from exc
        return response.values()[attr_name]

    def _attr_from_simple_scsi(self, attr_name: str) -> str:
        if attr_name == LOGICAL_SECTOR_SIZE:
            try:
                return str(self.logical_block_size())
            except Exception as exc:
                raise OSError(
                    f"error in getting logical block size of the device, Error: {exc}"
                ) from exc
        if attr_name == CAPACITY:
            try:
                return str(self.read_capacity())
            except Exception as exc:
                raise OSError(
                    f"error in getting total capacity of the device, Error: {exc}"
                ) from exc
        raise _not_found(attr_name)

    def basic_disk_info(self) -> tuple[DiskAttr, dict[str, BaseException]]:
        """Return every basic detail that could be read and the errors met, by kind."""
        collector = ErrorCollector()
        details = DiskAttr()
        try:
            self._fill_from_inquiry(details)
        except Exception as exc:
            collector.collect(SCSI_INQ_ERR, exc)
        try:
            details.capacity = self.read_capacity()
        except Exception as exc:
            collector.collect(SCSI_READ_CAP_ERR, exc)
        try:
            details.lb_size = self.logical_block_size()
        except Exception as exc:
            collector.collect(SCSI_GET_LB_SIZE_ERR, exc)
        return details, collector.error_map()

    def basic_disk_info_by_attr(self, attr_name: str) -> str:
        """Return the value of one attribute, such as Vendor or Capacity."""
        if attr_name in SCSI_INQ_ATTRS:
            return self._attr_from_inquiry(attr_name)
        if attr_name in SIMPLE_SCSI_ATTRS:
            return self._attr_from_simple_scsi(attr_name)
        raise _not_found(attr_name)


def _ata_identify_cdb() -> bytes:
    cdb = bytearray(16)
    cdb[0] = SCSI_ATA_PASSTHRU
    cdb[1] = 0x08  # ATA protocol: PIO data-in
    cdb[2] = 0x0E  # BYT_BLOK = 1, T_LENGTH = 2, T_DIR = 1
    cdb[14] = ATA_IDENTIFY_DEVICE
    return bytes(cdb)


class SATADisk(SCSIDisk):
    """An ATA disk reached through SCSI-ATA translation."""

    def ata_identify(self) -> ATACSPage:
        """Send ATA IDENTIFY DEVICE through ATA pass-through and decode the page."""
        try:
            data = self.send_cdb(_ata_identify_cdb(), ATA_IDENTIFY_PAGE_LEN)
        except Exception as exc:
            raise OSError(
                f"error in sending SCSICDB 16 for ATA device, Error: {exc}"
            ) from exc
        return ATACSPage.from_bytes(data)

    def _fill_from_ata_page(self, details: DiskAttr) -> None:
        page = self.ata_identify()
        logical, physical = page.sector_sizes()
        details.serial_number = page.serial_number()
        details.wwn = page.wwn()
        details.lb_size = logical
        details.pb_size = physical
        details.rotation_rate = page.rotation_rate
        details.ata_transport = page.transport()
        details.ata_major_version = page.ata_major_version()
        details.ata_minor_version = page.ata_minor_version()

    def _attr_from_ata_page(self, attr_name: str) -> str:
        try:
            page = self.ata_identify()
        except Exception as exc:
            raise OSError(f"error in sending ATAIdentifyCommand, Error: {exc}") from exc
        if attr_name == WWN:
            return page.wwn()
        if attr_name == ATA_TRANSPORT:
            return page.transport()
        if attr_name == ATA_MAJOR:
            return page.ata_major_version()
        if attr_name == ATA_MINOR:
            return page.ata_minor_version()
        if attr_name == RPM:
            return str(page.rotation_rate)
        if attr_name == LOGICAL_SECTOR_SIZE:
            return str(page.sector_sizes()[0])
        if attr_name == PHYSICAL_SECTOR_SIZE:
            return str(page.sector_sizes()[1])
        raise _not_found(attr_name)

    def basic_disk_info(self) -> tuple[DiskAttr, dict[str, BaseException]]:
        """Return every basic and ATA detail that could be read and the errors met."""
        collector = ErrorCollector()
        details = DiskAttr()
        try:
            self._fill_from_ata_page(details)
        except Exception as exc:
            collector.collect(ATA_IDENTIFY_ERR, exc)
        try:
            self._fill_from_inquiry(details)
        except Exception as exc:
            collector.collect(SCSI_INQ_ERR, exc)
        try:
            details.capacity = self.read_capacity()
        except Exception as exc:
            collector.collect(SCSI_READ_CAP_ERR, exc)
        return details, collector.error_map()

    def basic_disk_info_by_attr(self, attr_name: str) -> str:
        """Return the value of one attribute, preferring the ATA identify page."""
        if attr_name in SCSI_INQ_ATTRS:
            return self._attr_from_inquiry(attr_name)
        if attr_name in ATACS_ATTRS:
            return self._attr_from_ata_page(attr_name)
        if attr_name in SIMPLE_SCSI_ATTRS:
            return self._attr_from_simple_scsi(attr_name)
        raise _not_found(attr_name)


def detect_scsi_type(path: str) -> SCSIDisk:
    """Open ``path`` and return it as a SATADisk if it reports ATA, else a SCSIDisk.

    The returned disk is open; close it, or use it as a context manager.
    """
    device = SCSIDisk(path)
    device.open()
    try:
        response = device.inquiry()
    except BaseException:
        device.close()
        raise
    if response.is_ata():
        disk: SCSIDisk = SATADisk(path)
        disk.fd = device.fd
        return disk
    return device