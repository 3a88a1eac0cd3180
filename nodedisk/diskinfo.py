"""Basic details of a SCSI disk, by device path or for the disk holding /."""

from __future__ import annotations

import os
from dataclasses import dataclass

from nodedisk.device import SATADisk, SCSIDisk, detect_scsi_type, is_condition_satisfied
from nodedisk.smart_types import (
    COMPLIANCE,
    DETECT_SCSI_TYPE_ERR,
    ERROR_CHECK_CONDITIONS,
    FIRMWARE_REV,
    DiskAttr,
    ErrorCollector,
)
from nodedisk.udev import DEFAULT_MOUNTS_PATH, DEFAULT_SYS_BLOCK_DIR, os_disk_name


@dataclass
class OsDiskDetails:
    """Basic details of the disk that holds the root file system."""

    compliance: str = ""
    firmware_revision: str = ""
    capacity: int = 0
    lb_size: int = 0
    dev_path: str = ""


def scsi_basic_disk_info(dev_path: str) -> tuple[DiskAttr, dict[str, BaseException]]:
    """Return every basic detail of the disk at ``dev_path`` and the errors met.

    Errors are not raised but returned, keyed by the kind of step that failed.
    """
    collector = ErrorCollector()
    try:
        is_condition_satisfied(dev_path)
    except Exception as exc:
        collector.collect(ERROR_CHECK_CONDITIONS, exc)
        return DiskAttr(), collector.error_map()
    try:
        disk = detect_scsi_type(dev_path)
    except Exception as exc:
        collector.collect(DETECT_SCSI_TYPE_ERR, exc)
        return DiskAttr(), collector.error_map()
    with disk:
        return disk.basic_disk_info()


def scsi_basic_disk_info_by_attr(dev_path: str, attr_name: str) -> str:
    """Return the value of one attribute, such as Vendor, of the disk at ``dev_path``."""
    is_condition_satisfied(dev_path)
    if not attr_name:
        raise ValueError("no attribute name specified to get the value")
    try:
        disk = detect_scsi_type(dev_path)
    except Exception as exc:
        raise OSError(f"error in detecting type of SCSI device, Error: {exc}") from exc
    with disk:
        try:
            return disk.basic_disk_info_by_attr(attr_name)
        except Exception as exc:
            raise OSError(
                f'error getting "{attr_name}" of disk having devpath "{dev_path}", '
                f"error: {exc}"
            ) from exc


def _logical_block_size(disk: SCSIDisk) -> int:
    if isinstance(disk, SATADisk):
        return disk.ata_identify().sector_sizes()[0]
    return disk.logical_block_size()


def _os_scsi_basic_disk_info(
    mounts_path: str | os.PathLike[str],
    sys_block_dir: str | os.PathLike[str],
) -> OsDiskDetails:
    name, _ = os_disk_name(mounts_path, sys_block_dir)
    dev_path = "/dev/" + name
    is_condition_satisfied(dev_path)
    with detect_scsi_type(dev_path) as disk:
        values = disk.inquiry().values()
        capacity = disk.read_capacity()
        lb_size = _logical_block_size(disk)
    return OsDiskDetails(
        compliance=values[COMPLIANCE],
        firmware_revision=values[FIRMWARE_REV],
        capacity=capacity,
        lb_size=lb_size,
        dev_path=dev_path,
    )


def os_scsi_basic_disk_info() -> OsDiskDetails:
    """Return basic details of the SCSI disk holding the root file system."""
    return _os_scsi_basic_disk_info(DEFAULT_MOUNTS_PATH, DEFAULT_SYS_BLOCK_DIR)