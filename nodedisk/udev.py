"""Disk details derived from udev device properties, and the OS disk lookup."""

from __future__ import annotations

import os
import re
import socket
from collections.abc import Mapping
from dataclasses import dataclass, field

from nodedisk.strutil import hash_string

NDM_DISK_PREFIX = "disk-"
NDM_BLOCK_DEVICE_PREFIX = "blockdevice-"
UDEV_SUBSYSTEM = "block"
UDEV_SYSTEM = "disk"
UDEV_PARTITION = "partition"
UDEV_PATH = "DEVPATH"
UDEV_WWN = "ID_WWN"
UDEV_SERIAL = "ID_SERIAL_SHORT"
UDEV_SERIAL_FULL = "ID_SERIAL"
UDEV_BUS = "ID_BUS"
UDEV_MODEL = "ID_MODEL"
UDEV_VENDOR = "ID_VENDOR"
UDEV_TYPE = "ID_TYPE"
UDEV_MAJOR = "MAJOR"
UDEV_MINOR = "MINOR"
UDEV_UUID = "UDEV_UUID"
UDEV_SYSPATH = "UDEV_SYSPATH"
UDEV_ACTION = "UDEV_ACTION"
UDEV_ACTION_ADD = "add"
UDEV_ACTION_REMOVE = "remove"
UDEV_DEVTYPE = "DEVTYPE"
UDEV_SOURCE = "udev"
UDEV_SYSPATH_PREFIX = "/sys/dev/block/"
UDEV_DEVNAME = "DEVNAME"
UDEV_DEVLINKS = "DEVLINKS"
BY_ID_LINK = "by-id"
BY_PATH_LINK = "by-path"
LINK_ID_INDEX = 4
UDEV_FS_TYPE = "ID_FS_TYPE"
UDEV_FS_UUID = "ID_FS_UUID"
UDEV_PARTITION_TABLE_TYPE = "ID_PART_TABLE_TYPE"
UDEV_PARTITION_TABLE_UUID = "ID_PART_TABLE_UUID"
UDEV_PARTITION_NUMBER = "ID_PART_ENTRY_NUMBER"
UDEV_PARTITION_UUID = "ID_PART_ENTRY_UUID"
UDEV_PARTITION_TYPE = "ID_PART_ENTRY_TYPE"

# Models of virtual disks that share their attributes across machines.
LOCAL_DISK_MODELS = ("EphemeralDisk", "Virtual_disk", "QEMU_HARDDISK")

DEFAULT_MOUNTS_PATH = "/proc/self/mounts"
DEFAULT_SYS_BLOCK_DIR = "/sys/class/block"

_DECIMAL = re.compile(r"[+-]?[0-9]+")


@dataclass
class UdevDiskDetails:
    """Attributes of a disk or partition as udev reports them."""

    wwn: str = ""
    model: str = ""
    serial: str = ""
    vendor: str = ""
    path: str = ""
    by_id_dev_links: list[str] = field(default_factory=list)
    by_path_dev_links: list[str] = field(default_factory=list)
    disk_type: str = ""
    file_system: str = ""
    partition_type: str = ""
    partition_number: int = 0
    partition_table_type: str = ""


@dataclass
class UdevDevice:
    """A block device described by its udev properties.

    ``devtype`` defaults to the DEVTYPE property when not given.
    """

    properties: Mapping[str, str] = field(default_factory=dict)
    devtype: str = ""

    def __post_init__(self) -> None:
        if not self.devtype:
            self.devtype = self.properties.get(UDEV_DEVTYPE, "")

    def property_value(self, key: str) -> str:
        """Return the value of a property, or an empty string if it is absent."""
        return self.properties.get(key, "")

    def uid(self) -> str:
        """Return the unique id of the block device."""
        uid = (
            self.property_value(UDEV_WWN)
            + self.property_value(UDEV_MODEL)
            + self.property_value(UDEV_SERIAL)
            + self.property_value(UDEV_VENDOR)
        )
        id_type = self.property_value(UDEV_TYPE)
        model = self.property_value(UDEV_MODEL)
        # Virtual disks have no or identical attributes; the host name and device
        # name tell them apart across and within nodes.
        if not id_type or model in LOCAL_DISK_MODELS:
            uid += socket.gethostname() + self.property_value(UDEV_DEVNAME)
        return NDM_BLOCK_DEVICE_PREFIX + hash_string(uid)

    def is_disk(self) -> bool:
        """Return True if the device is a whole disk."""
        return self.devtype == UDEV_SYSTEM

    def is_partition(self) -> bool:
        """Return True if the device is a partition."""
        return self.devtype == UDEV_PARTITION

    def file_system(self) -> str:
        """Return the file system type on the device, if any."""
        return self.property_value(UDEV_FS_TYPE)

    def partition_type(self) -> str:
        """Return the partition entry type of the device."""
        return self.property_value(UDEV_PARTITION_TYPE)

    def partition_number(self) -> int:
        """Return the partition number as an unsigned byte, or 0 if there is none."""
        value = self.property_value(UDEV_PARTITION_NUMBER)
        if _DECIMAL.fullmatch(value) is None:
            return 0
        return int(value) & 0xFF

    def syspath(self) -> str:
        """Return the sysfs path built from the major and minor numbers."""
        major = self.property_value(UDEV_MAJOR)
        minor = self.property_value(UDEV_MINOR)
        return f"{UDEV_SYSPATH_PREFIX}{major}:{minor}"

    def path(self) -> str:
        """Return the device node path under /dev."""
        return self.property_value(UDEV_DEVNAME)

    def dev_links(self) -> dict[str, list[str]]:
        """Return the by-id and by-path device links.

        The by-id link built from bus, vendor, model and serial comes first.
        """
        by_id: list[str] = []
        by_path: list[str] = []
        bus = self.property_value(UDEV_BUS)
        serial_full = self.property_value(UDEV_SERIAL_FULL)
        for link in self.property_value(UDEV_DEVLINKS).split(" "):
            parts = link.split("/")
            if BY_ID_LINK in parts:
                name = parts[LINK_ID_INDEX] if len(parts) > LINK_ID_INDEX else ""
                if name.startswith(bus) and name.endswith(serial_full):
                    by_id.insert(0, link)
                else:
                    by_id.append(link)
            if BY_PATH_LINK in parts:
                by_path.append(link)
        return {BY_ID_LINK: by_id, BY_PATH_LINK: by_path}

    def disk_info(self) -> UdevDiskDetails:
        """Return the disk attributes udev reports for the device."""
        links = self.dev_links()
        return UdevDiskDetails(
            wwn=self.property_value(UDEV_WWN),
            model=self.property_value(UDEV_MODEL),
            serial=self.property_value(UDEV_SERIAL),
            vendor=self.property_value(UDEV_VENDOR),
            path=self.property_value(UDEV_DEVNAME),
            by_id_dev_links=links[BY_ID_LINK],
            by_path_dev_links=links[BY_PATH_LINK],
            disk_type=self.devtype,
            file_system=self.file_system(),
            partition_type=self.partition_type(),
            partition_number=self.partition_number(),
            partition_table_type=self.property_value(UDEV_PARTITION_TABLE_TYPE),
        )


def os_disk_name(
    mounts_path: str | os.PathLike[str] = DEFAULT_MOUNTS_PATH,
    sys_block_dir: str | os.PathLike[str] = DEFAULT_SYS_BLOCK_DIR,
) -> tuple[str, str]:
    """Return the kernel name of the disk holding / and the file system on it."""
    part_path = ""
    file_system = ""
    with open(mounts_path, encoding="utf-8") as mounts:
        for line in mounts:
            parts = line.rstrip("\n").split(" ")
            if len(parts) > 2 and parts[1] == "/":
                part_path, file_system = parts[0], parts[2]
                break
    part_name = part_path.replace("/dev/", "", 1)
    link = os.readlink(os.path.join(sys_block_dir, part_name))
    parts = link.split("/")
    if len(parts) < 2 or parts[-2] != "block":
        # The link names a partition under its parent disk; drop the partition.
        link = link.replace("/" + part_name, "", 1)
    return link.split("/")[-1], file_system


def syspath_of_os_disk(
    name: str, sys_block_dir: str | os.PathLike[str] = DEFAULT_SYS_BLOCK_DIR
) -> str:
    """Return the /sys/dev/block path of the disk ``name``."""
    with open(os.path.join(sys_block_dir, name, "dev"), encoding="utf-8") as handle:
        return UDEV_SYSPATH_PREFIX + handle.read().strip()


def os_disk_size(
    name: str, sys_block_dir: str | os.PathLike[str] = DEFAULT_SYS_BLOCK_DIR
) -> str:
    """Return the size of the disk ``name`` in sectors, as sysfs reports it."""
    with open(os.path.join(sys_block_dir, name, "size"), encoding="utf-8") as handle:
        return handle.read().strip()