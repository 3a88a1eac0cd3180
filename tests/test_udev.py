from unittest import mock

import pytest

from nodedisk.strutil import hash_string
from nodedisk.udev import (
    BY_ID_LINK,
    BY_PATH_LINK,
    NDM_BLOCK_DEVICE_PREFIX,
    UdevDevice,
    UdevDiskDetails,
    os_disk_name,
    os_disk_size,
    syspath_of_os_disk,
)

BY_ID_MAIN = "/dev/disk/by-id/ata-EXAMPLE_MODEL_SERIAL0001"
BY_ID_WWN = "/dev/disk/by-id/wwn-0x5000000000000001"
BY_PATH = "/dev/disk/by-path/pci-0000:00:1f.2-ata-1"


def _physical_disk(**extra):
    props = {
        "ID_WWN": "0x5000000000000001",
        "ID_MODEL": "EXAMPLE_MODEL",
        "ID_SERIAL_SHORT": "SERIAL0001",
        "ID_SERIAL": "EXAMPLE_MODEL_SERIAL0001",
        "ID_VENDOR": "ATA",
        "ID_BUS": "ata",
        "ID_TYPE": "disk",
        "DEVNAME": "/dev/sda",
        "DEVTYPE": "disk",
        "MAJOR": "8",
        "MINOR": "0",
        "DEVLINKS": " ".join([BY_ID_WWN, BY_PATH, BY_ID_MAIN]),
        "ID_FS_TYPE": "ext4",
        "ID_PART_TABLE_TYPE": "gpt",
    }
    props.update(extra)
    return UdevDevice(props)


def test_property_value_missing_is_empty():
    device = _physical_disk()
    assert device.property_value("ID_MODEL") == "EXAMPLE_MODEL"
    assert device.property_value("NO_SUCH_KEY") == ""


def test_devtype_from_properties():
    device = _physical_disk()
    assert device.devtype == "disk"
    assert device.is_disk()
    assert not device.is_partition()


def test_partition_devtype():
    device = UdevDevice({"DEVTYPE": "partition"})
    assert device.is_partition()
    assert not device.is_disk()


def test_uid_of_physical_disk():
    device = _physical_disk()
    expected = NDM_BLOCK_DEVICE_PREFIX + hash_string(
        "0x5000000000000001" + "EXAMPLE_MODEL" + "SERIAL0001" + "ATA"
    )
    assert device.uid() == expected


def test_uid_of_virtual_disk_includes_host_and_devname():
    device = _physical_disk(ID_MODEL="QEMU_HARDDISK")
    with mock.patch("socket.gethostname", return_value="node1"):
        uid = device.uid()
    base = "0x5000000000000001" + "QEMU_HARDDISK" + "SERIAL0001" + "ATA"
    assert uid == NDM_BLOCK_DEVICE_PREFIX + hash_string(base + "node1" + "/dev/sda")


def test_uid_without_id_type_differs_by_host():
    device = UdevDevice({"DEVNAME": "/dev/sdb"})
    with mock.patch("socket.gethostname", return_value="node-a"):
        first = device.uid()
    with mock.patch("socket.gethostname", return_value="node-b"):
        second = device.uid()
    assert first.startswith(NDM_BLOCK_DEVICE_PREFIX)
    assert first != second


def test_syspath_and_path():
    device = _physical_disk()
    assert device.syspath() == "/sys/dev/block/8:0"
    assert device.path() == "/dev/sda"


@pytest.mark.parametrize(
    "value, expected",
    [("2", 2), ("", 0), ("abc", 0), ("1 ", 0)],
)
def test_partition_number(value, expected):
    device = UdevDevice({"ID_PART_ENTRY_NUMBER": value})
    assert device.partition_number() == expected


def test_partition_number_fits_a_byte():
    device = UdevDevice({"ID_PART_ENTRY_NUMBER": "1000"})
    assert 0 <= device.partition_number() < 256


def test_dev_links_puts_main_by_id_link_first():
    links = _physical_disk().dev_links()
    assert links[BY_ID_LINK] == [BY_ID_MAIN, BY_ID_WWN]
    assert links[BY_PATH_LINK] == [BY_PATH]


def test_dev_links_empty():
    links = UdevDevice({}).dev_links()
    assert links == {BY_ID_LINK: [], BY_PATH_LINK: []}


def test_file_system_and_partition_type():
    device = _physical_disk(ID_PART_ENTRY_TYPE="0x83")
    assert device.file_system() == "ext4"
    assert device.partition_type() == "0x83"


def test_disk_info():
    info = _physical_disk().disk_info()
    assert info == UdevDiskDetails(
        wwn="0x5000000000000001",
        model="EXAMPLE_MODEL",
        serial="SERIAL0001",
        vendor="ATA",
        path="/dev/sda",
        by_id_dev_links=[BY_ID_MAIN, BY_ID_WWN],
        by_path_dev_links=[BY_PATH],
        disk_type="disk",
        file_system="ext4",
        partition_type="",
        partition_number=0,
        partition_table_type="gpt",
    )


def _write_mounts(path, root_line):
    path.write_text(
        "proc /proc proc rw 0 0\n" + root_line + "\ntmpfs /tmp tmpfs rw 0 0\n",
        encoding="utf-8",
    )


def test_os_disk_name_from_partition(tmp_path):
    mounts = tmp_path / "mounts"
    _write_mounts(mounts, "/dev/sda4 / ext4 rw,relatime 0 0")
    sys_block = tmp_path / "block"
    sys_block.mkdir()
    (sys_block / "sda4").symlink_to(
        "../../devices/pci0000:00/0000:00:1f.2/ata1/host0/target0:0:0/0:0:0:0/block/sda/sda4"
    )
    assert os_disk_name(mounts, sys_block) == ("sda", "ext4")


def test_os_disk_name_from_whole_disk(tmp_path):
    mounts = tmp_path / "mounts"
    _write_mounts(mounts, "/dev/vda / xfs rw 0 0")
    sys_block = tmp_path / "block"
    sys_block.mkdir()
    (sys_block / "vda").symlink_to("../../devices/pci0000:00/virtio1/block/vda")
    assert os_disk_name(mounts, sys_block) == ("vda", "xfs")


def test_os_disk_name_missing_mounts(tmp_path):
    with pytest.raises(FileNotFoundError):
        os_disk_name(tmp_path / "absent", tmp_path)


def test_os_disk_name_missing_link(tmp_path):
    mounts = tmp_path / "mounts"
    _write_mounts(mounts, "/dev/sdz1 / ext4 rw 0 0")
    sys_block = tmp_path / "block"
    sys_block.mkdir()
    with pytest.raises(OSError):
        os_disk_name(mounts, sys_block)


def test_syspath_of_os_disk(tmp_path):
    disk_dir = tmp_path / "sda"
    disk_dir.mkdir()
    (disk_dir / "dev").write_text("8:0\n", encoding="utf-8")
    assert syspath_of_os_disk("sda", tmp_path) == "/sys/dev/block/8:0"


def test_os_disk_size(tmp_path):
    disk_dir = tmp_path / "sda"
    disk_dir.mkdir()
    (disk_dir / "size").write_text("976773168\n", encoding="utf-8")
    assert os_disk_size("sda", tmp_path) == "976773168"


def test_os_disk_size_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        os_disk_size("sdq", tmp_path)