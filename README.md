# nodedisk

Helpers for finding out what block devices a Linux node has and what they are.
The package has no third-party dependencies.

## What is in it

- `nodedisk.diskinfo` reports the basic details of a SCSI disk by device path:
  `scsi_basic_disk_info(dev_path)`, `scsi_basic_disk_info_by_attr(dev_path, attr_name)`
  and `os_scsi_basic_disk_info()` for the disk that holds the root file system.
- `nodedisk.device` holds `SCSIDisk` and `SATADisk`, `detect_scsi_type(path)` (opens
  the device, sends INQUIRY and returns a `SATADisk` when the vendor is `ATA`),
  `detect_bus_type(path)` and `is_condition_satisfied(path)`.
- `nodedisk.scsi` sends commands through the `SG_IO` ioctl: `SCSIDevice` with
  `inquiry()`, `read_capacity()` (falls back to READ CAPACITY (16) on overflow),
  `logical_block_size()` and `mode_sense(...)`; `check_binary_perm()` reads the
  effective capability set from `/proc/self/status` and raises `PermissionError`
  unless `CAP_SYS_RAWIO` or `CAP_SYS_ADMIN` is in effect. It also has
  `parse_read_capacity10`, `parse_read_capacity16` and `build_mode_sense_cdb`.
- `nodedisk.ata` decodes a 512-byte ATA IDENTIFY DEVICE page (`ATACSPage`), and
  `nodedisk.inquiry` decodes a standard SCSI INQUIRY response (`InquiryResponse`).
  Both work on captured bytes without a device.
- `nodedisk.smart_types` holds the attribute names, version tables, `DiskAttr`,
  `ErrorCollector` and `most_significant_bit`.
- `nodedisk.udev` works on udev properties you supply: `UdevDevice` computes the
  block device id (`uid()`), groups devlinks (`dev_links()`) and builds
  `UdevDiskDetails` (`disk_info()`). `os_disk_name()`, `syspath_of_os_disk()` and
  `os_disk_size()` find the root disk from `/proc/self/mounts` and `/sys/class/block`.
- `nodedisk.sparsefile`, `nodedisk.strutil`, `nodedisk.fdset` and `nodedisk.version`
  are small utilities; `nodedisk.upgrade` runs ordered upgrade tasks on block
  device claims.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Basic details of a SCSI disk. Only paths starting with `/dev/sd` are accepted;
the process needs `CAP_SYS_RAWIO` or `CAP_SYS_ADMIN`.

```python
from nodedisk.diskinfo import scsi_basic_disk_info, scsi_basic_disk_info_by_attr

details, errors = scsi_basic_disk_info("/dev/sda")
print(details.vendor, details.model_number, details.capacity)
for key, err in errors.items():
    print(key, err)

print(scsi_basic_disk_info_by_attr("/dev/sda", "FirmwareRevision"))
```

`scsi_basic_disk_info` does not raise: failures are returned in the error map,
keyed by names such as `SCSIInquiryError` or `errorCheckingConditions`.
`scsi_basic_disk_info_by_attr` raises instead.

Working with an open device directly:

```python
from nodedisk.device import detect_scsi_type

with detect_scsi_type("/dev/sda") as disk:
    print(disk.basic_disk_info_by_attr("Capacity"))
```

Decoding a captured ATA IDENTIFY page:

```python
from nodedisk.ata import ATACSPage

page = ATACSPage.from_bytes(raw_page)  # 512 bytes
print(page.serial_number(), page.wwn(), page.sector_sizes())
print(page.ata_major_version(), page.ata_minor_version(), page.transport())
```

A block device id from udev properties:

```python
from nodedisk.udev import UdevDevice

device = UdevDevice(
    properties={
        "DEVTYPE": "disk",
        "DEVNAME": "/dev/sdb",
        "ID_TYPE": "disk",
        "ID_MODEL": "ExampleModel",
        "ID_SERIAL_SHORT": "SERIAL0001",
        "ID_VENDOR": "ExampleVendor",
    }
)
print(device.uid(), device.is_disk(), device.disk_info())
```

Running upgrade tasks against a store of claims:

```python
from nodedisk.upgrade import BlockDeviceClaim, FinalizerRenameTask, run_upgrade

class MemoryClaims:
    def __init__(self, claims):
        self.claims = claims

    def list_claims(self):
        return self.claims

    def update(self, claim):
        pass

client = MemoryClaims([BlockDeviceClaim("claim-1", ["blockdeviceclaim.finalizer"])])
run_upgrade(FinalizerRenameTask("0.4.0", "0.4.1", client))  # raises UpgradeError on failure
```

## What it does not do

- It does not talk to udev itself: `UdevDevice` is built from a mapping of
  properties you pass in. There is no device enumeration and no monitoring of
  add or remove events.
- It does not create or update cluster resource definitions, and the upgrade
  tasks reach claims only through the `list_claims`/`update` client you provide.
- It installs no command and runs no daemon; it is a library.
- SMART attributes are not read; only the basic details listed above.