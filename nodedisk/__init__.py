"""Block device details from SCSI, ATA and udev properties, with small utilities."""

__version__ = "0.1.0"