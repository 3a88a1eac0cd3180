[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nodedisk"
version = "0.1.0"
description = "Block device details on Linux: SCSI INQUIRY and READ CAPACITY, ATA IDENTIFY decoding, udev property helpers, sparse files and claim upgrade tasks"
requires-python = ">=3.10"
dependencies = []
keywords = ["scsi", "ata", "sata", "udev", "block-device", "disk", "sg_io", "storage"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nodedisk"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
