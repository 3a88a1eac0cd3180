import pytest

from nodedisk.ata import ATACSPage, swap_byte_order
from nodedisk.smart_types import NATIVE_ENDIAN

# Serial number as stored on the device, each byte pair swapped.
RAW_SERIAL = b"    F KA-EESIRLA0010"
SERIAL = "     FAKE-SERIAL0001"


def build_page(
    major=0x07FE,
    minor=0x006D,
    sector=0x6003,
    wwn=(0x5123, 0x4567, 0x89AB, 0xCDEF),
    rotation=0x1518,
    transport=0x107E,
):
    buf = bytearray(512)
    buf[20:40] = RAW_SERIAL

    def put(offset, value):
        buf[offset : offset + 2] = value.to_bytes(2, NATIVE_ENDIAN)

    put(160, major)
    put(162, minor)
    put(212, sector)
    for n, word in enumerate(wwn):
        put(216 + 2 * n, word)
    put(434, rotation)
    put(444, transport)
    return bytes(buf)


@pytest.fixture
def page():
    return ATACSPage.from_bytes(build_page())


def test_swap_byte_order():
    assert swap_byte_order(RAW_SERIAL) == SERIAL.encode()


def test_swap_byte_order_is_its_own_inverse():
    data = b"abcdefgh"
    assert swap_byte_order(swap_byte_order(data)) == data


def test_swap_byte_order_rejects_odd_length():
    with pytest.raises(ValueError):
        swap_byte_order(b"abc")


def test_get_serial_number(page):
    assert page.serial_number() == SERIAL


def test_get_wwn(page):
    assert page.wwn() == "5 123456 789abcdef"


def test_get_sector_size(page):
    assert page.sector_sizes() == (512, 4096)


def test_sector_size_without_valid_marker():
    page = ATACSPage.from_bytes(build_page(sector=0x8003))
    assert page.sector_sizes() == (512, 512)


def test_sector_size_without_multiple_flag():
    page = ATACSPage.from_bytes(build_page(sector=0x4003))
    assert page.sector_sizes() == (512, 512)


def test_get_ata_major_version(page):
    assert page.ata_major_version() == "ACS-3"


@pytest.mark.parametrize("value", [0, 0xFFFF])
def test_major_version_not_reported(value):
    page = ATACSPage.from_bytes(build_page(major=value))
    assert page.ata_major_version() == "This device does not report ATA major version"


def test_major_version_unknown():
    page = ATACSPage.from_bytes(build_page(major=0x1000))
    assert page.ata_major_version() == "unknown"


def test_get_ata_minor_version(page):
    assert page.ata_minor_version() == "ACS-3 revision 5"


@pytest.mark.parametrize("value", [0, 0xFFFF])
def test_minor_version_not_reported(value):
    page = ATACSPage.from_bytes(build_page(minor=value))
    assert page.ata_minor_version() == "This device does not report ATA minor version"


def test_minor_version_unknown():
    page = ATACSPage.from_bytes(build_page(minor=0x0020))
    assert page.ata_minor_version() == "unknown"


def test_ata_transport(page):
    assert page.transport() == "Serial ATA SATA 3.1"


def test_identify_serial_ata_type(page):
    assert page.serial_ata_type() == "Serial ATA SATA 3.1"


def test_serial_ata_type_unknown_bit():
    page = ATACSPage.from_bytes(build_page(transport=0x1100))
    assert page.serial_ata_type() == "Serial ATA SATA (0x100)"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, "This device does not report Transport"),
        (0xFFFF, "This device does not report Transport"),
        (0x0123, "Parallel ATA"),
        (0xE123, "PCIe (0x123)"),
        (0x5001, "Unknown (0x5001)"),
    ],
)
def test_transport_kinds(value, expected):
    page = ATACSPage.from_bytes(build_page(transport=value))
    assert page.transport() == expected


def test_rotation_rate_is_decoded(page):
    assert page.rotation_rate == 0x1518


def test_from_bytes_rejects_short_page():
    with pytest.raises(ValueError):
        ATACSPage.from_bytes(bytes(100))