import pytest

from ndsbanner.crc import crc16


def test_empty_input_returns_initial_value():
    assert crc16(b"") == 0xFFFF


def test_standard_check_value():
    assert crc16(b"123456789") == 0x4B37


@pytest.mark.parametrize(
    "payload",
    [b"\x00", b"banner", bytes(range(256)), b"\xff" * 0x820],
)
def test_appending_crc_little_endian_gives_zero_residue(payload):
    checksum = crc16(payload)
    assert crc16(payload + checksum.to_bytes(2, "little")) == 0


def test_accepts_bytearray_and_memoryview():
    payload = b"nintendo ds"
    expected = crc16(payload)
    assert crc16(bytearray(payload)) == expected
    assert crc16(memoryview(payload)) == expected


def test_result_fits_in_sixteen_bits():
    for size in (1, 7, 64, 1000):
        assert 0 <= crc16(bytes(range(size % 256)) * 3) <= 0xFFFF


def test_single_bit_change_alters_checksum():
    data = bytearray(0x40)
    before = crc16(data)
    data[10] ^= 0x01
    assert crc16(data) != before
    assert crc16(bytes(0x40)) == before