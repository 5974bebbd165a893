"""CRC-16 checksum used by Nintendo DS banner files."""

_POLYNOMIAL = 0xA001
_INITIAL = 0xFFFF


def crc16(data):
    """Return the reflected CRC-16 (poly 0xA001, init 0xFFFF) of ``data``."""
    crc = _INITIAL
    for byte in bytes(data):
        crc ^= byte
        for _ in range(8):
            crc = (crc >> 1) ^ (_POLYNOMIAL if crc & 1 else 0)
    return crc