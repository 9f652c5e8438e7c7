"""CRC16 helper used to validate P1 telegrams."""

from __future__ import annotations


def crc16(data: bytes, crc: int = 0x0000) -> int:
    """Compute the CRC16/ARC checksum (x^16 + x^15 + x^2 + 1, reflected polynomial).

    The P1 port transmits this value as four hex digits after the ``!``
    marker. It is computed from the leading ``/`` up to and including the
    ``!``. Pass the previous result as *crc* to continue a running checksum
    over consecutive chunks of a telegram.
    """

    crc &= 0xFFFF
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x0001:
                crc = (crc >> 1) ^ 0xA001
            else:
                crc >>= 1
    return crc
