"""Sample DSMR telegrams for the tests.

Checksums are computed with a table driven CRC16/ARC, independent from the
bitwise implementation under test.
"""

from typing import List, Sequence


def _make_table() -> List[int]:
    table = []
    for index in range(256):
        crc = index
        for _ in range(8):
            crc = (crc >> 1) ^ 0xA001 if crc & 1 else crc >> 1
        table.append(crc)
    return table


_TABLE = _make_table()


def reference_crc16(data: bytes) -> int:
    crc = 0
    for byte in data:
        crc = (crc >> 8) ^ _TABLE[(crc ^ byte) & 0xFF]
    return crc


HEADER = b"/KFM5KAIFA-METER"

BODY = (
    b"1-3:0.2.8(42)",
    b"0-0:1.0.0(161113205757W)",
    b"0-0:96.1.1(3960221976967177082151037881335713)",
    b"1-0:1.8.1(001581.123*kWh)",
    b"1-0:1.8.2(001435.706*kWh)",
    b"1-0:2.8.1(000000.000*kWh)",
    b"1-0:2.8.2(000012.345*kWh)",
    b"0-0:96.14.0(0002)",
    b"1-0:1.7.0(02.027*kW)",
    b"1-0:2.7.0(00.000*kW)",
    b"0-0:96.7.21(00015)",
    b"0-0:96.7.9(00007)",
    b"1-0:99.97.0(1)(0-0:96.7.19)(000104180320W)(0000237126*s)",
    b"1-0:32.32.0(00000)",
    b"0-0:96.13.0()",
    b"1-0:31.7.0(007*A)",
    b"1-0:21.7.0(00.536*kW)",
    b"1-0:41.7.0(00.891*kW)",
    b"1-0:61.7.0(00.600*kW)",
    b"1-0:22.7.0(00.000*kW)",
    b"1-0:42.7.0(00.000*kW)",
    b"1-0:62.7.0(00.000*kW)",
    b"0-1:24.1.0(003)",
    b"0-1:96.1.0(3232323241424344313233343536373839)",
    b"0-1:24.2.1(161129200000W)(00981.443*m3)",
)


def build_telegram(body: Sequence[bytes] = BODY, header: bytes = HEADER) -> List[bytes]:
    """Return the CRLF terminated lines of a telegram with a valid checksum."""

    lines = [header + b"\r\n", b"\r\n"]
    lines.extend(line + b"\r\n" for line in body)
    crc = reference_crc16(b"".join(lines) + b"!")
    lines.append(b"!%04X\r\n" % crc)
    return lines
