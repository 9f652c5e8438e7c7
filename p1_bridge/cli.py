"""Command line reader that decodes P1 telegrams and prints the values.

Reads from the serial port, or from a file holding a captured telegram, and
prints every field of the reading once a telegram closes with a valid
checksum. Useful to check cabling and serial settings before running the
bridge.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Iterable, Iterator, List, Optional

import serial

from .decoder import MAX_LINE_LENGTH, TelegramDecoder
from .obis import OBIS_FIELDS
from .payload import build_payload
from .serial_source import PARITIES, SerialLineSource

logger = logging.getLogger(__name__)

UNITS = {
    "consumption_low": "Wh",
    "consumption_high": "Wh",
    "return_low": "Wh",
    "return_high": "Wh",
    "gas_total": "dm3",
}


def _unit(field: str) -> str:
    if field in UNITS:
        return UNITS[field]
    if field.startswith("power_consumption") or field.startswith("power_return"):
        return "W"
    return ""


def _parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Decode DSMR P1 telegrams from a smart meter",
    )
    parser.add_argument("--port", default="/dev/ttyUSB0", help="Serial port (default: /dev/ttyUSB0)")
    parser.add_argument(
        "--file",
        help="Decode a captured telegram from this file instead of the serial port",
    )
    parser.add_argument("--baudrate", type=int, default=115200, help="Baud rate (default: 115200)")
    parser.add_argument("--bytesize", type=int, choices=(7, 8), default=8, help="Data bits (default: 8)")
    parser.add_argument(
        "--parity",
        choices=sorted(PARITIES),
        default="N",
        help="Parity (default: N)",
    )
    parser.add_argument("--stopbits", type=int, choices=(1, 2), default=1, help="Stop bits (default: 1)")
    parser.add_argument("--timeout", type=float, default=12.0, help="Serial read timeout seconds")
    parser.add_argument(
        "--count",
        type=int,
        default=1,
        help="Number of valid telegrams to read from the serial port (default: 1)",
    )
    parser.add_argument("--json", action="store_true", help="Print the MQTT payload as JSON")
    parser.add_argument("--device-id", default="dsmr4", help="Device id used in the JSON payload")
    parser.add_argument("--verbose", action="store_true", help="Log every telegram line")
    return parser.parse_args(argv)


def _serial_lines(source: SerialLineSource) -> Iterator[bytes]:
    while True:
        line = source.readline()
        if not line:
            raise TimeoutError(f"No data from {source.port} within {source.timeout}s")
        yield line


def _file_lines(path: str) -> Iterator[bytes]:
    with open(path, "rb") as handle:
        yield from handle


def _print_reading(decoder: TelegramDecoder, args: argparse.Namespace, seq: int) -> None:
    reading = decoder.reading.snapshot()
    if args.json:
        print(json.dumps(build_payload(reading, args.device_id, seq), indent=2))
        return
    for entry in OBIS_FIELDS:
        value = getattr(reading, entry.field)
        print(f"{entry.description} ({entry.obis}): {value} {_unit(entry.field)}".rstrip())


def decode(lines: Iterable[bytes], decoder: TelegramDecoder, args: argparse.Namespace) -> int:
    """Decode *lines*, printing each valid telegram; return how many were valid."""
    valid = 0
    for line in lines:
        if decoder.decode_line(line):
            _print_reading(decoder, args, valid)
            valid += 1
            if valid >= args.count:
                break
    return valid


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    decoder = TelegramDecoder(max_line_length=MAX_LINE_LENGTH)
    try:
        if args.file:
            # A capture holds what it holds; do not stop at --count.
            args.count = sys.maxsize
            valid = decode(_file_lines(args.file), decoder, args)
        else:
            with SerialLineSource(
                port=args.port,
                baudrate=args.baudrate,
                bytesize=args.bytesize,
                parity=args.parity,
                stopbits=args.stopbits,
                timeout=args.timeout,
            ) as source:
                valid = decode(_serial_lines(source), decoder, args)
    except (OSError, serial.SerialException) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not valid:
        print(
            f"Error: no telegram with a valid checksum "
            f"({decoder.telegrams_invalid} invalid)",
            file=sys.stderr,
        )
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
