"""Line based decoder for DSMR P1 telegrams.

A telegram looks like::

    /KFM5KAIFA-METER

    1-3:0.2.8(42)
    0-0:1.0.0(161113205757W)
    1-0:1.8.1(001581.123*kWh)
    ...
    0-1:24.2.1(161129200000W)(00981.443*m3)
    !XXXX

The CRC16 after ``!`` covers every byte from ``/`` up to and including the
``!``. Lines are fed one at a time to :meth:`TelegramDecoder.decode_line`,
which keeps the running checksum and updates the :class:`MeterReading` as
OBIS lines go by.
"""

from __future__ import annotations

import logging
import string
from enum import Enum
from typing import Iterable, Optional, Set

from .crc16 import crc16
from .obis import OBIS_TABLE, ObisTable, lookup
from .reading import MeterReading

logger = logging.getLogger(__name__)

# Longest normal line is 178 characters (+2 for \r\n).
MAX_LINE_LENGTH = 250

START_MARKER = b"/"
END_MARKER = b"!"
CHECKSUM_DIGITS = 4

_HEX_DIGITS = frozenset(string.hexdigits.encode("ascii"))


class DecoderState(Enum):
    AWAITING_START = "awaiting_start"
    IN_TELEGRAM = "in_telegram"


class TelegramDecoder:
    """
    Stateful P1 telegram decoder.

    Owns the meter reading and the running checksum. Only the line carrying
    the ``!`` marker of a telegram whose checksum matches makes
    :meth:`decode_line` return ``True``.
    """

    def __init__(
        self,
        reading: Optional[MeterReading] = None,
        max_line_length: int = MAX_LINE_LENGTH,
        table: ObisTable = OBIS_TABLE,
    ):
        """
        Initialize the decoder.

        Args:
            reading: Record to update (a new empty one by default)
            max_line_length: Longest accepted line, terminator included
            table: OBIS table used to dispatch lines to reading fields
        """
        if max_line_length < 1:
            raise ValueError("max_line_length must be positive")
        self.reading = reading if reading is not None else MeterReading()
        self.max_line_length = max_line_length
        self.table = table

        self._crc = 0x0000
        self._state = DecoderState.AWAITING_START
        self.updated_fields: Set[str] = set()

        self.telegrams_valid = 0
        self.telegrams_invalid = 0
        self.lines_rejected = 0

    @property
    def crc(self) -> int:
        return self._crc

    @property
    def state(self) -> DecoderState:
        return self._state

    def reset(self) -> None:
        """Drop the telegram in progress; the reading is kept."""
        self._crc = 0x0000
        self._state = DecoderState.AWAITING_START
        self.updated_fields.clear()

    def decode_line(self, line: bytes) -> bool:
        """
        Decode one telegram line, terminator included.

        Returns:
            True if this line closed a telegram with a valid checksum
        """
        if len(line) > self.max_line_length:
            self.lines_rejected += 1
            logger.warning(
                "Rejected %d byte line (limit %d), dropping current telegram",
                len(line),
                self.max_line_length,
            )
            self.reset()
            return False

        start = line.rfind(START_MARKER)
        if start >= 0:
            if self._state is DecoderState.IN_TELEGRAM:
                logger.debug("Start marker inside telegram, restarting checksum")
            self._crc = crc16(line[start:])
            self._state = DecoderState.IN_TELEGRAM
            self.updated_fields.clear()
            logger.debug("Telegram start: %r", line)
            return False

        end = line.rfind(END_MARKER)
        if end >= 0:
            return self._close_telegram(line, end)

        self._crc = crc16(line, self._crc)
        logger.debug("Telegram line: %r", line)
        self._update_reading(line)
        return False

    def decode_lines(self, lines: Iterable[bytes]) -> bool:
        """Decode a batch of lines; True if any of them closed a valid telegram."""
        valid = False
        for line in lines:
            if self.decode_line(line):
                valid = True
        return valid

    def _close_telegram(self, line: bytes, end: int) -> bool:
        in_telegram = self._state is DecoderState.IN_TELEGRAM
        crc = crc16(line[end:end + 1], self._crc)
        digits = line[end + 1:end + 1 + CHECKSUM_DIGITS]

        self._crc = 0x0000
        self._state = DecoderState.AWAITING_START

        if not in_telegram:
            logger.warning("Checksum line without telegram start: %r", line)
            valid = False
        elif len(digits) != CHECKSUM_DIGITS or not _HEX_DIGITS.issuperset(digits):
            logger.warning("Malformed checksum in %r", line)
            valid = False
        else:
            expected = int(digits, 16)
            valid = expected == crc
            if valid:
                logger.info("Valid CRC found (%04X)", crc)
            else:
                logger.warning("Invalid CRC: telegram says %04X, computed %04X", expected, crc)

        if valid:
            self.telegrams_valid += 1
        else:
            self.telegrams_invalid += 1
        return valid

    def _update_reading(self, line: bytes) -> None:
        for entry in lookup(line, self.table):
            value = entry.kind.extract(line, len(line))
            if value is None:
                continue
            setattr(self.reading, entry.field, value)
            self.updated_fields.add(entry.field)
