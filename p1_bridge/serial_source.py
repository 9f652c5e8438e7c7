"""Serial line source for the P1 port, built on pyserial."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import serial

from .decoder import MAX_LINE_LENGTH

logger = logging.getLogger(__name__)

PARITIES = {
    "N": serial.PARITY_NONE,
    "E": serial.PARITY_EVEN,
    "O": serial.PARITY_ODD,
}


class SerialLineSource:
    """
    Blocking reader returning one P1 telegram line per call.

    DSMR 4.x/5.x meters talk 115200 8N1. Telegrams must carry a CRC16.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 115200,
        bytesize: int = 8,
        parity: str = "N",
        stopbits: int = 1,
        timeout: float = 12.0,
        max_line_length: int = MAX_LINE_LENGTH,
    ):
        if parity not in PARITIES:
            raise ValueError(f"Unsupported parity {parity!r}, expected one of {sorted(PARITIES)}")
        self.port = port
        self.baudrate = baudrate
        self.bytesize = bytesize
        self.parity = parity
        self.stopbits = stopbits
        self.timeout = timeout
        self.max_line_length = max_line_length
        self._serial: Optional[serial.Serial] = None

    @property
    def is_open(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def open(self) -> None:
        if self.is_open:
            return
        self._serial = serial.Serial(
            port=self.port,
            baudrate=self.baudrate,
            bytesize=self.bytesize,
            parity=PARITIES[self.parity],
            stopbits=self.stopbits,
            timeout=self.timeout,
            xonxoff=False,
            rtscts=False,
        )
        logger.info(
            "Opened %s at %d %d%s%d",
            self.port,
            self.baudrate,
            self.bytesize,
            self.parity,
            self.stopbits,
        )

    def close(self) -> None:
        if self._serial is not None:
            self._serial.close()
            self._serial = None
            logger.info("Closed %s", self.port)

    def __enter__(self) -> "SerialLineSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def readline(self) -> bytes:
        """
        Read one line including its terminator.

        Returns ``b""`` when the read timed out. A line longer than
        ``max_line_length`` comes back truncated to ``max_line_length + 1``
        bytes (so the decoder rejects it); the rest of it is skipped.

        Raises:
            RuntimeError: If the port is not open
            serial.SerialException: On I/O errors
        """
        if self._serial is None:
            raise RuntimeError("Serial port not open")

        limit = self.max_line_length + 1
        line = self._serial.readline(limit)
        if len(line) == limit and not line.endswith(b"\n"):
            logger.warning("Line exceeds %d bytes, skipping the remainder", self.max_line_length)
            while True:
                rest = self._serial.readline(limit)
                if not rest or rest.endswith(b"\n"):
                    break
        return line


class AsyncSerialLineSource:
    """
    Async wrapper around the blocking :class:`SerialLineSource`.

    Reads run in the default thread pool executor so the event loop keeps
    serving MQTT while waiting for the next line.
    """

    def __init__(self, source: SerialLineSource):
        self.source = source

    async def open(self) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.source.open)

    async def close(self) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.source.close)

    async def readline(self) -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.source.readline)
