"""Main controller that orchestrates P1 telegram decoding and MQTT publishing."""

import asyncio
import logging
from typing import Any, Callable

from aiomqtt import MqttError

from .config import Settings, settings
from .decoder import TelegramDecoder
from .mqtt_transport import MQTTTransport
from .payload import build_payload
from .serial_source import AsyncSerialLineSource, SerialLineSource

logger = logging.getLogger(__name__)

# Extra time stop() allows on top of one serial read timeout
STOP_GRACE_S = 2.0


class Controller:
    """
    Main controller for the P1-MQTT bridge.

    Reads telegram lines from the P1 port, feeds them to the decoder and
    publishes a snapshot of the reading each time a telegram closes with a
    valid checksum. Serial and MQTT failures are retried with exponential
    backoff.
    """

    def __init__(
        self,
        config: Settings = settings,
        source: Any = None,
        transport_factory: Callable[[], Any] | None = None,
        decoder: TelegramDecoder | None = None,
    ):
        """
        Initialize the controller.

        Args:
            config: Settings to use (module settings by default)
            source: Async line source (serial port from config by default)
            transport_factory: Returns an async context manager with
                ``publish_json`` (MQTT transport from config by default)
            decoder: Telegram decoder (a fresh one by default)
        """
        self.config = config
        self.source = source or AsyncSerialLineSource(
            SerialLineSource(
                port=config.SERIAL_PORT,
                baudrate=config.SERIAL_BAUDRATE,
                bytesize=config.SERIAL_BYTESIZE,
                parity=config.SERIAL_PARITY,
                stopbits=config.SERIAL_STOPBITS,
                timeout=config.SERIAL_TIMEOUT_S,
                max_line_length=config.MAX_LINE_LENGTH,
            )
        )
        self.transport_factory = transport_factory or self._create_transport
        self.decoder = decoder or TelegramDecoder(max_line_length=config.MAX_LINE_LENGTH)
        self.seq = 0
        self.error_streak = 0
        self._task: asyncio.Task | None = None
        self._running = asyncio.Event()

    def _create_transport(self) -> MQTTTransport:
        return MQTTTransport(
            host=self.config.MQTT_HOST,
            port=self.config.MQTT_PORT,
            client_id=self.config.MQTT_CLIENT_ID,
            username=self.config.MQTT_USERNAME,
            password=self.config.MQTT_PASSWORD,
            tls=self.config.MQTT_TLS,
            qos=self.config.MQTT_QOS,
            retain=self.config.MQTT_RETAIN,
        )

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    async def start(self):
        """Start the controller loop in a background task."""
        if self._task and not self._task.done():
            logger.info("Already running")
            return

        logger.info("Starting P1-MQTT bridge...")
        self._running.set()
        self._task = asyncio.create_task(self.run())

    @property
    def stop_timeout(self) -> float:
        return self.config.SERIAL_TIMEOUT_S + STOP_GRACE_S

    async def stop(self, timeout: float | None = None):
        """
        Stop the controller loop, cancelling it if it does not finish in time.

        By default waits for one pending serial read to time out, so a
        silent meter does not force a cancel.
        """
        if timeout is None:
            timeout = self.stop_timeout
        logger.info("Stopping...")
        self._running.clear()
        # Called from inside the loop (e.g. by the line source): nothing to wait for
        if self._task and self._task is not asyncio.current_task():
            done, _ = await asyncio.wait([self._task], timeout=timeout)
            if not done:
                self._task.cancel()
                await asyncio.gather(self._task, return_exceptions=True)
            elif not self._task.cancelled() and self._task.exception():
                logger.error("Controller failed: %r", self._task.exception())
        logger.info("Stopped")

    async def run(self):
        """
        Main loop.

        Keeps the serial port and MQTT connection open and processes lines
        until stopped, reconnecting both after an error.
        """
        # start() already set the flag; a stop() since then must win
        if self._task is None:
            self._running.set()
        self.error_streak = 0

        while self._running.is_set():
            try:
                async with self.transport_factory() as mqtt:
                    await self.source.open()
                    try:
                        await self._process_lines(mqtt)
                    finally:
                        await self.source.close()

            except (OSError, MqttError) as e:
                self.error_streak += 1
                logger.error("Error (%d/%d): %s", self.error_streak, self.config.MAX_CONSEC_ERRORS, e)

                if self.error_streak >= self.config.MAX_CONSEC_ERRORS:
                    logger.error("Too many consecutive errors, stopping...")
                    self._running.clear()
                    break

                # Exponential backoff (capped at 30 seconds)
                backoff_time = min(2 ** self.error_streak, 30)
                logger.info("Retrying in %ss...", backoff_time)
                await self._backoff(backoff_time)

    async def _backoff(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    async def _process_lines(self, mqtt) -> None:
        topic = self.config.topic
        while self._running.is_set():
            line = await self.source.readline()
            if not line:
                logger.warning("No data from P1 port within %ss", self.config.SERIAL_TIMEOUT_S)
                continue

            if not self.decoder.decode_line(line):
                continue

            # Read the reading only here, between decode calls.
            snapshot = self.decoder.reading.snapshot()
            logger.debug("Telegram refreshed: %s", ", ".join(sorted(self.decoder.updated_fields)))
            payload = build_payload(snapshot, self.config.DEVICE_ID, self.seq)
            await mqtt.publish_json(topic, payload)
            logger.info(
                "Published reading #%d to %s (telegrams valid=%d invalid=%d, lines rejected=%d)",
                self.seq,
                topic,
                self.decoder.telegrams_valid,
                self.decoder.telegrams_invalid,
                self.decoder.lines_rejected,
            )

            self.seq += 1
            self.error_streak = 0
