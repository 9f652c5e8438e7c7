"""Main entry point for the P1-MQTT bridge application."""

import asyncio
import logging
import signal
import sys

from .config import settings
from .controller import Controller

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure root logging from LOG_LEVEL (DEBUG when VERBOSE is set)."""
    level = logging.DEBUG if settings.VERBOSE else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def main():
    """
    Main application entry point.

    Creates and starts the controller, then runs until interrupted
    by Ctrl+C or system signal.
    """
    logger.info("=" * 60)
    logger.info("DSMR P1 to MQTT Bridge")
    logger.info("=" * 60)
    logger.info("Device ID: %s", settings.DEVICE_ID)
    logger.info(
        "P1 port: %s (%d %d%s%d)",
        settings.SERIAL_PORT,
        settings.SERIAL_BAUDRATE,
        settings.SERIAL_BYTESIZE,
        settings.SERIAL_PARITY,
        settings.SERIAL_STOPBITS,
    )
    logger.info("MQTT Broker: %s:%s", settings.MQTT_HOST, settings.MQTT_PORT)
    logger.info("MQTT Topic: %s", settings.topic)

    ctrl = Controller()
    shutdown_event = asyncio.Event()

    def signal_handler():
        """Handle shutdown signals."""
        logger.info("Shutdown signal received")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await ctrl.start()

        # Wait for a shutdown signal or for the controller to give up
        stop_wait = asyncio.create_task(shutdown_event.wait())
        await asyncio.wait([stop_wait, ctrl.task], return_when=asyncio.FIRST_COMPLETED)
        stop_wait.cancel()
        await asyncio.gather(stop_wait, return_exceptions=True)

    finally:
        await ctrl.stop()
        logger.info("Goodbye!")

    # The controller only stops by itself after too many errors
    return 0 if shutdown_event.is_set() else 1


def run():
    """Entry point wrapper for running the async main function."""
    setup_logging()
    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(0)


if __name__ == "__main__":
    run()
