"""
DSMR P1 to MQTT bridge.

Decodes the telegrams a Dutch smart meter sends on its P1 port, validates
their CRC16 and publishes the meter reading to an MQTT broker.
"""

from .crc16 import crc16
from .decoder import DecoderState, TelegramDecoder
from .reading import MeterReading

__version__ = "0.1.0"

__all__ = ["crc16", "DecoderState", "MeterReading", "TelegramDecoder", "__version__"]
