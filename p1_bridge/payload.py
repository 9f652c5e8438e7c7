"""Build the MQTT payload published for a meter reading."""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

from .reading import MeterReading


def _phase(reading: MeterReading, phase: int) -> Dict[str, int]:
    return {
        "consumption": getattr(reading, f"power_consumption_l{phase}"),
        "return": getattr(reading, f"power_return_l{phase}"),
    }


def build_payload(
    reading: MeterReading,
    device_id: str,
    seq: int,
    ts: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Serialize a reading into the nested document sent to the broker.

    Energy is in Wh, power in W and gas in dm3 (1/1000 m3), all integers.

    Args:
        reading: Snapshot taken after a telegram validated
        device_id: Device identifier included in the payload
        seq: Sequence number of the publication
        ts: Timestamp in milliseconds (default: now)
    """
    return {
        "device_id": device_id,
        "ts": ts if ts is not None else int(time.time() * 1000),
        "seq": seq,
        "version": reading.dsmr_version,
        "tariff": reading.power_tariff,
        "electricity": {
            "timestamp": reading.power_timestamp,
            "consumption_low": reading.consumption_low,
            "consumption_high": reading.consumption_high,
            "return_low": reading.return_low,
            "return_high": reading.return_high,
            "power": {
                "consumption": reading.power_consumption,
                "return": reading.power_return,
                "l1": _phase(reading, 1),
                "l2": _phase(reading, 2),
                "l3": _phase(reading, 3),
            },
        },
        "gas": {
            "timestamp": reading.gas_timestamp,
            "total": reading.gas_total,
        },
    }
