"""Meter reading record filled in by the telegram decoder."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Tuple


@dataclass
class MeterReading:
    """Most recent value of every field decoded from the P1 port.

    Energy totals are in Wh, instantaneous power in W and the gas total in
    1/1000 m3. A field keeps its value until a later telegram carries a valid
    replacement; nothing is reset between telegrams.
    """

    dsmr_version: int = 0
    power_timestamp: str = ""
    power_tariff: int = 0

    # Cumulative energy (Wh)
    consumption_low: int = 0
    consumption_high: int = 0
    return_low: int = 0
    return_high: int = 0

    # Instantaneous power (W)
    power_consumption: int = 0
    power_return: int = 0
    power_consumption_l1: int = 0
    power_consumption_l2: int = 0
    power_consumption_l3: int = 0
    power_return_l1: int = 0
    power_return_l2: int = 0
    power_return_l3: int = 0

    gas_timestamp: str = ""
    gas_total: int = 0

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def snapshot(self) -> "MeterReading":
        """Return an independent copy, safe to hand to the publisher."""
        return replace(self)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)
