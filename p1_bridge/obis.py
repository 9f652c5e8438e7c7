"""OBIS codes decoded from DSMR telegrams and the reading field each one sets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple, Union

from .fields import extract_number, extract_text
from .reading import MeterReading


class ExtractKind(Enum):
    """How the value of an OBIS line is read."""

    SCALED = "scaled"  # decimal value x1000 (kWh -> Wh, kW -> W, m3 -> dm3)
    NUMBER = "number"  # integer value as-is
    TEXT = "text"  # text in the last bracket pair
    TEXT_FIRST = "text_first"  # text in the first bracket pair

    def extract(self, line: bytes, length: Optional[int] = None) -> Union[int, str, None]:
        if self is ExtractKind.SCALED:
            return extract_number(line, length, scale=True)
        if self is ExtractKind.NUMBER:
            return extract_number(line, length, scale=False)
        if self is ExtractKind.TEXT:
            return extract_text(line, length)
        return extract_text(line, length, from_start=True)


@dataclass(frozen=True)
class ObisField:
    obis: str
    field: str
    kind: ExtractKind
    description: str

    @property
    def prefix(self) -> bytes:
        return self.obis.encode("ascii")


ObisTable = Dict[bytes, Tuple[ObisField, ...]]

OBIS_FIELDS: Tuple[ObisField, ...] = (
    ObisField("1-3:0.2.8", "dsmr_version", ExtractKind.NUMBER, "DSMR version"),
    ObisField("0-0:1.0.0", "power_timestamp", ExtractKind.TEXT, "Telegram timestamp"),
    ObisField("1-0:1.8.1", "consumption_low", ExtractKind.SCALED, "Electricity consumption low tariff"),
    ObisField("1-0:1.8.2", "consumption_high", ExtractKind.SCALED, "Electricity consumption high tariff"),
    ObisField("1-0:2.8.1", "return_low", ExtractKind.SCALED, "Electricity return low tariff"),
    ObisField("1-0:2.8.2", "return_high", ExtractKind.SCALED, "Electricity return high tariff"),
    ObisField("0-0:96.14.0", "power_tariff", ExtractKind.NUMBER, "Active tariff indicator"),
    ObisField("1-0:1.7.0", "power_consumption", ExtractKind.SCALED, "Actual power consumption"),
    ObisField("1-0:2.7.0", "power_return", ExtractKind.SCALED, "Actual power return"),
    ObisField("1-0:21.7.0", "power_consumption_l1", ExtractKind.SCALED, "Phase L1 power consumption"),
    ObisField("1-0:41.7.0", "power_consumption_l2", ExtractKind.SCALED, "Phase L2 power consumption"),
    ObisField("1-0:61.7.0", "power_consumption_l3", ExtractKind.SCALED, "Phase L3 power consumption"),
    ObisField("1-0:22.7.0", "power_return_l1", ExtractKind.SCALED, "Phase L1 power return"),
    ObisField("1-0:42.7.0", "power_return_l2", ExtractKind.SCALED, "Phase L2 power return"),
    ObisField("1-0:62.7.0", "power_return_l3", ExtractKind.SCALED, "Phase L3 power return"),
    # The gas line carries the capture time first and the meter total last.
    ObisField("0-1:24.2.1", "gas_timestamp", ExtractKind.TEXT_FIRST, "Gas capture timestamp"),
    ObisField("0-1:24.2.1", "gas_total", ExtractKind.SCALED, "Gas meter reading"),
)


def build_table(entries: Iterable[ObisField]) -> ObisTable:
    """Group *entries* by prefix, keeping table order.

    Raises:
        ValueError: If a prefix is a strict prefix of another one (a line could
            then match two codes) or an entry names an unknown reading field.
    """

    known_fields = set(MeterReading.field_names())
    table: ObisTable = {}
    for entry in entries:
        if entry.field not in known_fields:
            raise ValueError(f"OBIS {entry.obis} targets unknown field {entry.field!r}")
        table[entry.prefix] = table.get(entry.prefix, ()) + (entry,)

    prefixes = list(table)
    for prefix in prefixes:
        for other in prefixes:
            if other != prefix and other.startswith(prefix):
                raise ValueError(
                    f"OBIS prefix {prefix.decode()} overlaps {other.decode()}"
                )
    return table


OBIS_TABLE = build_table(OBIS_FIELDS)


def lookup(line: bytes, table: ObisTable = OBIS_TABLE) -> Tuple[ObisField, ...]:
    """Return the entries whose OBIS prefix starts *line* (empty if none)."""

    for prefix, entries in table.items():
        if line.startswith(prefix):
            return entries
    return ()
