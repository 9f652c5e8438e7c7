import json
import unittest

from p1_bridge.payload import build_payload
from p1_bridge.reading import MeterReading


class MeterReadingTest(unittest.TestCase):
    def test_defaults(self) -> None:
        reading = MeterReading()
        self.assertEqual(reading.consumption_low, 0)
        self.assertEqual(reading.power_timestamp, "")

    def test_snapshot_is_independent(self) -> None:
        reading = MeterReading(gas_total=811923)
        snapshot = reading.snapshot()
        reading.gas_total = 1
        self.assertEqual(snapshot.gas_total, 811923)
        self.assertIsNot(snapshot, reading)

    def test_as_dict(self) -> None:
        data = MeterReading(power_tariff=2).as_dict()
        self.assertEqual(data["power_tariff"], 2)
        self.assertEqual(set(data), set(MeterReading.field_names()))


class BuildPayloadTest(unittest.TestCase):
    def test_nested_document(self) -> None:
        reading = MeterReading(
            dsmr_version=42,
            power_timestamp="161113205757W",
            power_tariff=2,
            consumption_low=1581123,
            consumption_high=1435706,
            return_high=12345,
            power_consumption=2027,
            power_consumption_l1=536,
            power_return_l3=75,
            gas_timestamp="161129200000W",
            gas_total=981443,
        )
        payload = build_payload(reading, "dsmr4", 7, ts=1700000000000)

        self.assertEqual(payload["device_id"], "dsmr4")
        self.assertEqual(payload["ts"], 1700000000000)
        self.assertEqual(payload["seq"], 7)
        self.assertEqual(payload["version"], 42)
        self.assertEqual(payload["tariff"], 2)
        electricity = payload["electricity"]
        self.assertEqual(electricity["timestamp"], "161113205757W")
        self.assertEqual(electricity["consumption_low"], 1581123)
        self.assertEqual(electricity["consumption_high"], 1435706)
        self.assertEqual(electricity["return_low"], 0)
        self.assertEqual(electricity["return_high"], 12345)
        self.assertEqual(electricity["power"]["consumption"], 2027)
        self.assertEqual(electricity["power"]["l1"], {"consumption": 536, "return": 0})
        self.assertEqual(electricity["power"]["l3"], {"consumption": 0, "return": 75})
        self.assertEqual(payload["gas"], {"timestamp": "161129200000W", "total": 981443})

    def test_serializable_and_timestamped(self) -> None:
        payload = build_payload(MeterReading(), "dsmr4", 0)
        self.assertIsInstance(payload["ts"], int)
        self.assertGreater(payload["ts"], 0)
        json.loads(json.dumps(payload))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
