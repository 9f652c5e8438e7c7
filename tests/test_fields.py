import unittest

from p1_bridge.fields import extract_number, extract_text, is_number


class ExtractNumberTest(unittest.TestCase):
    def test_energy_is_scaled_to_wh(self) -> None:
        self.assertEqual(extract_number(b"1-0:1.8.1(000992.992*kWh)\r\n"), 992992)

    def test_line_without_terminator(self) -> None:
        self.assertEqual(extract_number(b"1-0:1.8.1(000992.992*kWh)"), 992992)

    def test_unitless_value_unscaled(self) -> None:
        self.assertEqual(extract_number(b"1-3:0.2.8(42)\r\n", scale=False), 42)
        self.assertEqual(extract_number(b"0-0:96.14.0(0002)\r\n", scale=False), 2)

    def test_power_is_scaled_to_w(self) -> None:
        self.assertEqual(extract_number(b"1-0:21.7.0(00.536*kW)\r\n"), 536)

    def test_gas_total_uses_last_bracket(self) -> None:
        line = b"0-1:24.2.1(150531200000S)(00811.923*m3)\r\n"
        self.assertEqual(extract_number(line), 811923)

    def test_no_float_rounding(self) -> None:
        self.assertEqual(extract_number(b"1-0:1.8.2(000000.001*kWh)\r\n"), 1)
        self.assertEqual(extract_number(b"1-0:1.8.2(004096.290*kWh)\r\n"), 4096290)

    def test_token_length_bounds(self) -> None:
        self.assertIsNone(extract_number(b"1-0:1.7.0()\r\n"))
        self.assertIsNone(extract_number(b"1-0:1.7.0(*kW)\r\n"))
        self.assertIsNone(extract_number(b"1-0:1.8.1(123456789.123*kWh)\r\n"))
        self.assertEqual(extract_number(b"1-0:1.8.1(5*kWh)\r\n"), 5000)
        self.assertEqual(extract_number(b"1-0:1.8.1(12345678.123*kWh)\r\n"), 12345678123)

    def test_bracket_position_window(self) -> None:
        self.assertIsNone(extract_number(b"1234567(7)\r\n", scale=False))
        self.assertEqual(extract_number(b"12345678(7)\r\n", scale=False), 7)
        self.assertEqual(extract_number(b"x" * 32 + b"(7)\r\n", scale=False), 7)
        self.assertIsNone(extract_number(b"x" * 33 + b"(7)\r\n", scale=False))

    def test_missing_brackets(self) -> None:
        self.assertIsNone(extract_number(b"1-0:1.8.1 000992.992\r\n"))
        self.assertIsNone(extract_number(b"1-0:1.8.1(000992.992\r\n"))
        self.assertIsNone(extract_number(b""))

    def test_rejects_non_numeric_content(self) -> None:
        self.assertIsNone(extract_number(b"1-0:1.8.1(0009a2.992*kWh)\r\n"))
        self.assertIsNone(extract_number(b"1-0:1.8.1(00.99.2*kWh)\r\n"))
        self.assertIsNone(extract_number(b"1-0:1.8.1(-00992.99*kWh)\r\n"))
        self.assertIsNone(extract_number(b"1-0:1.8.1(.*kWh)\r\n"))

    def test_explicit_length_limits_search(self) -> None:
        line = b"1-0:1.8.1(000992.992*kWh)\r\n"
        self.assertIsNone(extract_number(line, 12))
        self.assertEqual(extract_number(line, len(line)), 992992)
        self.assertEqual(extract_number(line, 1000), 992992)


class ExtractTextTest(unittest.TestCase):
    def test_timestamp_from_end(self) -> None:
        self.assertEqual(extract_text(b"0-0:1.0.0(101209113020W)\r\n"), "101209113020W")

    def test_gas_timestamp_from_start(self) -> None:
        line = b"0-1:24.2.1(150531200000S)(00811.923*m3)\r\n"
        self.assertEqual(extract_text(line, from_start=True), "150531200000S")
        self.assertEqual(extract_text(line), "00811.923*m3")

    def test_text_length_bounds(self) -> None:
        self.assertIsNone(extract_text(b"0-0:96.13.0()\r\n"))
        self.assertEqual(extract_text(b"0-0:96.13.0(" + b"A" * 31 + b")\r\n"), "A" * 31)
        self.assertIsNone(extract_text(b"0-0:96.13.0(" + b"A" * 32 + b")\r\n"))

    def test_bracket_windows(self) -> None:
        self.assertIsNone(extract_text(b"0-0:1.0(101209113020W)\r\n"))
        self.assertEqual(extract_text(b"x" * 39 + b"(W)\r\n"), "W")
        self.assertIsNone(extract_text(b"x" * 40 + b"(W)\r\n"))
        self.assertEqual(extract_text(b"x" * 12 + b"(W)(1)\r\n", from_start=True), "W")
        self.assertIsNone(extract_text(b"x" * 13 + b"(W)(1)\r\n", from_start=True))

    def test_unterminated_text(self) -> None:
        self.assertIsNone(extract_text(b"0-0:1.0.0(101209113020W\r\n"))
        self.assertIsNone(extract_text(b"0-1:24.2.1(150531200000S\r\n", from_start=True))

    def test_non_ascii_text(self) -> None:
        self.assertIsNone(extract_text(b"0-0:1.0.0(10120\xff113020W)\r\n"))


class IsNumberTest(unittest.TestCase):
    def test_is_number(self) -> None:
        self.assertTrue(is_number(b"0123"))
        self.assertTrue(is_number(b"01.23"))
        self.assertFalse(is_number(b"1.2.3"))
        self.assertFalse(is_number(b"12a"))
        self.assertFalse(is_number(b""))
        self.assertFalse(is_number(b"."))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
