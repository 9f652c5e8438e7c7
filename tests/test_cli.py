import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from p1_bridge.cli import _parse_args, main

from tests.telegrams import build_telegram


class CliParsingTest(unittest.TestCase):
    def test_defaults(self) -> None:
        args = _parse_args([])
        self.assertEqual(args.port, "/dev/ttyUSB0")
        self.assertEqual((args.baudrate, args.bytesize, args.parity, args.stopbits), (115200, 8, "N", 1))
        self.assertEqual(args.count, 1)


class CliFileTest(unittest.TestCase):
    def write_capture(self, lines) -> str:
        handle = tempfile.NamedTemporaryFile(suffix=".txt", delete=False)
        with handle:
            handle.write(b"".join(lines))
        self.addCleanup(os.unlink, handle.name)
        return handle.name

    def run_main(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_prints_fields(self) -> None:
        path = self.write_capture(build_telegram())
        code, out, _ = self.run_main(["--file", path])
        self.assertEqual(code, 0)
        self.assertIn("Electricity consumption low tariff (1-0:1.8.1): 1581123 Wh", out)
        self.assertIn("Gas meter reading (0-1:24.2.1): 981443 dm3", out)
        self.assertIn("DSMR version (1-3:0.2.8): 42", out)

    def test_json_output(self) -> None:
        path = self.write_capture(build_telegram())
        code, out, _ = self.run_main(["--file", path, "--json", "--device-id", "meter-1"])
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(payload["device_id"], "meter-1")
        self.assertEqual(payload["gas"]["timestamp"], "161129200000W")

    def test_invalid_checksum(self) -> None:
        lines = build_telegram()
        lines[-1] = b"!%04X\r\n" % (int(lines[-1][1:5], 16) ^ 0xFFFF)
        path = self.write_capture(lines)
        code, out, err = self.run_main(["--file", path])
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("1 invalid", err)

    def test_missing_file(self) -> None:
        code, _, err = self.run_main(["--file", "/nonexistent/telegram.txt"])
        self.assertEqual(code, 1)
        self.assertIn("Error", err)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
