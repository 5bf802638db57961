import asyncio
import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qs, urlsplit

from rich.console import Console

from ssrfprobe.app import build_parser, build_settings, main, run_scan
from ssrfprobe.config import ScanConfig
from ssrfprobe.exceptions import ConfigurationError, DictionaryLoadError
from ssrfprobe.request_builder import HttpMethod
from ssrfprobe.utils.http import HttpResponse
from ssrfprobe.utils.reporter import ScanReporter


class RedisOnlyRequester:
    """Answers like a server whose fetcher can only reach Redis on loopback."""

    def __init__(self):
        self.calls = 0

    async def request(self, method, url, data=None, headers=None):
        self.calls += 1
        payload = parse_qs(urlsplit(url).query)["x"][0]
        if payload == "http://127.0.0.1:6379":
            return HttpResponse(status=200, text="redis_version:6.2", length=17)
        return HttpResponse(status=404, text="")


def quiet_reporter(output_path=None):
    return ScanReporter(console=Console(file=io.StringIO(), color_system=None, width=400), output_path=output_path)


class TestRunScan(unittest.TestCase):
    def test_single_redis_finding(self):
        config = ScanConfig(target_url="http://victim/api?x=1", param="x", method=HttpMethod.GET)
        requester = RedisOnlyRequester()
        reporter = quiet_reporter()

        count = asyncio.run(run_scan(config, requester=requester, reporter=reporter))

        self.assertEqual(count, 1)
        self.assertEqual(requester.calls, 57 + 10 + 8)
        lines = reporter.console.file.getvalue().splitlines()
        findings = [line for line in lines if "payload: x=" in line]
        self.assertEqual(len(findings), 1)
        self.assertIn("redis_version", findings[0])
        self.assertIn("payload: x=http://127.0.0.1:6379", findings[0])
        self.assertEqual(lines[-1], "Scan finished, 1 potential SSRF injection point(s) found")

    def test_output_file_mirrors_console_without_color(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "results", "scan.txt")
            console = Console(file=io.StringIO(), force_terminal=True, color_system="standard", width=400)
            reporter = ScanReporter(console=console, output_path=out)
            config = ScanConfig(target_url="http://victim/api?x=1", param="x")

            asyncio.run(run_scan(config, requester=RedisOnlyRequester(), reporter=reporter))
            reporter.close()

            text = Path(out).read_text(encoding="utf-8")

        self.assertNotIn("\x1b[", text)
        self.assertIn("\x1b[", console.file.getvalue())
        self.assertIn("[GET] Testing http://127.0.0.1:6379\n", text)
        self.assertIn("Scan finished, 1 potential SSRF injection point(s) found", text)

    def test_unsupported_method_fails_before_dispatch(self):
        requester = MagicMock()
        requester.request = AsyncMock()
        config = ScanConfig(target_url="http://victim/", param="x", method=HttpMethod.DELETE)

        with self.assertRaises(ConfigurationError):
            asyncio.run(run_scan(config, requester=requester, reporter=quiet_reporter()))

        requester.request.assert_not_awaited()

    def test_missing_custom_dictionary_aborts(self):
        requester = MagicMock()
        requester.request = AsyncMock()
        config = ScanConfig(target_url="http://victim/", param="x", payload_file="/nonexistent/words.txt")

        with self.assertRaises(DictionaryLoadError):
            asyncio.run(run_scan(config, requester=requester, reporter=quiet_reporter()))

        requester.request.assert_not_awaited()

    def test_owned_requester_is_closed(self):
        config = ScanConfig(target_url="http://victim/api?x=1", param="x", payload_file=None)

        with patch("ssrfprobe.app.AioRequester") as mock_aio_requester, \
             patch("ssrfprobe.app.build_catalog", return_value=()):
            mock_requester_instance = MagicMock()
            mock_requester_instance.close = AsyncMock(return_value=None)
            mock_aio_requester.return_value = mock_requester_instance

            count = asyncio.run(run_scan(config, reporter=quiet_reporter()))

        self.assertEqual(count, 0)
        mock_aio_requester.assert_called_once_with(timeout=10, rate_limit=None, proxies=None, max_connections=10)
        mock_requester_instance.close.assert_awaited_once()


class TestCli(unittest.TestCase):
    def test_cli_overrides_config_file(self):
        args = build_parser().parse_args(["-u", "http://victim/", "-p", "url", "-t", "3", "--ports", "80", "--all"])

        with patch("ssrfprobe.app.load_config") as mock_load_config:
            mock_load_config.return_value = {"concurrency": 50, "param": "other", "timeout": 7, "scan_all": False}
            cfg = build_settings(args)

        self.assertEqual(cfg["target_url"], "http://victim/")
        self.assertEqual(cfg["param"], "url")
        self.assertEqual(cfg["concurrency"], 3)
        self.assertEqual(cfg["timeout"], 7)
        self.assertEqual(cfg["ports"], "80")
        self.assertTrue(cfg["scan_all"])

    def test_unset_flags_do_not_override(self):
        args = build_parser().parse_args([])

        with patch("ssrfprobe.app.load_config") as mock_load_config:
            mock_load_config.return_value = {"scan_all": True, "method": "POST"}
            cfg = build_settings(args)

        self.assertTrue(cfg["scan_all"])
        self.assertEqual(cfg["method"], "POST")

    def test_configuration_error_exits_nonzero(self):
        with patch("ssrfprobe.app.load_config", return_value={}), \
             patch("ssrfprobe.app.run_scan", new=AsyncMock()) as mock_run_scan, \
             patch("sys.stderr", new=io.StringIO()):
            code = main(["-p", "url"])

        self.assertEqual(code, 1)
        mock_run_scan.assert_not_awaited()

    def test_successful_run_exits_zero(self):
        with patch("ssrfprobe.app.run_scan", new=AsyncMock(return_value=2)) as mock_run_scan:
            code = main(["-u", "http://victim/", "-p", "url", "--config", "/nonexistent.yml", "-H", "/nonexistent/Header.txt"])

        self.assertEqual(code, 0)
        config = mock_run_scan.await_args[0][0]
        self.assertEqual(config.target_url, "http://victim/")
        self.assertEqual(config.param, "url")


if __name__ == "__main__":
    unittest.main()
