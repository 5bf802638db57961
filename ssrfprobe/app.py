"""ssrfprobe.app - entrypoint for the blind SSRF prober

Loads configuration, builds the probe catalog and fires it through the
tested parameter. Designed to be run as a console script or module:

    python -m ssrfprobe.app -u "http://target/api?url=x" -p url
"""

import asyncio
import argparse
import logging
from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape

from ssrfprobe.logger import get_logger, set_level
from ssrfprobe.config import DEFAULT_CONFIG_PATH, ScanConfig, load_config, validate_config
from ssrfprobe.dispatcher import ProbeDispatcher, RunContext
from ssrfprobe.exceptions import ConfigurationError
from ssrfprobe.payloads import build_catalog
from ssrfprobe.request_builder import RequestBuilder
from ssrfprobe.utils.http import AioRequester
from ssrfprobe.utils.reporter import PENDING_STYLE, ScanReporter

LOG = get_logger("ssrfprobe")

# argparse dest -> config key
CLI_OVERRIDES = {
    "url": "target_url",
    "param": "param",
    "method": "method",
    "header_file": "header_file",
    "output": "output_path",
    "wordlist": "payload_file",
    "oob": "oob_server",
    "internal": "internal_net",
    "ports": "ports",
    "timeout": "timeout",
    "threads": "concurrency",
    "delay": "delay",
    "rate_limit": "rate_limit",
    "scan_all": "scan_all",
}


async def run_scan(config: ScanConfig, requester=None, reporter: Optional[ScanReporter] = None) -> int:
    """Run every probe once and return the number of likely vulnerabilities."""
    # both raise before anything is sent
    request_builder = RequestBuilder(config.method, config.target_url, config.param, config.headers)
    catalog = build_catalog(
        config.target_space,
        oob_collector=config.oob_server,
        include_builtin_dictionary=config.scan_all,
        custom_dictionary_path=config.payload_file,
    )

    own_requester = requester is None
    if own_requester:
        requester = AioRequester(
            timeout=config.timeout,
            rate_limit=config.rate_limit,
            proxies=config.proxies,
            max_connections=config.concurrency,
        )
    own_reporter = reporter is None
    if own_reporter:
        reporter = ScanReporter(output_path=config.output_path)

    try:
        reporter.open()
        reporter.info(
            f"Testing parameter '{config.param}' of {config.target_url} "
            f"with {len(catalog)} payloads ({config.method.value})"
        )

        context = RunContext(reporter, config.param)
        dispatcher = ProbeDispatcher(
            requester,
            request_builder,
            context,
            concurrency=config.concurrency,
            delay=config.delay,
        )
        tally = await dispatcher.dispatch(catalog)

        reporter.summary(tally.vulnerable_count)
        if tally.pending_count:
            reporter.write(
                f"{tally.pending_count} OOB probe(s) sent, check {config.oob_server} for callbacks",
                PENDING_STYLE,
            )
        LOG.info("Scan completed: %d probes, %d errors", tally.probe_count, tally.error_count)
    finally:
        if own_requester:
            await requester.close()
        if own_reporter:
            reporter.close()

    return tally.vulnerable_count


def build_settings(args: argparse.Namespace) -> Dict[str, Any]:
    cfg = load_config(args.config)
    for dest, key in CLI_OVERRIDES.items():
        value = getattr(args, dest, None)
        if value is not None:
            cfg[key] = value
    return cfg


async def main_async(args: argparse.Namespace) -> int:
    config = validate_config(build_settings(args))
    return await run_scan(config)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ssrfprobe - blind SSRF prober")
    parser.add_argument("-u", "--url", help="Target URL (e.g. http://example.com/api)")
    parser.add_argument("-p", "--param", help="Name of the parameter to inject payloads into (e.g. url)")
    parser.add_argument("-X", "--method", help="HTTP method: GET, POST, PUT or PATCH (default: GET)")
    parser.add_argument("-H", "--header-file", help="File with extra request headers, one 'Name: Value' per line (default: Header.txt)")
    parser.add_argument("-o", "--output", help="Mirror the scan output to this file")
    parser.add_argument("-w", "--wordlist", help="Custom payload dictionary; replaces all built-in payloads")
    parser.add_argument("--oob", help="OOB collector URL (e.g. http://your-server:8080); enables callback probes")
    parser.add_argument("-i", "--internal", help="Internal targets: CIDR 192.168.1.0/24, IP 192.168.1.1, range 192.168.1.1-10 or hostname")
    parser.add_argument("--ports", help="Ports to probe, e.g. 1-1000 or 80,443,3306 (default: high-value service ports)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds (default: 10)")
    parser.add_argument("-t", "--threads", type=int, help="Maximum concurrent requests (default: 10)")
    parser.add_argument("--delay", type=float, help="Seconds to wait before each request (default: 0)")
    parser.add_argument("--rate-limit", type=float, help="Maximum requests per second (default: unlimited)")
    parser.add_argument("--all", dest="scan_all", action="store_true", default=None, help="Also send every payload of the built-in dictionaries")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to the configuration file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    """Entrypoint to run the prober"""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)

    console = Console(stderr=True)
    try:
        asyncio.run(main_async(args))
    except ConfigurationError as e:
        console.print(f"[bold red][!] Configuration error:[/bold red] {escape(str(e))}", highlight=False)
        parser.print_usage()
        return 1
    except OSError as e:
        # unreadable wordlist or output file
        console.print(f"[bold red][!] {escape(str(e))}[/bold red]", highlight=False)
        return 1
    except KeyboardInterrupt:
        LOG.info("Scan stopped by user.")
        return 130
    except Exception as e:
        LOG.error(f"An unexpected error occurred: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
