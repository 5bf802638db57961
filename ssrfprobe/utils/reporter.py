"""Scan output: colored lines on the terminal, the same text in a file.

Every line printed to the console is mirrored verbatim, without color,
to the optional output file. Payloads are printed with markup, emoji and
highlighting disabled so brackets and colons in them survive untouched.
"""
from pathlib import Path
from typing import Optional, TextIO

from rich.console import Console

ERROR_STYLE = "red"
VULNERABLE_STYLE = "green"
PENDING_STYLE = "yellow"
INFO_STYLE = "cyan"


def format_progress(method: str, payload: str) -> str:
    return f"[{method}] Testing {payload}"


def format_error(method: str, test_url: str, reason: str) -> str:
    return f"[{method}] {test_url} Error: {reason}"


def format_vulnerable(method: str, test_url: str, param: str, payload: str, evidence: str) -> str:
    return f"[{method}] {test_url} payload: {param}={payload} ({evidence})"


def format_pending(method: str, test_url: str, param: str, payload: str, evidence: str) -> str:
    return f"[{method}] {test_url} payload: {param}={payload} (pending: {evidence})"


def format_summary(vulnerable_count: int) -> str:
    return f"Scan finished, {vulnerable_count} potential SSRF injection point(s) found"


class ScanReporter:
    def __init__(self, console: Optional[Console] = None, output_path: Optional[str] = None):
        self.console = console or Console()
        self.output_path = Path(output_path) if output_path else None
        self._file: Optional[TextIO] = None

    def open(self) -> "ScanReporter":
        if self.output_path and self._file is None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self.output_path.open("w", encoding="utf-8")
        return self

    def close(self) -> None:
        if self._file:
            self._file.close()
            self._file = None

    def write(self, line: str, style: Optional[str] = None) -> None:
        self.console.print(line, style=style, markup=False, emoji=False, highlight=False, soft_wrap=True)
        if self._file:
            self._file.write(line + "\n")
            self._file.flush()

    def info(self, message: str) -> None:
        self.write(message, INFO_STYLE)

    def progress(self, method: str, payload: str) -> None:
        self.write(format_progress(method, payload))

    def error(self, method: str, test_url: str, reason: str) -> None:
        self.write(format_error(method, test_url, reason), ERROR_STYLE)

    def vulnerable(self, method: str, test_url: str, param: str, payload: str, evidence: str) -> None:
        self.write(format_vulnerable(method, test_url, param, payload, evidence), VULNERABLE_STYLE)

    def pending(self, method: str, test_url: str, param: str, payload: str, evidence: str) -> None:
        self.write(format_pending(method, test_url, param, payload, evidence), PENDING_STYLE)

    def summary(self, vulnerable_count: int) -> None:
        self.write("")
        self.write(format_summary(vulnerable_count), VULNERABLE_STYLE if vulnerable_count else None)
