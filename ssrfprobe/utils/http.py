"""Async HTTP requester used to deliver probes.

Redirects are never followed and certificates are never verified: the
target is the system under test, and a redirect would hide what the
injected URL actually returned.
"""
import asyncio
import random
import socket
import time
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import aiohttp
from aiolimiter import AsyncLimiter

from ssrfprobe.exceptions import TransportError
from ssrfprobe.logger import get_logger

LOG = get_logger("http")

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/109.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/109.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/108.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_1) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/16.1 Safari/605.1.15",
]

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError)

REFUSED_MARKERS = ("connection refused", "connect call failed")
TIMEOUT_MARKERS = ("timeout", "timed out")
DNS_MARKERS = ("no such host", "name or service not known", "nodename nor servname", "temporary failure in name resolution")


@dataclass
class HttpResponse:
    status: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)
    length: int = 0
    elapsed_ms: int = 0


def describe_transport_error(exc: BaseException) -> str:
    """Map a transport exception to a short reason for the scan output."""
    os_error = getattr(exc, "os_error", None)
    if isinstance(exc, ConnectionRefusedError) or isinstance(os_error, ConnectionRefusedError):
        return "connection refused"
    if isinstance(exc, asyncio.TimeoutError):
        return "request timed out"
    if isinstance(exc, socket.gaierror) or isinstance(os_error, socket.gaierror):
        return "DNS resolution failed"

    message = str(exc).lower()
    if any(marker in message for marker in REFUSED_MARKERS):
        return "connection refused"
    if any(marker in message for marker in TIMEOUT_MARKERS):
        return "request timed out"
    if any(marker in message for marker in DNS_MARKERS):
        return "DNS resolution failed"
    return f"request failed: {str(exc) or type(exc).__name__}"


def _decode(raw: bytes, charset: Optional[str]) -> str:
    try:
        return raw.decode(charset or "utf-8", errors="surrogateescape")
    except LookupError:
        return raw.decode("utf-8", errors="surrogateescape")


class AioRequester:
    def __init__(self, timeout: float = 10, rate_limit: Optional[float] = None, proxies: Optional[Dict[str, str]] = None, max_connections: int = 0, max_field_size: int = 8190):
        self._timeout_value = timeout or 10
        self._proxies = proxies
        self._limiter = AsyncLimiter(rate_limit, 1) if rate_limit else None
        self._max_connections = max_connections
        self._max_field_size = max_field_size
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        # created lazily: aiohttp sessions must be built inside a running loop
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout_value),
                connector=aiohttp.TCPConnector(ssl=False, limit=self._max_connections),
                max_field_size=self._max_field_size,
            )
        return self._session

    def _proxy_for(self, url: str) -> Optional[str]:
        if not self._proxies:
            return None
        scheme = url.split("://")[0]
        return self._proxies.get(scheme)

    async def request(self, method: str, url: str, data: Optional[str] = None, headers: Optional[Mapping[str, str]] = None) -> HttpResponse:
        """Send one request and read the whole body.

        Raises :class:`TransportError` when no complete response could be read.
        """
        send_headers = dict(headers or {})
        if not any(name.lower() == "user-agent" for name in send_headers):
            send_headers["User-Agent"] = random.choice(USER_AGENTS)

        try:
            if self._limiter:
                async with self._limiter:
                    return await self._send(method, url, data, send_headers)
            return await self._send(method, url, data, send_headers)
        except TRANSPORT_ERRORS as e:
            LOG.debug("HTTP request failed: %s %s -> %r", method, url, e)
            raise TransportError(describe_transport_error(e), e) from e

    async def _send(self, method: str, url: str, data: Optional[str], headers: Dict[str, str]) -> HttpResponse:
        session = self._get_session()
        started = time.perf_counter()
        async with session.request(
            method,
            url,
            data=data,
            headers=headers,
            allow_redirects=False,
            proxy=self._proxy_for(url),
        ) as resp:
            raw = await resp.read()
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            return HttpResponse(
                status=resp.status,
                text=_decode(raw, resp.charset),
                headers=dict(resp.headers),
                length=len(raw),
                elapsed_ms=elapsed_ms,
            )

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
