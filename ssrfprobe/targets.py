"""Target space resolution.

Turns the operator's sparse ``--internal`` and ``--ports`` strings into
concrete, duplicate-free lists of addresses and ports. Nothing here
touches the network: hostnames are passed through untouched and are
resolved later by the target server itself.

Supported address forms, checked in this order:

- ``192.168.1.1-10`` or ``192.168.1.1-192.168.1.10`` (inclusive IPv4 range)
- ``192.168.1.0/24`` (CIDR, network and broadcast addresses dropped)
- ``10.0.0.1`` or ``::1`` (single literal)
- ``internal.example`` (hostname, kept verbatim)
"""
import ipaddress
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ssrfprobe.exceptions import TargetParseError

HOSTNAME_RE = re.compile(r"[A-Za-z0-9._-]+")

MIN_PORT = 1
MAX_PORT = 65535


def parse_addresses(spec: str) -> List[str]:
    """Expand an address specification into an ordered list of targets."""
    spec = (spec or "").strip()
    if not spec:
        raise TargetParseError(spec, "target address must not be empty")

    if "-" in spec and "/" not in spec:
        return _parse_ip_range(spec)

    if "/" in spec:
        return _parse_cidr(spec)

    try:
        ipaddress.ip_address(spec)
        return [spec]
    except ValueError:
        pass

    if not HOSTNAME_RE.fullmatch(spec):
        raise TargetParseError(
            spec,
            "invalid target address format (only letters, digits, '.', '-' and '_' are allowed)",
        )
    return [spec]


def _parse_cidr(spec: str) -> List[str]:
    try:
        network = ipaddress.ip_network(spec, strict=False)
    except ValueError as e:
        raise TargetParseError(spec, f"invalid CIDR block ({e})") from e

    addresses = [str(ip) for ip in network]
    # drop network and broadcast addresses
    if len(addresses) > 2:
        addresses = addresses[1:-1]
    return addresses


def _parse_ipv4(value: str, spec: str, which: str) -> ipaddress.IPv4Address:
    try:
        ip = ipaddress.ip_address(value)
    except ValueError as e:
        raise TargetParseError(spec, f"invalid {which} IP address {value!r}") from e
    if ip.version != 4:
        raise TargetParseError(spec, f"IP ranges only support IPv4, got {value!r}")
    return ip


def _parse_ip_range(spec: str) -> List[str]:
    parts = spec.split("-")
    if len(parts) != 2:
        raise TargetParseError(spec, "invalid IP range format")

    start_str, end_str = parts[0].strip(), parts[1].strip()
    start = _parse_ipv4(start_str, spec, "start")

    if "." in end_str:
        end = _parse_ipv4(end_str, spec, "end")
    else:
        try:
            last_octet = int(end_str)
        except ValueError as e:
            raise TargetParseError(spec, f"invalid end of IP range {end_str!r}") from e
        if not 0 <= last_octet <= 255:
            raise TargetParseError(spec, f"last octet must be between 0 and 255, got {last_octet}")
        end = ipaddress.IPv4Address((int(start) & 0xFFFFFF00) | last_octet)

    if start > end:
        raise TargetParseError(spec, f"start IP is greater than end IP ({start} > {end})")

    return [str(ipaddress.IPv4Address(n)) for n in range(int(start), int(end) + 1)]


def _parse_port(value: str, spec: str) -> int:
    try:
        port = int(value.strip())
    except ValueError as e:
        raise TargetParseError(spec, f"invalid port {value.strip()!r}") from e
    if not MIN_PORT <= port <= MAX_PORT:
        raise TargetParseError(spec, f"port must be between {MIN_PORT} and {MAX_PORT}, got {port}")
    return port


def parse_ports(spec: str) -> List[int]:
    """Expand ``80,443,8000-8010`` style lists, keeping first-seen order."""
    spec = (spec or "").strip()
    if not spec:
        raise TargetParseError(spec, "port list must not be empty")

    # parse everything before emitting so a bad entry never yields partial output
    ranges: List[Tuple[int, int]] = []
    for part in spec.split(","):
        part = part.strip()
        if "-" in part:
            bounds = part.split("-")
            if len(bounds) != 2:
                raise TargetParseError(spec, f"invalid port range {part!r}")
            start, end = _parse_port(bounds[0], spec), _parse_port(bounds[1], spec)
            if start > end:
                raise TargetParseError(spec, f"start port is greater than end port in {part!r}")
            ranges.append((start, end))
        else:
            port = _parse_port(part, spec)
            ranges.append((port, port))

    ports: List[int] = []
    seen = set()
    for start, end in ranges:
        for port in range(start, end + 1):
            if port not in seen:
                seen.add(port)
                ports.append(port)
    return ports


@dataclass(frozen=True)
class TargetSpace:
    """Resolved addresses and ports. Empty means "use the catalog defaults"."""

    addresses: Tuple[str, ...] = ()
    ports: Tuple[int, ...] = ()

    @classmethod
    def from_spec(cls, addresses: Optional[str] = None, ports: Optional[str] = None) -> "TargetSpace":
        resolved_addresses: Tuple[str, ...] = ()
        resolved_ports: Tuple[int, ...] = ()
        if addresses is not None:
            resolved_addresses = tuple(dict.fromkeys(parse_addresses(addresses)))
        if ports is not None:
            resolved_ports = tuple(parse_ports(ports))
        return cls(addresses=resolved_addresses, ports=resolved_ports)
