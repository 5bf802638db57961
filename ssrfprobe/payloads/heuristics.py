"""
Best-effort keyword guessing for free-text dictionary lines.

Used only for the built-in dictionaries loaded by ``--all``. The exact
tables in ``port_scan``, ``high_risk`` and ``cloud`` stay authoritative
for the built-in probes; nothing here feeds back into them.
"""
from pathlib import Path
from typing import Tuple

from ssrfprobe.payloads.base import Category

CATEGORY_BY_FILE_NAME = {
    "cloud_metadata.txt": Category.CLOUD_METADATA,
    "file_read.txt": Category.FILE_READ,
    "protocol_bypass.txt": Category.PROTOCOL_PROBE,
    "internal_ip.txt": Category.PORT_SCAN,
}

CLOUD_KEYWORDS = ("AccessKeyId", "SecretAccessKey", "Token", "credentials", "ami-id", "instance-id")
GENERIC_FILE_KEYWORDS = ("root:", "PATH=", "HOME=", "Administrator")

FILE_KEYWORDS = (
    ("passwd", ("root:", "bin:", "daemon:", "nobody:")),
    ("shadow", ("root:", "$6$", "$5$", "$1$")),
    ("hosts", ("localhost", "127.0.0.1")),
    ("win.ini", ("[fonts]", "[extensions]", "for 16-bit app support")),
)

PROTOCOL_KEYWORDS = (
    ("6379", ("redis_version", "PONG", "role:master")),
    ("3306", ("mysql", "MariaDB")),
)


def category_for_file(path) -> Category:
    """bypass_techniques.txt and unknown files fall back to CustomDictionary."""
    return CATEGORY_BY_FILE_NAME.get(Path(path).name, Category.CUSTOM_DICTIONARY)


def infer_keywords(payload: str) -> Tuple[str, ...]:
    if "169.254.169.254" in payload or "metadata" in payload:
        return CLOUD_KEYWORDS

    if "file://" in payload:
        for marker, keywords in FILE_KEYWORDS:
            if marker in payload:
                return keywords
        return GENERIC_FILE_KEYWORDS

    if "dict://" in payload or "gopher://" in payload:
        for port, keywords in PROTOCOL_KEYWORDS:
            if port in payload:
                return keywords

    return ()
