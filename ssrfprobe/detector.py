"""Response classification.

``classify`` decides, from a single response, whether a probe most likely
reached something it should not have. The checks run in a fixed order
and the first hit wins:

1. a probe keyword appears in the body
2. a 200 whose body looks like an internal service (port scans) or a
   plausible file (file reads)
3. a large body containing a sensitive token
4. a 401/403, i.e. an access-controlled internal resource
5. a ``Server`` header naming an internal service
6. an OOB probe that was accepted (reported as pending, not vulnerable)

The function is total: every input yields a verdict.
"""
from typing import Mapping, NamedTuple, Optional, Sequence

from ssrfprobe.payloads.base import Category, ProbeDescriptor

HTTP_BANNER_TOKENS = ("HTTP/", "Server:", "<html")
SERVICE_FINGERPRINTS = ("redis", "mysql", "MongoDB", "Elasticsearch")

FILE_READ_MIN_LENGTH = 50
SENSITIVE_SCAN_MIN_LENGTH = 200

SENSITIVE_TOKENS = (
    "root:", "password", "secret", "token", "api_key",
    "localhost", "127.0.0.1", "private", "internal",
    "AccessKeyId", "SecretAccessKey",
)

AUTH_GATED_STATUSES = (401, 403)
SERVER_FINGERPRINTS = ("Redis", "MySQL", "nginx", "Apache", "Microsoft")


class Verdict(NamedTuple):
    vulnerable: bool
    evidence: str = ""
    pending: bool = False


NOT_VULNERABLE = Verdict(False)


def _find_ci(text: str, candidates: Sequence[str]) -> Optional[str]:
    lowered = text.lower()
    for candidate in candidates:
        if candidate.lower() in lowered:
            return candidate
    return None


def _header(headers: Optional[Mapping[str, str]], name: str) -> str:
    if not headers:
        return ""
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value or ""
    return ""


def _byte_length(body: str) -> int:
    # bodies are decoded with surrogateescape, so this recovers the wire length
    return len(body.encode("utf-8", "surrogateescape"))


def classify(status_code: int, headers: Optional[Mapping[str, str]], body: str, probe: ProbeDescriptor) -> Verdict:
    body = body or ""
    body_length = _byte_length(body)

    for keyword in probe.keywords:
        if keyword in body:
            return Verdict(True, f"response contains keyword: {keyword}")

    if status_code == 200:
        if probe.category == Category.PORT_SCAN and body:
            if any(token in body for token in HTTP_BANNER_TOKENS):
                return Verdict(True, "reached an internal HTTP service")
            fingerprint = _find_ci(body, SERVICE_FINGERPRINTS)
            if fingerprint:
                return Verdict(True, f"internal service fingerprint: {fingerprint}")

        if probe.category == Category.FILE_READ and body_length > FILE_READ_MIN_LENGTH:
            return Verdict(True, f"possible file read, response length: {body_length}")

    if body_length > SENSITIVE_SCAN_MIN_LENGTH:
        token = _find_ci(body, SENSITIVE_TOKENS)
        if token:
            return Verdict(True, f"response contains sensitive token: {token}")

    if status_code in AUTH_GATED_STATUSES:
        return Verdict(True, f"status {status_code}: resource exists but requires authentication")

    server = _header(headers, "Server")
    if server and _find_ci(server, SERVER_FINGERPRINTS):
        return Verdict(True, f"Server header leaks internal service: {server}")

    if probe.category == Category.OOB_PROBE and 200 <= status_code < 400:
        return Verdict(False, "OOB request sent, check the collector for a callback", pending=True)

    return NOT_VULNERABLE
