"""Builds the HTTP request that carries one payload to the target.

GET puts the payload in the query string; POST, PUT and PATCH send it as
a ``application/x-www-form-urlencoded`` body. The remaining methods are
accepted by the configuration but have no way to carry a payload and are
rejected when the builder is created, before the scan starts.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ssrfprobe.exceptions import ConfigurationError

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, value) -> "HttpMethod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ConfigurationError(f"Unsupported HTTP method: {value}") from None


QUERY_METHODS = frozenset({HttpMethod.GET})
BODY_METHODS = frozenset({HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH})


@dataclass(frozen=True)
class ProbeRequest:
    method: str
    url: str
    body: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


def build_query_url(target_url: str, param: str, payload: str) -> str:
    """Set ``param`` to ``payload`` in the query string, keeping other parameters."""
    parts = urlsplit(target_url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != param]
    query.append((param, payload))
    return urlunsplit(parts._replace(query=urlencode(query)))


def build_form_body(param: str, payload: str) -> str:
    return urlencode({param: payload})


class RequestBuilder:
    def __init__(self, method, target_url: str, param: str, headers: Optional[Mapping[str, str]] = None):
        self.method = HttpMethod.parse(method)
        if self.method not in QUERY_METHODS and self.method not in BODY_METHODS:
            raise ConfigurationError(
                f"HTTP method {self.method.value} cannot carry a payload; use GET, POST, PUT or PATCH"
            )
        self.target_url = target_url
        self.param = param
        self.headers = dict(headers or {})

    def build(self, payload: str) -> ProbeRequest:
        headers = dict(self.headers)
        if self.method in QUERY_METHODS:
            return ProbeRequest(self.method.value, build_query_url(self.target_url, self.param, payload), None, headers)

        # a Content-Type from the header file wins
        if not any(name.lower() == "content-type" for name in headers):
            headers["Content-Type"] = FORM_CONTENT_TYPE
        return ProbeRequest(self.method.value, self.target_url, build_form_body(self.param, payload), headers)
