"""Configuration loader for the prober.

Reads YAML (JSON files load as well, YAML being a superset) and returns a
dict merged with defaults and environment overrides. A missing or
unparsable file falls back to the defaults. ``validate_config`` then
turns that dict into the immutable :class:`ScanConfig` the scan runs
from, raising :class:`ConfigurationError` on anything that would make
the run pointless.
"""
from dataclasses import dataclass, field
from pathlib import Path
import os
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import yaml

from ssrfprobe.exceptions import ConfigurationError
from ssrfprobe.logger import get_logger
from ssrfprobe.request_builder import HttpMethod
from ssrfprobe.targets import TargetSpace

LOG = get_logger("config")

DEFAULT_CONFIG_PATH = "ssrfprobe.yml"
DEFAULT_HEADER_FILE = "Header.txt"

DEFAULTS: Dict[str, Any] = {
    "target_url": None,
    "param": None,
    "method": "GET",
    "header_file": DEFAULT_HEADER_FILE,
    "headers": {},
    "output_path": None,
    "payload_file": None,
    "oob_server": None,
    "internal_net": None,
    "ports": None,
    "scan_all": False,
    "concurrency": 10,
    "timeout": 10,
    "delay": 0,
    "rate_limit": None,
    "http": {"proxies": None},
}

ENV_OVERRIDES = {
    "SSRFPROBE_CONCURRENCY": ("concurrency", int),
    "SSRFPROBE_TIMEOUT": ("timeout", float),
    "SSRFPROBE_DELAY": ("delay", float),
    "SSRFPROBE_RATE_LIMIT": ("rate_limit", float),
}


@dataclass(frozen=True)
class ScanConfig:
    target_url: str
    param: str
    method: HttpMethod = HttpMethod.GET
    concurrency: int = 10
    timeout: float = 10
    delay: float = 0
    rate_limit: Optional[float] = None
    oob_server: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    target_space: TargetSpace = field(default_factory=TargetSpace)
    payload_file: Optional[str] = None
    scan_all: bool = False
    output_path: Optional[str] = None
    proxies: Optional[Dict[str, str]] = None


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    cfg: Dict[str, Any] = {k: (v.copy() if isinstance(v, dict) else v) for k, v in DEFAULTS.items()}

    p = Path(config_path) if config_path else None
    if p is None or not p.exists():
        _apply_env_overrides(cfg)
        return cfg

    try:
        text = p.read_text(encoding="utf-8")
        data = yaml.safe_load(text) or {}

        if isinstance(data, dict):
            cfg.update(data)
        else:
            LOG.warning("Ignoring config file %s: top level is not a mapping", p)
    except (OSError, ValueError, yaml.YAMLError) as e:
        LOG.warning("Could not read config file %s, using defaults: %s", p, e)

    _apply_env_overrides(cfg)
    return cfg


def _apply_env_overrides(cfg: Dict[str, Any]) -> None:
    for env_name, (key, cast) in ENV_OVERRIDES.items():
        if env_name not in os.environ:
            continue
        try:
            cfg[key] = cast(os.environ[env_name])
        except ValueError:
            LOG.warning("Ignoring %s=%r: not a number", env_name, os.environ[env_name])


def load_headers(header_file: str) -> Dict[str, str]:
    """Read ``Name: Value`` lines (the format Burp copies requests in).

    Blank lines, ``#`` comments and lines without a colon are skipped. A
    missing file is not an error: the scan just runs without extra headers.
    """
    p = Path(header_file)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        LOG.warning("Header file %s could not be read, using default headers: %s", p, e)
        return {}

    headers: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or ":" not in line:
            continue
        name, value = line.split(":", 1)
        name = name.strip()
        if name:
            headers[name] = value.strip()
    return headers


def _require_http_url(value: str, what: str) -> str:
    parts = urlsplit(value)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(f"Invalid {what}: {value!r} (expected an http:// or https:// URL)")
    return value


def _number(cfg: Dict[str, Any], key: str, cast):
    try:
        return cast(cfg.get(key) if cfg.get(key) is not None else DEFAULTS[key])
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid {key}: {cfg.get(key)!r}") from None


def _text(cfg: Dict[str, Any], key: str) -> str:
    # YAML turns `param: 123` into an int
    value = cfg.get(key)
    return "" if value is None else str(value).strip()


def _spec_string(value) -> Optional[str]:
    # YAML may hand us `ports: 6379` or `ports: [80, 443]`
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def validate_config(cfg: Dict[str, Any]) -> ScanConfig:
    target_url = _text(cfg, "target_url")
    if not target_url:
        raise ConfigurationError("A target URL is required (-u)")
    _require_http_url(target_url, "target URL")

    param = _text(cfg, "param")
    if not param:
        raise ConfigurationError("The parameter to test is required (-p)")

    method = HttpMethod.parse(_text(cfg, "method") or "GET")

    concurrency = _number(cfg, "concurrency", int)
    if concurrency < 1:
        raise ConfigurationError(f"Concurrency must be at least 1, got {concurrency}")
    timeout = _number(cfg, "timeout", float)
    if timeout <= 0:
        raise ConfigurationError(f"Timeout must be positive, got {timeout}")
    delay = _number(cfg, "delay", float)
    if delay < 0:
        raise ConfigurationError(f"Delay must not be negative, got {delay}")
    rate_limit = cfg.get("rate_limit")
    if rate_limit is not None:
        rate_limit = _number(cfg, "rate_limit", float)
        if rate_limit <= 0:
            raise ConfigurationError(f"Rate limit must be positive, got {rate_limit}")

    oob_server = _text(cfg, "oob_server") or None
    if oob_server:
        _require_http_url(oob_server, "OOB server address")

    target_space = TargetSpace.from_spec(_spec_string(cfg.get("internal_net")), _spec_string(cfg.get("ports")))

    headers: Dict[str, str] = {}
    if cfg.get("header_file"):
        headers.update(load_headers(cfg["header_file"]))
    if isinstance(cfg.get("headers"), dict):
        headers.update({str(k): str(v) for k, v in cfg["headers"].items()})

    http_cfg = cfg.get("http") if isinstance(cfg.get("http"), dict) else {}

    return ScanConfig(
        target_url=target_url,
        param=param,
        method=method,
        concurrency=concurrency,
        timeout=timeout,
        delay=delay,
        rate_limit=rate_limit,
        oob_server=oob_server,
        headers=headers,
        target_space=target_space,
        payload_file=_text(cfg, "payload_file") or None,
        scan_all=bool(cfg.get("scan_all")),
        output_path=_text(cfg, "output_path") or None,
        proxies=http_cfg.get("proxies"),
    )
