"""Logging setup shared by every module.

All loggers live under the ``ssrfprobe`` namespace and write through a
single rich handler on stderr, so diagnostics never mix with the scan
results printed on stdout.
"""
import logging
import os

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "ssrfprobe"
LOG_LEVEL_ENV = "SSRFPROBE_LOG_LEVEL"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(handler)
        root.propagate = False

    level = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    root.setLevel(getattr(logging, level, logging.WARNING))
    return root


def get_logger(name: str) -> logging.Logger:
    root = _configure_root()
    if name == ROOT_LOGGER:
        return root
    return root.getChild(name)


def set_level(level: int) -> None:
    """Override the level picked from the environment (used by ``--verbose``)."""
    _configure_root().setLevel(level)
