"""
Line-oriented payload dictionaries.

One payload per line; blank lines and lines starting with ``#`` are
ignored. Custom dictionaries (``-w``) carry no keywords at all, built-in
ones get keywords from :mod:`ssrfprobe.payloads.heuristics`.
"""
from pathlib import Path
from typing import Iterator, List, Optional

from ssrfprobe.exceptions import DictionaryLoadError
from ssrfprobe.logger import get_logger
from ssrfprobe.payloads.base import Category, ProbeDescriptor
from ssrfprobe.payloads.heuristics import category_for_file, infer_keywords

LOG = get_logger("payloads")

BUILTIN_DICTIONARY_DIR = Path(__file__).resolve().parent.parent / "dict"

BUILTIN_DICTIONARY_FILES = (
    "bypass_techniques.txt",
    "cloud_metadata.txt",
    "file_read.txt",
    "protocol_bypass.txt",
    "internal_ip.txt",
)


def iter_dictionary_lines(path) -> Iterator[str]:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise DictionaryLoadError(str(p), e) from e

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        yield line


def load_custom_dictionary(path) -> List[ProbeDescriptor]:
    return [ProbeDescriptor.create(line, Category.CUSTOM_DICTIONARY) for line in iter_dictionary_lines(path)]


def load_dictionary_file(path) -> List[ProbeDescriptor]:
    category = category_for_file(path)
    return [ProbeDescriptor.create(line, category, infer_keywords(line)) for line in iter_dictionary_lines(path)]


def load_builtin_dictionaries(dictionary_dir: Optional[Path] = None) -> List[ProbeDescriptor]:
    """Load every built-in dictionary, skipping files that cannot be read."""
    base = Path(dictionary_dir) if dictionary_dir else BUILTIN_DICTIONARY_DIR
    payloads: List[ProbeDescriptor] = []
    for name in BUILTIN_DICTIONARY_FILES:
        try:
            payloads.extend(load_dictionary_file(base / name))
        except DictionaryLoadError as e:
            LOG.warning("Skipping built-in dictionary: %s", e)
    return payloads
