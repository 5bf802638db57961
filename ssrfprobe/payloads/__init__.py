"""Probe catalog construction.

``build_catalog`` assembles the full, immutable list of probes for a run
before anything is dispatched. A custom dictionary replaces every
built-in category; otherwise the built-in groups are concatenated in a
fixed order.
"""
from pathlib import Path
from typing import List, Optional, Tuple

from ssrfprobe.logger import get_logger
from ssrfprobe.payloads.base import Category, ProbeDescriptor, Severity
from ssrfprobe.payloads.cloud import get_cloud_metadata_payloads
from ssrfprobe.payloads.dictionary import load_builtin_dictionaries, load_custom_dictionary
from ssrfprobe.payloads.high_risk import get_high_risk_payloads
from ssrfprobe.payloads.oob import get_oob_payloads
from ssrfprobe.payloads.port_scan import get_port_scan_payloads
from ssrfprobe.targets import TargetSpace

LOG = get_logger("payloads")

__all__ = ["Category", "ProbeDescriptor", "Severity", "build_catalog"]


def build_catalog(
    target_space: Optional[TargetSpace] = None,
    oob_collector: Optional[str] = None,
    include_builtin_dictionary: bool = False,
    custom_dictionary_path: Optional[str] = None,
    dictionary_dir: Optional[Path] = None,
) -> Tuple[ProbeDescriptor, ...]:
    if custom_dictionary_path:
        payloads = load_custom_dictionary(custom_dictionary_path)
        LOG.info("Loaded %d payloads from %s", len(payloads), custom_dictionary_path)
        return tuple(payloads)

    target_space = target_space or TargetSpace()
    payloads: List[ProbeDescriptor] = []
    payloads += get_port_scan_payloads(target_space.addresses, target_space.ports)
    payloads += get_high_risk_payloads()
    payloads += get_cloud_metadata_payloads()
    payloads += get_oob_payloads(oob_collector)

    if include_builtin_dictionary:
        dictionary_payloads = load_builtin_dictionaries(dictionary_dir)
        if dictionary_payloads:
            LOG.info("Loaded %d built-in dictionary payloads", len(dictionary_payloads))
        else:
            LOG.error("No built-in dictionary payloads could be loaded")
        payloads += dictionary_payloads

    return tuple(payloads)
