"""
Out-of-band callback probes.

These only make the target call back to a collector the operator runs.
Whether the callback actually arrived has to be checked on the collector.
"""
from typing import List, Optional

from ssrfprobe.payloads.base import Category, ProbeDescriptor

CALLBACK_IDS = ("http-test", "https-test")


def get_oob_payloads(collector: Optional[str]) -> List[ProbeDescriptor]:
    if not collector:
        return []
    base = collector.rstrip("/")
    return [ProbeDescriptor.create(f"{base}/callback?id={callback_id}", Category.OOB_PROBE) for callback_id in CALLBACK_IDS]
