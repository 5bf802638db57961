"""
Base types shared by every payload module
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple


class Category(str, Enum):
    PORT_SCAN = "PortScan"
    FILE_READ = "FileRead"
    PROTOCOL_PROBE = "ProtocolProbe"
    CLOUD_METADATA = "CloudMetadata"
    OOB_PROBE = "OOBProbe"
    CUSTOM_DICTIONARY = "CustomDictionary"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


DEFAULT_SEVERITY = {
    Category.PORT_SCAN: Severity.MEDIUM,
    Category.FILE_READ: Severity.HIGH,
    Category.PROTOCOL_PROBE: Severity.HIGH,
    Category.CLOUD_METADATA: Severity.HIGH,
    Category.OOB_PROBE: Severity.MEDIUM,
    Category.CUSTOM_DICTIONARY: Severity.LOW,
}


@dataclass(frozen=True)
class ProbeDescriptor:
    """
    One value to inject into the tested parameter, plus what to look for
    in the response. Shared read-only between all probe tasks.
    """
    value: str
    category: Category
    severity: Severity
    keywords: Tuple[str, ...] = ()

    @classmethod
    def create(cls, value: str, category: Category, keywords: Iterable[str] = (), severity: Severity = None) -> "ProbeDescriptor":
        # keywords behave as an ordered set
        return cls(
            value=value,
            category=category,
            severity=severity or DEFAULT_SEVERITY[category],
            keywords=tuple(dict.fromkeys(keywords)),
        )
