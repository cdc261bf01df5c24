from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    WARNING = "warning"
    NOTE = "note"


class FindingKind(str, Enum):
    MISSING_REDUNDANCY = "missing-redundancy"
    SIZE_MISMATCH = "size-mismatch"
    HIGH_CAPACITY = "high-capacity"
    HIGH_FRAGMENTATION = "high-fragmentation"
    POOL_ERRORS = "pool-errors"
    DISK_UNREADABLE = "disk-unreadable"


class Recommendation(str, Enum):
    KEEP_QUOTA = "KeepQuota"
    SAFE_TO_REMOVE = "SafeToRemove"


@dataclass(frozen=True)
class Finding:
    kind: FindingKind
    severity: Severity
    message: str

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING
