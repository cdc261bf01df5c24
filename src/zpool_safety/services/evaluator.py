"""Safety predicates over a collected pool.

Every check is a pure function of the collected data and returns at most one
finding. ``ConditionEvaluator`` runs them in a fixed order; the order only
affects how findings are listed in the report.
"""
from __future__ import annotations

from zpool_safety.models.findings import Finding, FindingKind, Severity
from zpool_safety.models.pool import DiskInfo, PoolData, PoolSnapshot

NO_ERRORS_SENTINEL = "No known data errors"


def check_redundancy(snapshot: PoolSnapshot, marker: str = "raidz2") -> Finding | None:
    if marker.lower() in (t.lower() for t in snapshot.vdev_types):
        return None
    layout = snapshot.redundancy or "stripe (no redundancy)"
    return Finding(
        kind=FindingKind.MISSING_REDUNDANCY,
        severity=Severity.WARNING,
        message=f"{marker.upper()} configuration not confirmed (detected layout: {layout})",
    )


def check_disk_sizes(disks: list[DiskInfo]) -> Finding | None:
    sized = [d for d in disks if d.size_bytes is not None]
    if not sized:
        return None
    reference = sized[0].size_bytes
    if all(d.size_bytes == reference for d in sized):
        return None
    listing = ", ".join(f"{d.name}={d.size_bytes}" for d in sized)
    return Finding(
        kind=FindingKind.SIZE_MISMATCH,
        severity=Severity.WARNING,
        message=f"Disk size mismatch detected: {listing}",
    )


def check_capacity(snapshot: PoolSnapshot, threshold: int = 80) -> Finding | None:
    if snapshot.capacity_percent <= threshold:
        return None
    return Finding(
        kind=FindingKind.HIGH_CAPACITY,
        severity=Severity.NOTE,
        message=f"Pool usage is high ({snapshot.capacity_percent}% > {threshold}%)",
    )


def check_fragmentation(snapshot: PoolSnapshot, threshold: int = 50) -> Finding | None:
    frag = snapshot.fragmentation_percent
    if frag is None or frag <= threshold:
        return None
    return Finding(
        kind=FindingKind.HIGH_FRAGMENTATION,
        severity=Severity.NOTE,
        message=f"High fragmentation ({frag}% > {threshold}%)",
    )


def check_health(snapshot: PoolSnapshot) -> Finding | None:
    e = snapshot.errors
    if not e.any and snapshot.error_summary == NO_ERRORS_SENTINEL:
        return None
    return Finding(
        kind=FindingKind.POOL_ERRORS,
        severity=Severity.WARNING,
        message=(
            f"Pool errors detected: read={e.read} write={e.write} checksum={e.checksum}, "
            f"summary: {snapshot.error_summary or '(missing)'}"
        ),
    )


def check_unreadable_disks(disks: list[DiskInfo]) -> Finding | None:
    missing = [d.device_path for d in disks if d.size_bytes is None]
    if not missing:
        return None
    return Finding(
        kind=FindingKind.DISK_UNREADABLE,
        severity=Severity.WARNING,
        message=f"Disk size could not be read: {', '.join(missing)}",
    )


class ConditionEvaluator:
    def __init__(
        self,
        redundancy_marker: str = "raidz2",
        capacity_note_percent: int = 80,
        fragmentation_note_percent: int = 50,
    ) -> None:
        self.redundancy_marker = redundancy_marker
        self.capacity_note_percent = int(capacity_note_percent)
        self.fragmentation_note_percent = int(fragmentation_note_percent)

    def evaluate(self, data: PoolData) -> list[Finding]:
        s = data.snapshot
        checks = (
            check_redundancy(s, self.redundancy_marker),
            check_disk_sizes(data.disks),
            check_capacity(s, self.capacity_note_percent),
            check_fragmentation(s, self.fragmentation_note_percent),
            check_health(s),
            check_unreadable_disks(data.disks),
        )
        return [f for f in checks if f is not None]
