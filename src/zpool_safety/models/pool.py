from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ErrorCounters:
    read: int = 0
    write: int = 0
    checksum: int = 0

    @property
    def any(self) -> bool:
        return bool(self.read or self.write or self.checksum)


@dataclass(frozen=True)
class PoolSnapshot:
    name: str
    capacity_percent: int
    allocated_bytes: int
    free_bytes: int
    size_bytes: int
    fragmentation_percent: int | None
    errors: ErrorCounters
    error_summary: str
    scrub_status: str
    redundancy: str | None
    config_text: str
    refquota_bytes: int | None = None
    vdev_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class DiskInfo:
    name: str
    size_bytes: int | None
    model: str = "Unknown"
    path: str = ""

    @property
    def device_path(self) -> str:
        if self.path:
            return self.path
        return self.name if self.name.startswith("/") else f"/dev/{self.name}"


@dataclass(frozen=True)
class DatasetMount:
    dataset: str
    mountpoint: str
    total_bytes: int
    used_bytes: int
    free_bytes: int
    used_percent: float


@dataclass(frozen=True)
class PoolData:
    snapshot: PoolSnapshot
    disks: list[DiskInfo]
    mounts: list[DatasetMount] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    @property
    def readable_disks(self) -> list[DiskInfo]:
        return [d for d in self.disks if d.size_bytes is not None]

    @property
    def unreadable_disks(self) -> list[DiskInfo]:
        return [d for d in self.disks if d.size_bytes is None]
