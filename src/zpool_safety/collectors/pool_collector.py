from __future__ import annotations

import os
import re
from datetime import datetime

import psutil
import structlog

from zpool_safety.collectors.command_runner import CommandRunner
from zpool_safety.errors import CommandError, NoDisksFound, ParseError
from zpool_safety.models.common import CollectorResult
from zpool_safety.models.pool import (
    DatasetMount,
    DiskInfo,
    ErrorCounters,
    PoolData,
    PoolSnapshot,
)

log = structlog.get_logger(__name__)

_STATUS_KEY = re.compile(r"^\s*(pool|state|status|action|see|scan|config|errors):\s?(.*)$")
_VDEV_GROUP = re.compile(r"^(mirror|raidz\d?|draid\d?|spare|replacing|indirect)(-\d+|:.*)?$")
_SECTION_HEADERS = {"logs", "cache", "spares", "special", "dedup"}
_COUNT = re.compile(r"^(\d+(?:\.\d+)?)([KMGTP]?)$")
_COUNT_MULT = {"": 1, "K": 10**3, "M": 10**6, "G": 10**9, "T": 10**12, "P": 10**15}
_NO_QUOTA = {"none", "0", "-", ""}


class PoolCollector:
    def __init__(self, pool: str = "data", runner: CommandRunner | None = None) -> None:
        self.pool = pool
        self.runner = runner or CommandRunner()

    def collect(self) -> CollectorResult[PoolData]:
        ts = datetime.now()
        warnings: list[str] = []
        notes: list[str] = []
        log.info("collect.start", pool=self.pool)

        status_cmd = ["zpool", "status", "-P", self.pool]
        sections = self._status_sections(status_cmd, self.runner.run(status_cmd))
        config_text = sections["config"]
        rows = self._config_rows(status_cmd, config_text)

        errors = ErrorCounters(
            read=sum(r[1] for r in rows),
            write=sum(r[2] for r in rows),
            checksum=sum(r[3] for r in rows),
        )
        data_rows = self._data_rows(rows)
        leaves = self._leaf_devices(data_rows)
        vdev_types = self._vdev_types(data_rows)
        if not leaves:
            raise NoDisksFound(self.pool)

        capacity, allocated, free, frag, size = self._pool_metrics()
        snapshot = PoolSnapshot(
            name=self.pool,
            capacity_percent=capacity,
            allocated_bytes=allocated,
            free_bytes=free,
            size_bytes=size,
            fragmentation_percent=frag,
            errors=errors,
            error_summary=sections["errors"].splitlines()[0].strip() if sections["errors"] else "",
            scrub_status=sections.get("scan", "").strip() or "unknown",
            redundancy=vdev_types[0] if vdev_types else None,
            vdev_types=vdev_types,
            config_text=config_text,
            refquota_bytes=self._refquota(),
        )

        disks: list[DiskInfo] = []
        for path in leaves:
            disk = self._disk_info(path)
            if disk.size_bytes is None:
                warnings.append(f"Failed to get size for disk {disk.device_path}; device might not be accessible")
                log.warning("collect.disk_unreadable", pool=self.pool, disk=disk.device_path)
            disks.append(disk)

        mounts = self._dataset_mounts(notes)

        status = "OK" if not warnings else "WARN"
        log.info("collect.done", pool=self.pool, disks=len(disks), status=status)
        return CollectorResult(
            ts=ts,
            status=status,
            warning_count=len(warnings),
            warnings=warnings,
            data=PoolData(snapshot=snapshot, disks=disks, mounts=mounts, notes=notes),
        )

    def _status_sections(self, cmd: list[str], out: str) -> dict[str, str]:
        sections: dict[str, list[str]] = {}
        current: str | None = None
        for line in out.splitlines():
            m = _STATUS_KEY.match(line)
            if m and m.group(1) not in sections:
                current = m.group(1)
                sections[current] = [m.group(2)] if m.group(2).strip() else []
                continue
            if current is not None:
                sections[current].append(line.strip() if current != "config" else line.rstrip())

        if "config" not in sections or "errors" not in sections:
            raise ParseError(cmd, out[:200], what="pool status")
        return {k: "\n".join(v).strip("\n") for k, v in sections.items()}

    def _config_rows(self, cmd: list[str], config_text: str) -> list[tuple[str, int, int, int]]:
        rows: list[tuple[str, int, int, int]] = []
        for line in config_text.splitlines():
            parts = line.split()
            if not parts or parts[0] == "NAME":
                continue
            if len(parts) >= 5 and _COUNT.match(parts[2]):
                rows.append(
                    (
                        parts[0],
                        self._parse_count(cmd, parts[2]),
                        self._parse_count(cmd, parts[3]),
                        self._parse_count(cmd, parts[4]),
                    )
                )
            else:
                rows.append((parts[0], 0, 0, 0))
        return rows

    def _parse_count(self, cmd: list[str], s: str) -> int:
        m = _COUNT.match(s)
        if not m:
            raise ParseError(cmd, s, what="error counter")
        return int(float(m.group(1)) * _COUNT_MULT[m.group(2)])

    def _data_rows(self, rows: list[tuple[str, int, int, int]]) -> list[tuple[str, int, int, int]]:
        # logs, cache, special, dedup and spares follow the data vdevs
        data: list[tuple[str, int, int, int]] = []
        for row in rows:
            if row[0] in _SECTION_HEADERS:
                break
            data.append(row)
        return data

    def _leaf_devices(self, rows: list[tuple[str, int, int, int]]) -> list[str]:
        leaves: list[str] = []
        for name, *_counts in rows:
            if name == self.pool or _VDEV_GROUP.match(name):
                continue
            leaves.append(name)
        return leaves

    def _vdev_types(self, rows: list[tuple[str, int, int, int]]) -> tuple[str, ...]:
        types: list[str] = []
        for name, *_counts in rows:
            m = _VDEV_GROUP.match(name)
            if m and m.group(1) not in ("spare", "replacing", "indirect") and m.group(1) not in types:
                types.append(m.group(1))
        return tuple(types)

    def _pool_metrics(self) -> tuple[int, int, int, int | None, int]:
        cmd = ["zpool", "list", "-Hp", "-o", "capacity,allocated,free,fragmentation,size", self.pool]
        out = self.runner.run(cmd).strip()
        fields = out.split("\t") if "\t" in out else out.split()
        if len(fields) != 5:
            raise ParseError(cmd, out, what="pool metrics")

        capacity = self._parse_int(cmd, fields[0])
        allocated = self._parse_int(cmd, fields[1])
        free = self._parse_int(cmd, fields[2])
        frag = None if fields[3].strip() == "-" else self._parse_int(cmd, fields[3])
        size = self._parse_int(cmd, fields[4])
        return capacity, allocated, free, frag, size

    def _parse_int(self, cmd: list[str], s: str) -> int:
        v = s.strip().rstrip("%")
        try:
            return int(v)
        except ValueError:
            raise ParseError(cmd, s, what="numeric field") from None

    def _refquota(self) -> int | None:
        cmd = ["zfs", "get", "-Hp", "-o", "value", "refquota", self.pool]
        out = self.runner.run(cmd).strip()
        if out in _NO_QUOTA:
            return None
        return self._parse_int(cmd, out)

    def _disk_info(self, path: str) -> DiskInfo:
        dev = path if path.startswith("/") else f"/dev/{path}"
        size: int | None = None
        try:
            out = self.runner.run(["lsblk", "-b", "-d", "-n", "-o", "SIZE", dev]).strip()
            size = int(out) if out else None
        except (CommandError, ValueError):
            size = None

        model = "Unknown"
        try:
            model = self.runner.run(["lsblk", "-d", "-n", "-o", "MODEL", dev]).strip() or "Unknown"
        except CommandError:
            pass
        return DiskInfo(name=os.path.basename(dev), size_bytes=size, model=model, path=dev)

    def _dataset_mounts(self, notes: list[str]) -> list[DatasetMount]:
        rows: list[DatasetMount] = []
        try:
            partitions = psutil.disk_partitions(all=True)
        except OSError as e:
            notes.append(f"Mounted dataset listing failed: {e}")
            return []

        for p in partitions:
            if p.fstype != "zfs":
                continue
            if p.device != self.pool and not p.device.startswith(self.pool + "/"):
                continue
            try:
                u = psutil.disk_usage(p.mountpoint)
            except OSError as e:
                notes.append(f"Usage unavailable for {p.mountpoint}: {e}")
                continue
            rows.append(
                DatasetMount(
                    dataset=str(p.device),
                    mountpoint=str(p.mountpoint),
                    total_bytes=int(u.total),
                    used_bytes=int(u.used),
                    free_bytes=int(u.free),
                    used_percent=float(u.percent),
                )
            )
        return rows
