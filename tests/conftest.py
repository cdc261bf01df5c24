"""
Shared fixtures: a fake command runner serving canned zpool/zfs/lsblk output.
"""
from __future__ import annotations

from collections.abc import Sequence

import pytest

from zpool_safety.collectors.command_runner import CommandRunner
from zpool_safety.errors import CommandError

TB4 = 4000787030016
POOL_SIZE = 20000000000000


class FakeRunner(CommandRunner):
    def __init__(self, outputs: dict[str, object]) -> None:
        self.outputs = dict(outputs)
        self.calls: list[list[str]] = []

    def run(self, cmd: list[str]) -> str:
        self.calls.append(list(cmd))
        key = " ".join(cmd)
        if key not in self.outputs:
            raise CommandError(cmd, "executable not found")
        out = self.outputs[key]
        if isinstance(out, Exception):
            raise out
        return str(out)


def zpool_status(
    pool: str = "data",
    disks: Sequence[str] = ("sdc", "sdd", "sde", "sdf", "sdg"),
    vdev: str | None = "raidz2-0",
    errors: str = "No known data errors",
    counters: dict[str, tuple[str, str, str]] | None = None,
    extra_rows: Sequence[str] = (),
) -> str:
    counters = counters or {}
    lines = [
        f"  pool: {pool}",
        " state: ONLINE",
        "  scan: scrub repaired 0B in 05:12:33 with 0 errors on Sun Nov 10 05:36:34 2024",
        "config:",
        "",
        "\tNAME        STATE     READ WRITE CKSUM",
        f"\t{pool}        ONLINE       0     0     0",
    ]
    indent = "\t  "
    if vdev:
        lines.append(f"\t  {vdev}  ONLINE       0     0     0")
        indent = "\t    "
    for d in disks:
        r, w, c = counters.get(d, ("0", "0", "0"))
        path = d if d.startswith("/") else f"/dev/{d}"
        lines.append(f"{indent}{path}     ONLINE       {r}     {w}     {c}")
    lines.extend(extra_rows)
    lines.extend(["", f"errors: {errors}", ""])
    return "\n".join(lines)


def pool_outputs(
    pool: str = "data",
    sizes: dict[str, int | None] | None = None,
    vdev: str | None = "raidz2-0",
    capacity: str = "45",
    frag: str = "12",
    errors: str = "No known data errors",
    counters: dict[str, tuple[str, str, str]] | None = None,
    refquota: str = "none",
    size: int = POOL_SIZE,
) -> dict[str, object]:
    if sizes is None:
        sizes = {d: TB4 for d in ("sdc", "sdd", "sde", "sdf", "sdg")}
    alloc = size * int(capacity.rstrip("%")) // 100
    out: dict[str, object] = {
        f"zpool status -P {pool}": zpool_status(
            pool=pool, disks=list(sizes), vdev=vdev, errors=errors, counters=counters
        ),
        f"zpool list -Hp -o capacity,allocated,free,fragmentation,size {pool}": (
            f"{capacity}\t{alloc}\t{size - alloc}\t{frag}\t{size}\n"
        ),
        f"zfs get -Hp -o value refquota {pool}": f"{refquota}\n",
    }
    for name, disk_size in sizes.items():
        if disk_size is not None:
            out[f"lsblk -b -d -n -o SIZE /dev/{name}"] = f"{disk_size}\n"
        out[f"lsblk -d -n -o MODEL /dev/{name}"] = "WDC WD40EFRX-68N\n"
    return out


@pytest.fixture(autouse=True)
def _no_host_mounts(monkeypatch):
    import psutil

    monkeypatch.setattr(psutil, "disk_partitions", lambda all=True: [])


@pytest.fixture
def make_runner():
    def _make(**kwargs) -> FakeRunner:
        return FakeRunner(pool_outputs(**kwargs))

    return _make


def configure_test_logging() -> None:
    import structlog

    structlog.configure(
        processors=[structlog.stdlib.add_log_level, structlog.dev.ConsoleRenderer(colors=False)],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True, scope="session")
def _structlog_to_stdlib():
    configure_test_logging()
    yield
