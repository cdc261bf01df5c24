from __future__ import annotations

import html
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from zpool_safety.models.common import CollectorResult
from zpool_safety.models.findings import Finding, Recommendation
from zpool_safety.models.pool import PoolData


def recommend(findings: list[Finding]) -> Recommendation:
    if any(f.is_warning for f in findings):
        return Recommendation.KEEP_QUOTA
    return Recommendation.SAFE_TO_REMOVE


def human_bytes(n: int | None) -> str:
    if n is None:
        return "unknown"
    v = float(n)
    for unit in ("B", "KiB", "MiB", "GiB", "TiB"):
        if v < 1024.0:
            return f"{int(v)}{unit}" if unit == "B" else f"{v:.1f}{unit}"
        v /= 1024.0
    return f"{v:.1f}PiB"


@dataclass(frozen=True)
class ReportBundle:
    text: str
    html: str
    recommendation: Recommendation


class ReportService:
    def __init__(self, quota_percent: int = 95) -> None:
        self.quota_percent = int(quota_percent)

    def build_report(self, result: CollectorResult[PoolData], findings: list[Finding]) -> ReportBundle:
        d = result.data
        rec = recommend(findings)

        lines: list[str] = [f"=== ZFS POOL SAFETY REPORT: {d.snapshot.name} @ {result.ts:%F %T} ===", ""]
        lines.append(self._section_config(d))
        lines.append(self._section_health(d))
        lines.append(self._section_capacity(d))
        lines.append(self._section_disks(d))
        lines.append(self._section_mounts(d))
        lines.append(self._section_quota(d))
        lines.append(self._section_collection(result))
        lines.append(self._section_findings(findings))
        lines.append(self._section_recommendation(d, findings, rec))
        lines.append(self._section_support(d))
        text_out = "\n".join(lines).strip() + "\n"

        return ReportBundle(text=text_out, html=self._wrap_html(d.snapshot.name, text_out), recommendation=rec)

    def quota_command(self, data: PoolData) -> str:
        target = data.snapshot.size_bytes * self.quota_percent // 100
        return f"zfs set refquota={target} {data.snapshot.name}"

    def default_report_path(self) -> Path:
        base = Path.home() / "zpool_safety_reports"
        base.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d-%H%M%S")
        return base / f"zpool_report_{ts}.html"

    def write_html(self, path: str | os.PathLike[str], html_str: str) -> str:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(html_str, encoding="utf-8")
        return str(p)

    def _section_config(self, d: PoolData) -> str:
        s = d.snapshot
        config = "\n".join(f"  {line}" for line in s.config_text.splitlines() if line.strip())
        return (
            "[Pool Configuration]\n"
            f"- redundancy: {s.redundancy or 'none detected'}\n"
            f"- config:\n{config}\n"
        )

    def _section_health(self, d: PoolData) -> str:
        s = d.snapshot
        scrub = s.scrub_status.replace("\n", "\n  ")
        return (
            "[Pool Health]\n"
            f"- last scrub: {scrub}\n"
            f"- errors: {s.error_summary or '(missing)'}\n"
            f"- read/write/checksum: {s.errors.read}/{s.errors.write}/{s.errors.checksum}\n"
        )

    def _section_capacity(self, d: PoolData) -> str:
        s = d.snapshot
        frag = f"{s.fragmentation_percent}%" if s.fragmentation_percent is not None else "n/a"
        return (
            "[Pool Capacity]\n"
            f"- capacity: {s.capacity_percent}%\n"
            f"- allocated: {human_bytes(s.allocated_bytes)} ({s.allocated_bytes} bytes)\n"
            f"- free: {human_bytes(s.free_bytes)} ({s.free_bytes} bytes)\n"
            f"- total size: {human_bytes(s.size_bytes)} ({s.size_bytes} bytes)\n"
            f"- fragmentation: {frag}\n"
        )

    def _section_disks(self, d: PoolData) -> str:
        rows: list[str] = []
        for disk in d.disks:
            if disk.size_bytes is None:
                rows.append(f"  - {disk.device_path}: size unavailable, model {disk.model}")
            else:
                rows.append(
                    f"  - {disk.device_path}: {human_bytes(disk.size_bytes)} ({disk.size_bytes} bytes), model {disk.model}"
                )
        return f"[Disks]\n- count: {len(d.disks)}\n" + "\n".join(rows) + "\n"

    def _section_mounts(self, d: PoolData) -> str:
        if not d.mounts and not d.notes:
            return "[Mounted Datasets]\n- (none)\n"
        rows = [
            f"  - {m.dataset} on {m.mountpoint}: {m.used_percent:.1f}% "
            f"({human_bytes(m.used_bytes)}/{human_bytes(m.total_bytes)})"
            for m in d.mounts
        ]
        rows.extend(f"  - note: {n}" for n in d.notes)
        return "[Mounted Datasets]\n" + "\n".join(rows) + "\n"

    def _section_quota(self, d: PoolData) -> str:
        s = d.snapshot
        if s.refquota_bytes is None:
            return "[Quota Analysis]\n- refquota: none set\n"
        pct = s.refquota_bytes * 100 / s.size_bytes if s.size_bytes else 0.0
        return (
            "[Quota Analysis]\n"
            f"- refquota: {human_bytes(s.refquota_bytes)} ({s.refquota_bytes} bytes)\n"
            f"- pool total size: {human_bytes(s.size_bytes)}\n"
            f"- quota percentage: {pct:.2f}%\n"
        )

    def _section_collection(self, r: CollectorResult[PoolData]) -> str:
        if not r.warnings:
            return f"[Collection]\n- status: {r.status}\n"
        rows = "\n".join(f"  - {w}" for w in r.warnings)
        return f"[Collection]\n- status: {r.status} (warnings={r.warning_count})\n{rows}\n"

    def _section_findings(self, findings: list[Finding]) -> str:
        if not findings:
            return "[Findings]\n- (none)\n"
        rows = "\n".join(f"- {f.severity.value.upper()} [{f.kind.value}]: {f.message}" for f in findings)
        return f"[Findings]\n{rows}\n"

    def _section_recommendation(self, d: PoolData, findings: list[Finding], rec: Recommendation) -> str:
        s = d.snapshot
        if rec is Recommendation.KEEP_QUOTA:
            reasons = "\n".join(f"  - {f.message}" for f in findings if f.is_warning)
            return (
                "[Recommendation]\n"
                "KEEP QUOTA PROTECTION ENABLED\n"
                f"- reasons:\n{reasons}\n"
                f"- action: maintain current quota or set it to {self.quota_percent}% of pool size:\n"
                f"  {self.quota_command(d)}\n"
            )

        sized = d.readable_disks
        ref = human_bytes(sized[0].size_bytes) if sized else "unknown"
        frag = f"{s.fragmentation_percent}%" if s.fragmentation_percent is not None else "n/a"
        return (
            "[Recommendation]\n"
            "SAFE TO REMOVE QUOTA\n"
            "- confirmed conditions:\n"
            f"  - all disks are identical in size: {ref}\n"
            f"  - {s.redundancy or 'redundant'} configuration confirmed with {len(d.disks)} disks\n"
            "  - pool is healthy with no errors\n"
            f"  - current capacity: {s.capacity_percent}%\n"
            f"  - fragmentation: {frag}\n"
            f"- action: zfs set refquota=none {s.name}\n"
            f"- conservative alternative, keeping a {100 - self.quota_percent}% safety margin:\n"
            f"  {self.quota_command(d)}\n"
        )

    def _section_support(self, d: PoolData) -> str:
        s = d.snapshot
        frag = f"{s.fragmentation_percent}%" if s.fragmentation_percent is not None else "n/a"
        return (
            "[Notes for Support]\n"
            "1. Review the full report above, especially any WARNING lines\n"
            f"2. Layout: {s.redundancy or 'no redundancy'} with {len(d.disks)} disks "
            f"({', '.join(disk.name for disk in d.disks)})\n"
            "3. Check pool health indicators:\n"
            "   - last scrub status\n"
            f"   - current capacity: {s.capacity_percent}%\n"
            f"   - fragmentation: {frag}\n"
            f"   - error status: {s.error_summary or '(missing)'}\n"
            "4. If no warnings are listed, it is safe to proceed with the recommended action\n"
            "5. Document your findings and the action taken in the ticket\n"
        )

    def _wrap_html(self, pool: str, text_out: str) -> str:
        escaped = html.escape(text_out)
        title = html.escape(f"ZFS Pool Safety Report: {pool}")
        return (
            "<!doctype html>"
            "<html><head><meta charset='utf-8'>"
            "<meta name='viewport' content='width=device-width, initial-scale=1'>"
            f"<title>{title}</title>"
            "<style>body{font-family:ui-monospace,Menlo,Consolas,monospace;margin:24px;}"
            "pre{white-space:pre-wrap;line-height:1.35;}"
            "</style></head><body>"
            f"<h1>{title}</h1>"
            f"<pre>{escaped}</pre>"
            "</body></html>"
        )
