from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import structlog

log = structlog.get_logger(__name__)

POOL_ENV = "ZPOOL_SAFETY_POOL"


@dataclass(frozen=True)
class AnalyzerConfig:
    pool: str = "data"
    redundancy_marker: str = "raidz2"
    capacity_note_percent: int = 80
    fragmentation_note_percent: int = 50
    quota_percent: int = 95

    @classmethod
    def from_dict(cls, cfg: dict[str, Any]) -> AnalyzerConfig:
        defaults = cls()
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            raw = cfg.get(f.name)
            if raw is None:
                continue
            default = getattr(defaults, f.name)
            try:
                kwargs[f.name] = type(default)(raw)
            except (TypeError, ValueError):
                log.warning("config.invalid_value", key=f.name, value=raw)
        return cls(**kwargs)


@dataclass(frozen=True)
class ConfigPaths:
    path: Path


class ConfigService:
    def __init__(self, paths: ConfigPaths | None = None) -> None:
        self.paths = paths or ConfigPaths(path=self.default_path())

    @staticmethod
    def default_path() -> Path:
        xdg = os.environ.get("XDG_CONFIG_HOME")
        if xdg:
            base = Path(xdg)
        else:
            base = Path.home() / ".config"
        return base / "zpool_safety" / "config.json"

    def load(self) -> dict[str, Any]:
        p = self.paths.path
        if not p.exists():
            return {}
        try:
            with open(p, "r", encoding="utf-8") as f:
                obj = json.load(f)
        except (OSError, ValueError) as e:
            log.warning("config.unreadable", path=str(p), error=str(e))
            return {}
        return obj if isinstance(obj, dict) else {}

    def resolve(self) -> AnalyzerConfig:
        cfg = self.load()
        pool = os.environ.get(POOL_ENV)
        if pool:
            cfg["pool"] = pool
        return AnalyzerConfig.from_dict(cfg)
