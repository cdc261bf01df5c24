from __future__ import annotations

import json

from zpool_safety.services.config_service import AnalyzerConfig, ConfigPaths, ConfigService, POOL_ENV


def test_defaults_when_file_missing(tmp_path, monkeypatch):
    monkeypatch.delenv(POOL_ENV, raising=False)
    cfg = ConfigService(ConfigPaths(path=tmp_path / "missing.json")).resolve()

    assert cfg == AnalyzerConfig()
    assert cfg.pool == "data"
    assert cfg.quota_percent == 95


def test_default_path_follows_xdg(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    assert ConfigService.default_path() == tmp_path / "zpool_safety" / "config.json"


def test_file_values_and_env_override(tmp_path, monkeypatch):
    p = tmp_path / "config.json"
    p.write_text(json.dumps({"pool": "tank", "capacity_note_percent": "70", "unknown": 1}), encoding="utf-8")
    svc = ConfigService(ConfigPaths(path=p))

    monkeypatch.delenv(POOL_ENV, raising=False)
    assert svc.resolve().pool == "tank"
    assert svc.resolve().capacity_note_percent == 70

    monkeypatch.setenv(POOL_ENV, "backup")
    assert svc.resolve().pool == "backup"


def test_malformed_file_falls_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv(POOL_ENV, raising=False)
    p = tmp_path / "config.json"
    p.write_text("{not json", encoding="utf-8")

    assert ConfigService(ConfigPaths(path=p)).resolve() == AnalyzerConfig()


def test_invalid_value_keeps_default():
    cfg = AnalyzerConfig.from_dict({"quota_percent": "ninety"})

    assert cfg.quota_percent == 95
