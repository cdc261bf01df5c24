from __future__ import annotations

import json
import logging

import pytest
import structlog

from conftest import configure_test_logging
from zpool_safety.logging_setup import setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    configure_test_logging()


def test_json_logs_go_to_stderr(restore_logging, capsys):
    setup_logging("INFO", "json")

    structlog.get_logger("zpool_safety.test").info("probe", pool="data")

    captured = capsys.readouterr()
    assert captured.out == ""
    record = json.loads(captured.err.strip().splitlines()[-1])
    assert record["event"] == "probe"
    assert record["pool"] == "data"
    assert record["level"] == "info"


def test_level_filters_debug(restore_logging, capsys):
    setup_logging("WARNING", "console")

    structlog.get_logger("zpool_safety.test").debug("hidden")

    assert "hidden" not in capsys.readouterr().err
