"""Tests for storepulse/logging_config.py: section tagging and per-logger levels."""

import json
import logging
from unittest.mock import AsyncMock, patch

import pytest

from storepulse.collaborators.environment import EnvironmentSnapshot
from storepulse.diagnostics.runner import DiagnosticsConsole
from storepulse.logging_config import JsonFormatter, SectionFilter, section_context, setup_logging

TOUCHED_LOGGERS = ["storepulse", "storepulse.probes.http", "storepulse.probes.kvstore", "httpx", "redis"]


@pytest.fixture(autouse=True)
def restore_logging():
    """setup_logging reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    saved_levels = {name: logging.getLogger(name).level for name in TOUCHED_LOGGERS}
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    for name, level in saved_levels.items():
        logging.getLogger(name).setLevel(level)


def make_record(msg="hello"):
    return logging.LogRecord("storepulse.test", logging.INFO, __file__, 1, msg, None, None)


class TestSectionContext:
    def test_outside_any_section(self):
        record = make_record()
        SectionFilter().filter(record)
        assert record.section == "-"

    def test_tagged_inside_section(self):
        record = make_record()
        with section_context("Redis"):
            SectionFilter().filter(record)
        assert record.section == "Redis"

    def test_nested_sections_restore(self):
        filt = SectionFilter()
        with section_context("Redis"):
            with section_context("Benchmarks"):
                inner = make_record()
                filt.filter(inner)
            outer = make_record()
            filt.filter(outer)
        after = make_record()
        filt.filter(after)
        assert (inner.section, outer.section, after.section) == ("Benchmarks", "Redis", "-")


def test_json_formatter_includes_section():
    record = make_record("slow query")
    with section_context("Database Latency"):
        SectionFilter().filter(record)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["section"] == "Database Latency"
    assert payload["message"] == "slow query"
    assert payload["level"] == "INFO"


class TestSetupLogging:
    def test_file_log_is_json_with_section(self, tmp_path):
        logs_dir = tmp_path / "logs"
        setup_logging("INFO", str(logs_dir), json_logs=False)

        with section_context("Disk Space"):
            logging.getLogger("storepulse.probes.filesystem").warning("disk nearly full")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = (logs_dir / "storepulse.log").read_text().splitlines()
        entries = [json.loads(line) for line in lines]
        assert entries[-1]["section"] == "Disk Space"
        assert entries[-1]["message"] == "disk nearly full"

    def test_chatty_libraries_quieted(self, tmp_path):
        setup_logging("DEBUG", str(tmp_path), json_logs=True)
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("redis").level == logging.WARNING

    def test_logger_override_below_global_level(self, tmp_path):
        setup_logging("WARNING", str(tmp_path), json_logs=False, logger_levels={"storepulse.probes.http": "DEBUG"})
        assert logging.getLogger("storepulse.probes.http").isEnabledFor(logging.DEBUG)
        assert not logging.getLogger("storepulse.probes.kvstore").isEnabledFor(logging.INFO)

    def test_override_can_raise_a_library_level(self, tmp_path):
        setup_logging("INFO", str(tmp_path), json_logs=False, logger_levels={"httpx": "DEBUG"})
        assert logging.getLogger("httpx").level == logging.DEBUG


@pytest.mark.asyncio
async def test_console_tags_records_with_running_section(probe_config, caplog):
    caplog.handler.addFilter(SectionFilter())
    console = DiagnosticsConsole(probe_config, environment=EnvironmentSnapshot(hostname="web01"))
    with patch("storepulse.diagnostics.runner.check_disk_space", AsyncMock(side_effect=RuntimeError("boom"))):
        with caplog.at_level(logging.ERROR, logger="storepulse"):
            await console.run_all(only={"Disk Space"})

    crashed = [r for r in caplog.records if "crashed" in r.getMessage()]
    assert crashed
    assert crashed[0].section == "Disk Space"
