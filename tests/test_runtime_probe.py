"""Tests for the interpreter runtime probe and PHP collaborator."""

import json
from unittest.mock import AsyncMock

import pytest

from storepulse.collaborators.php import PhpRuntime, RuntimeSnapshot, parse_ini_bytes
from storepulse.collaborators.shell import ShellResult, ShellRunner
from storepulse.constants import PERFORMANCE_EXTENSIONS, REQUIRED_EXTENSIONS
from storepulse.diagnostics.checks import Severity
from storepulse.diagnostics.thresholds import ThresholdTable
from storepulse.exceptions import MeasurementFailedError
from storepulse.probes.runtime import check_runtime_config, classify_runtime

ALL_EXTENSIONS = frozenset(REQUIRED_EXTENSIONS + PERFORMANCE_EXTENSIONS)


def snapshot(**ini):
    return RuntimeSnapshot(version="8.3.4", ini=ini, extensions=ALL_EXTENSIONS)


def find(checks, prefix):
    return next(c for c in checks if c.message.startswith(prefix))


@pytest.mark.parametrize(
    "value, expected",
    [("512M", 512 * 1024 ** 2), ("2G", 2 * 1024 ** 3), ("-1", -1), ("1024", 1024), ("64k", 65536), (None, None)],
)
def test_parse_ini_bytes(value, expected):
    assert parse_ini_bytes(value) == expected


def test_parse_ini_bytes_rejects_garbage():
    with pytest.raises(ValueError):
        parse_ini_bytes("lots")


class TestClassifyRuntime:
    @pytest.fixture
    def thresholds(self):
        return ThresholdTable()

    @pytest.mark.parametrize(
        "limit, expected",
        [("756M", Severity.ERROR), ("2G", Severity.SUCCESS), ("4096M", Severity.SUCCESS), ("-1", Severity.SUCCESS)],
    )
    def test_memory_limit(self, thresholds, limit, expected):
        checks = classify_runtime(snapshot(memory_limit=limit), thresholds)
        assert find(checks, "memory_limit").severity == expected

    @pytest.mark.parametrize(
        "seconds, expected",
        [("30", Severity.WARNING), ("0", Severity.SUCCESS), ("1800", Severity.SUCCESS), ("18000", Severity.SUCCESS)],
    )
    def test_max_execution_time(self, thresholds, seconds, expected):
        checks = classify_runtime(snapshot(memory_limit="2G", max_execution_time=seconds), thresholds)
        assert find(checks, "max_execution_time").severity == expected

    def test_realpath_cache(self, thresholds):
        checks = classify_runtime(snapshot(memory_limit="2G", realpath_cache_size="4096K"), thresholds)
        assert find(checks, "realpath_cache_size").severity == Severity.WARNING

    def test_missing_extensions(self, thresholds):
        runtime = RuntimeSnapshot(
            version="8.3.4",
            ini={"memory_limit": "2G"},
            extensions=ALL_EXTENSIONS - {"intl", "redis"},
        )
        checks = classify_runtime(runtime, thresholds)
        assert find(checks, "Required PHP extension missing: intl").severity == Severity.ERROR
        assert find(checks, "Performance extension redis").severity == Severity.WARNING
        assert not any(c.message.startswith("Required PHP extensions: all") for c in checks)

    def test_extension_lookup_is_case_insensitive(self):
        runtime = RuntimeSnapshot(version="8.3", extensions=frozenset({"Zend OPcache", "PDO_MYSQL"}))
        assert runtime.has_extension("zend opcache")
        assert runtime.has_extension("pdo_mysql")
        assert not runtime.has_extension("apcu")


class TestPhpRuntime:
    @pytest.mark.asyncio
    async def test_reads_runtime_once(self):
        payload = {
            "version": "8.2.10",
            "sapi": "cli",
            "ini": {"memory_limit": "2G"},
            "extensions": ["Core", "intl"],
        }
        shell = AsyncMock()
        shell.run.return_value = ShellResult(0, json.dumps(payload))
        runtime = PhpRuntime(shell, "php")

        first = await runtime.read_runtime()
        second = await runtime.read_runtime()

        assert first is second
        assert first.version == "8.2.10"
        assert first.has_extension("intl")
        shell.run.assert_awaited_once()
        argv = shell.run.await_args.args[0]
        assert argv[:2] == ["php", "-r"]

    @pytest.mark.asyncio
    async def test_nonzero_exit(self):
        shell = AsyncMock()
        shell.run.return_value = ShellResult(255, "", "PHP Fatal error")
        with pytest.raises(MeasurementFailedError):
            await PhpRuntime(shell).read_runtime()

    @pytest.mark.asyncio
    async def test_probe_reports_shell_failure(self, probe_config):
        shell = AsyncMock()
        shell.run.return_value = ShellResult(0, "not json")
        checks = await check_runtime_config(PhpRuntime(shell), probe_config)
        assert len(checks) == 1
        assert checks[0].severity == Severity.ERROR
        assert "PHP configuration check error" in checks[0].message


@pytest.mark.asyncio
async def test_probe_without_shell_warns(probe_config):
    checks = await check_runtime_config(PhpRuntime(ShellRunner(enabled=False)), probe_config)
    assert len(checks) == 1
    assert checks[0].severity == Severity.WARNING
    assert checks[0].message.startswith("PHP runtime not inspected")
