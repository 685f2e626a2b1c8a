"""Tests for the filesystem usage probes."""

import os
from collections import namedtuple
from unittest.mock import AsyncMock, patch

import pytest

from storepulse.collaborators.shell import ShellResult
from storepulse.diagnostics.checks import Severity
from storepulse.diagnostics.thresholds import ThresholdTable
from storepulse.exceptions import CollaboratorUnavailableError
from storepulse.probes.filesystem import (
    check_directory_sizes,
    check_disk_space,
    check_permissions,
    classify_directory,
    classify_disk,
    directory_size,
    file_count,
)

MB = 1024 * 1024
DiskUsage = namedtuple("DiskUsage", "total used free")


def test_classify_directory_tiers():
    assert classify_directory("var/log", 250 * MB, 100).severity == Severity.ERROR
    assert classify_directory("var/log", 150 * MB, 100).severity == Severity.WARNING
    assert classify_directory("var/log", 50 * MB, 100).severity == Severity.SUCCESS


@pytest.mark.parametrize(
    "free, expected",
    [(5, Severity.ERROR), (15, Severity.WARNING), (50, Severity.SUCCESS), (10, Severity.WARNING)],
)
def test_classify_disk(free, expected):
    check = classify_disk(100, free, ThresholdTable())
    assert check.severity == expected


class TestDirectorySizing:
    @pytest.fixture
    def tree(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "one.txt").write_bytes(b"x" * 100)
        (tmp_path / "two.txt").write_bytes(b"y" * 50)
        return tmp_path

    @pytest.mark.asyncio
    async def test_walk_without_shell(self, tree):
        assert await directory_size(tree, None) == 150
        assert await file_count(tree, None) == 2

    @pytest.mark.asyncio
    async def test_uses_du_output(self, tree):
        shell = AsyncMock()
        shell.run.return_value = ShellResult(0, f"4096\t{tree}\n")
        assert await directory_size(tree, shell) == 4096
        assert shell.run.await_args.args[0][:2] == ["du", "-sb"]

    @pytest.mark.asyncio
    async def test_uses_find_output(self, tree):
        shell = AsyncMock()
        shell.run.return_value = ShellResult(0, "...")
        assert await file_count(tree, shell) == 3

    @pytest.mark.asyncio
    async def test_falls_back_when_shell_unavailable(self, tree):
        shell = AsyncMock()
        shell.run.side_effect = CollaboratorUnavailableError("Shell execution is disabled")
        assert await directory_size(tree, shell) == 150
        assert await file_count(tree, shell) == 2

    @pytest.mark.asyncio
    async def test_falls_back_on_nonzero_exit(self, tree):
        shell = AsyncMock()
        shell.run.return_value = ShellResult(1, "", "du: invalid option -- 'b'")
        assert await directory_size(tree, shell) == 150


class TestDirectoryProbe:
    @pytest.mark.asyncio
    async def test_reports_present_and_missing(self, magento_root, probe_config):
        log_dir = magento_root / "var" / "log"
        log_dir.mkdir(parents=True)
        (log_dir / "system.log").write_bytes(b"z" * 1024)
        report_dir = magento_root / "var" / "report"
        report_dir.mkdir()
        (report_dir / "123").write_text("trace")

        checks = await check_directory_sizes(None, probe_config)

        messages = {c.message.split(":")[0]: c for c in checks if not c.message.endswith("files")}
        assert messages["var/log"].severity == Severity.SUCCESS
        assert messages["var/cache"].severity == Severity.INFO
        assert "not present" in messages["var/cache"].message
        counts = [c for c in checks if c.message.endswith("files")]
        assert counts[0].message == "var/report: 1 files"

    @pytest.mark.asyncio
    async def test_oversized_directory(self, magento_root, probe_config):
        (magento_root / "var" / "log").mkdir(parents=True)
        shell = AsyncMock()
        shell.run.return_value = ShellResult(0, f"{3000 * MB}\tvar/log\n")
        checks = await check_directory_sizes(shell, probe_config)
        log_check = next(c for c in checks if c.message.startswith("var/log"))
        assert log_check.severity == Severity.ERROR


class TestDiskSpaceProbe:
    @pytest.mark.asyncio
    async def test_high_usage(self, probe_config):
        with patch("storepulse.probes.filesystem.shutil.disk_usage", return_value=DiskUsage(100, 95, 5)):
            checks = await check_disk_space(probe_config)
        assert len(checks) == 1
        assert checks[0].severity == Severity.ERROR
        assert "95.0%" in checks[0].message

    @pytest.mark.asyncio
    async def test_missing_root_reported_as_error(self, tmp_path, probe_config):
        from dataclasses import replace

        config = replace(probe_config, magento_root=tmp_path / "does-not-exist")
        checks = await check_disk_space(config)
        assert len(checks) == 1
        assert checks[0].severity == Severity.ERROR
        assert checks[0].message.startswith("Disk space check error")


class TestPermissionsProbe:
    @pytest.mark.asyncio
    async def test_missing_and_writable(self, magento_root, probe_config):
        var = magento_root / "var"
        var.mkdir()
        os.chmod(var, 0o755)
        checks = await check_permissions(probe_config)
        by_name = {c.message.split(":")[0]: c.severity for c in checks}
        assert by_name["var"] == Severity.SUCCESS
        assert by_name["generated"] == Severity.WARNING

    @pytest.mark.asyncio
    async def test_world_writable(self, magento_root, probe_config):
        var = magento_root / "var"
        var.mkdir()
        os.chmod(var, 0o777)
        checks = await check_permissions(probe_config)
        assert checks[0].severity == Severity.WARNING
        assert "world-writable" in checks[0].message
