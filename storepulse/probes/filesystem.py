"""
Filesystem usage probes: directory sizes, disk space and permissions.

Directory sizing prefers `du`/`find` through the ShellRunner and falls back
to an in-process walk when the tools are unavailable, fail or time out.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import stat
from pathlib import Path

from ..collaborators.shell import ShellRunner
from ..constants import (
    DIRECTORY_FILE_COUNT_LIMITS,
    DIRECTORY_SIZE_THRESHOLDS_MB,
    WRITABLE_DIRECTORIES,
)
from ..diagnostics.checks import Check, CheckList, Severity
from ..diagnostics.probe import ProbeConfig, probe
from ..diagnostics.thresholds import ThresholdTable, classify_directory_size, classify_disk_usage
from ..exceptions import CollaboratorUnavailableError

logger = logging.getLogger(__name__)

_MB = 1024 * 1024


def _walk(path: Path) -> tuple[int, int]:
    """Return (total bytes, file count) without following symlinks."""
    total = 0
    count = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for name in filenames:
            try:
                st = os.lstat(os.path.join(dirpath, name))
            except OSError:
                continue
            if stat.S_ISREG(st.st_mode):
                total += st.st_size
                count += 1
    return total, count


async def directory_size(path: Path, shell: ShellRunner | None) -> int:
    """Recursive size in bytes."""
    if shell is not None:
        try:
            result = await shell.run(["du", "-sb", str(path)])
            if result.ok:
                return int(result.stdout.split()[0])
            logger.debug("du exited %d for %s, walking instead", result.exit_code, path)
        except (CollaboratorUnavailableError, PermissionError, ValueError, IndexError) as e:
            logger.debug("du unavailable for %s (%s), walking instead", path, e)
    total, _ = await asyncio.to_thread(_walk, path)
    return total


async def file_count(path: Path, shell: ShellRunner | None) -> int:
    """Recursive regular-file count."""
    if shell is not None:
        try:
            result = await shell.run(["find", str(path), "-type", "f", "-printf", "."])
            if result.ok:
                return len(result.stdout.strip())
            logger.debug("find exited %d for %s, walking instead", result.exit_code, path)
        except (CollaboratorUnavailableError, PermissionError) as e:
            logger.debug("find unavailable for %s (%s), walking instead", path, e)
    _, count = await asyncio.to_thread(_walk, path)
    return count


def classify_directory(name: str, size_bytes: int, threshold_mb: float) -> Check:
    size_mb = size_bytes / _MB
    severity = classify_directory_size(size_mb, threshold_mb)
    if severity == Severity.ERROR:
        return Check.error(f"{name}: {size_mb:,.1f}MB - more than double the {threshold_mb:,.0f}MB limit, clean up")
    if severity == Severity.WARNING:
        return Check.warning(f"{name}: {size_mb:,.1f}MB - above the {threshold_mb:,.0f}MB limit")
    return Check.success(f"{name}: {size_mb:,.1f}MB")


def classify_disk(total: int, free: int, thresholds: ThresholdTable) -> Check:
    if total <= 0:
        return Check.error("Disk space: total size reported as 0")
    percent = (total - free) / total * 100
    warning, error = thresholds.pair("disk_usage_percent")
    severity = classify_disk_usage(percent, warning, error)
    message = f"Disk usage: {percent:.1f}% ({free / (1024 ** 3):,.1f}GB free of {total / (1024 ** 3):,.1f}GB)"
    if severity == Severity.ERROR:
        return Check.error(f"{message} - CRITICAL")
    if severity == Severity.WARNING:
        return Check.warning(f"{message} - HIGH")
    return Check.success(message)


@probe("Filesystem")
async def check_directory_sizes(shell: ShellRunner | None, config: ProbeConfig) -> CheckList:
    checks: CheckList = []
    for name, threshold_mb in DIRECTORY_SIZE_THRESHOLDS_MB.items():
        path = config.magento_root / name
        if not path.is_dir():
            checks.append(Check.info(f"{name}: not present"))
            continue
        checks.append(classify_directory(name, await directory_size(path, shell), threshold_mb))

        limit = DIRECTORY_FILE_COUNT_LIMITS.get(name)
        if limit is not None:
            count = await file_count(path, shell)
            if count > limit:
                checks.append(Check.warning(f"{name}: {count:,} files - more than {limit:,}"))
            else:
                checks.append(Check.info(f"{name}: {count:,} files"))
    return checks


@probe("Disk space")
async def check_disk_space(config: ProbeConfig) -> CheckList:
    usage = shutil.disk_usage(config.magento_root)
    return [classify_disk(usage.total, usage.free, config.thresholds)]


@probe("Permissions")
async def check_permissions(config: ProbeConfig) -> CheckList:
    checks: CheckList = []
    for name in WRITABLE_DIRECTORIES:
        path = config.magento_root / name
        if not path.exists():
            checks.append(Check.warning(f"{name}: missing"))
            continue
        if not os.access(path, os.W_OK):
            checks.append(Check.error(f"{name}: not writable by the current user"))
            continue
        mode = path.stat().st_mode
        if mode & stat.S_IWOTH:
            checks.append(Check.warning(f"{name}: world-writable ({stat.filemode(mode)})"))
        else:
            checks.append(Check.success(f"{name}: writable ({stat.filemode(mode)})"))
    return checks
