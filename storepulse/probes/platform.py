"""
Platform version and production-flag probes.

Versions are compared against two chained cutoffs (very old -> error,
moderately old -> warning). Flags are read from core_config_data at default
scope and compared with the value expected in production.
"""

from __future__ import annotations

import re

from ..collaborators.php import PhpRuntime, read_runtime_or_none
from ..collaborators.project import MagentoProject
from ..collaborators.sql import SqlConnection
from ..constants import MAGENTO_PACKAGES, PRODUCTION_FLAG_POLICY, VERSION_CUTOFFS
from ..diagnostics.checks import Check, CheckList
from ..diagnostics.probe import ProbeConfig, probe

_FLAGS_SQL = (
    "SELECT path, value FROM core_config_data "
    "WHERE scope = 'default' AND scope_id = 0 AND (path LIKE 'dev/%' OR path LIKE 'system/full_page_cache/%')"
)


def parse_version(version: str) -> tuple[int, ...]:
    """Leading numeric components: "2.4.7-p3" -> (2, 4, 7)."""
    match = re.match(r"v?(\d+(?:\.\d+)*)", version.strip())
    if not match:
        raise ValueError(f"Unparseable version: {version!r}")
    return tuple(int(part) for part in match.group(1).split("."))


def compare_versions(left: str, right: str) -> int:
    a, b = parse_version(left), parse_version(right)
    width = max(len(a), len(b))
    a += (0,) * (width - len(a))
    b += (0,) * (width - len(b))
    return (a > b) - (a < b)


def classify_version(label: str, version: str, cutoffs: tuple[str, str]) -> Check:
    very_old, moderately_old = cutoffs
    if compare_versions(version, very_old) < 0:
        return Check.error(f"{label} {version} - unsupported, upgrade to {moderately_old} or later")
    if compare_versions(version, moderately_old) < 0:
        return Check.warning(f"{label} {version} - outdated, upgrade to {moderately_old} or later")
    return Check.success(f"{label} {version} - current")


def classify_deploy_mode(mode: str | None, production: bool) -> Check:
    if mode is None:
        return Check.warning("Deploy mode: unknown (app/etc/env.php not found)")
    if not production or mode == "production":
        return Check.success(f"Deploy mode: {mode}")
    if mode == "developer":
        return Check.error("Deploy mode: developer - switch to production mode")
    return Check.warning(f"Deploy mode: {mode} - switch to production mode")


def classify_flags(values: dict[str, str | None], production: bool) -> CheckList:
    checks: CheckList = []
    for path, label, expected, default in PRODUCTION_FLAG_POLICY:
        value = values.get(path)
        actual = default if value is None else str(value)
        if not production:
            checks.append(Check.info(f"{label}: {actual}"))
        elif actual == expected:
            checks.append(Check.success(f"{label}: {actual} (expected {expected})"))
        else:
            checks.append(Check.warning(f"{label}: {actual} - expected {expected} in production ({path})"))
    return checks


@probe("Platform versions")
async def check_versions(
    project: MagentoProject,
    runtime: PhpRuntime | None,
    config: ProbeConfig,
) -> CheckList:
    checks: CheckList = []

    magento_version = project.package_version(*MAGENTO_PACKAGES)
    if magento_version is None:
        checks.append(Check.warning("Magento version: not found in composer.lock"))
    else:
        checks.append(classify_version("Magento", magento_version, VERSION_CUTOFFS["magento"]))

    snapshot = await read_runtime_or_none(runtime)
    if snapshot is None:
        checks.append(Check.info("PHP version: runtime not inspected"))
    else:
        checks.append(classify_version("PHP", snapshot.version, VERSION_CUTOFFS["php"]))

    return checks


@probe("Platform configuration")
async def check_production_flags(
    project: MagentoProject,
    sql: SqlConnection,
    config: ProbeConfig,
) -> CheckList:
    checks: CheckList = [classify_deploy_mode(project.deploy_mode(), config.production)]
    rows = await sql.fetch_all(_FLAGS_SQL)
    values = {row["path"]: row["value"] for row in rows}
    checks.extend(classify_flags(values, config.production))
    return checks
