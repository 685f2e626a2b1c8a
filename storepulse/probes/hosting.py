"""Managed cloud hosting detection."""

from __future__ import annotations

import re
from pathlib import Path

from ..collaborators.environment import EnvironmentSnapshot
from ..constants import CLOUD_ADVISORIES, CLOUD_ENV_VARS, CLOUD_HOSTNAME_PATTERN, CLOUD_MARKER_FILES
from ..diagnostics.checks import Check, CheckList
from ..diagnostics.probe import ProbeConfig, probe

_HOSTNAME = re.compile(CLOUD_HOSTNAME_PATTERN, re.IGNORECASE)


def find_cloud_markers(env: EnvironmentSnapshot, root: Path) -> list[str]:
    markers = [f"environment variable {name}" for name in CLOUD_ENV_VARS if env.variables.get(name)]
    for marker in CLOUD_MARKER_FILES:
        path = Path(marker) if marker.startswith("/") else root / marker
        if path.exists():
            markers.append(f"marker file {marker}")
    if env.hostname and _HOSTNAME.search(env.hostname):
        markers.append(f"hostname {env.hostname}")
    return markers


@probe("Hosting")
async def check_hosting(env: EnvironmentSnapshot, config: ProbeConfig) -> CheckList:
    markers = find_cloud_markers(env, config.magento_root)
    if not markers:
        return [Check.success(f"Self-managed hosting ({env.os_family or 'unknown OS'})")]
    checks: CheckList = [Check.warning(f"Managed cloud hosting detected via {', '.join(markers)}")]
    checks.extend(Check.info(advice) for advice in CLOUD_ADVISORIES)
    return checks
