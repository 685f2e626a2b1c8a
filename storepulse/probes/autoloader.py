"""Dependency autoloader (Composer) optimization probe."""

from __future__ import annotations

from ..collaborators.php import PhpRuntime, read_runtime_or_none
from ..collaborators.project import MagentoProject
from ..constants import APCU_EXTENSION
from ..diagnostics.checks import Check, CheckList
from ..diagnostics.probe import ProbeConfig, probe
from ..diagnostics.thresholds import ThresholdTable


def classify_autoloader(
    classmap_entries: int | None,
    has_static_loader: bool,
    apcu_loaded: bool | None,
    apcu_configured: bool,
    thresholds: ThresholdTable,
) -> CheckList:
    checks: CheckList = []

    minimum = thresholds.single("autoload_classmap_min_entries")
    if classmap_entries is None:
        checks.append(Check.error(
            "Composer classmap missing - run composer dump-autoload --optimize"
        ))
    elif classmap_entries < minimum:
        checks.append(Check.warning(
            f"Composer classmap: {classmap_entries:,} entries - looks unoptimized, "
            "run composer dump-autoload --optimize"
        ))
    else:
        checks.append(Check.success(f"Composer classmap: {classmap_entries:,} entries (optimized)"))

    if has_static_loader:
        checks.append(Check.success("Composer static loader: present"))
    else:
        checks.append(Check.warning("Composer static loader: missing (autoload_static.php)"))

    if apcu_loaded is None:
        checks.append(Check.info("APCu autoloader cache: runtime not inspected"))
    elif not apcu_loaded:
        checks.append(Check.warning("APCu extension not loaded - autoloader cache unavailable"))
    elif apcu_configured:
        checks.append(Check.success("APCu autoloader cache: enabled"))
    else:
        checks.append(Check.warning(
            "APCu autoloader cache: not enabled - run composer dump-autoload --optimize --apcu"
        ))

    return checks


@probe("Autoloader")
async def check_autoloader(
    project: MagentoProject,
    runtime: PhpRuntime | None,
    config: ProbeConfig,
) -> CheckList:
    snapshot = await read_runtime_or_none(runtime)
    apcu_loaded = snapshot.has_extension(APCU_EXTENSION) if snapshot is not None else None
    return classify_autoloader(
        project.classmap_entry_count(),
        project.has_static_loader(),
        apcu_loaded,
        project.apcu_autoloader_configured(),
        config.thresholds,
    )
