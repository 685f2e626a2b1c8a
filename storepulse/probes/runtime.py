"""Interpreter runtime configuration probe."""

from __future__ import annotations

from ..collaborators.php import PhpRuntime, RuntimeSnapshot, parse_ini_bytes, read_runtime_or_none
from ..constants import PERFORMANCE_EXTENSIONS, REQUIRED_EXTENSIONS
from ..diagnostics.checks import Check, CheckList
from ..diagnostics.probe import ProbeConfig, probe
from ..diagnostics.thresholds import ThresholdTable

_MB = 1024 * 1024


def classify_runtime(snapshot: RuntimeSnapshot, thresholds: ThresholdTable) -> CheckList:
    checks: CheckList = [Check.info(f"PHP version: {snapshot.version} ({snapshot.sapi})")]

    memory_limit = parse_ini_bytes(snapshot.directive("memory_limit"))
    minimum_mb = thresholds.single("php_memory_limit_mb")
    if memory_limit is None:
        checks.append(Check.warning("memory_limit: not reported"))
    elif memory_limit == -1:
        checks.append(Check.success("memory_limit: unlimited"))
    elif memory_limit / _MB < minimum_mb:
        checks.append(Check.error(
            f"memory_limit: {memory_limit // _MB}MB - at least {minimum_mb:.0f}MB is required"
        ))
    else:
        checks.append(Check.success(f"memory_limit: {memory_limit // _MB}MB"))

    raw_time = snapshot.directive("max_execution_time")
    if raw_time is not None:
        seconds = int(float(raw_time))
        recommended = thresholds.single("php_max_execution_time_s")
        if 0 < seconds < recommended:
            checks.append(Check.warning(
                f"max_execution_time: {seconds}s - recommended at least {recommended:.0f}s"
            ))
        elif seconds == 0:
            checks.append(Check.success("max_execution_time: unlimited"))
        else:
            checks.append(Check.success(f"max_execution_time: {seconds}s"))

    realpath = parse_ini_bytes(snapshot.directive("realpath_cache_size"))
    if realpath is not None:
        minimum_mb = thresholds.single("php_realpath_cache_size_mb")
        if realpath / _MB < minimum_mb:
            checks.append(Check.warning(
                f"realpath_cache_size: {realpath / 1024:,.0f}K - recommended at least {minimum_mb:.0f}M"
            ))
        else:
            checks.append(Check.success(f"realpath_cache_size: {realpath / _MB:,.0f}M"))

    missing_required = [ext for ext in REQUIRED_EXTENSIONS if not snapshot.has_extension(ext)]
    for ext in missing_required:
        checks.append(Check.error(f"Required PHP extension missing: {ext}"))
    if not missing_required:
        checks.append(Check.success(f"Required PHP extensions: all {len(REQUIRED_EXTENSIONS)} loaded"))

    for ext in PERFORMANCE_EXTENSIONS:
        if snapshot.has_extension(ext):
            checks.append(Check.success(f"Performance extension {ext}: LOADED"))
        else:
            checks.append(Check.warning(f"Performance extension {ext}: NOT LOADED"))

    return checks


@probe("PHP configuration")
async def check_runtime_config(runtime: PhpRuntime, config: ProbeConfig) -> CheckList:
    snapshot = await read_runtime_or_none(runtime)
    if snapshot is None:
        return [Check.warning("PHP runtime not inspected: php cannot be run here (shell disabled or binary missing)")]
    return classify_runtime(snapshot, config.thresholds)
