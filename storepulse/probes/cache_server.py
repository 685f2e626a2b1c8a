"""Cache server (Redis) latency and memory probe."""

from __future__ import annotations

from typing import Any

from ..collaborators.kvstore import KeyValueStoreClient
from ..diagnostics.checks import Check, CheckList, Severity
from ..diagnostics.probe import ProbeConfig, probe
from ..diagnostics.sampler import measure, run_multiple_times
from ..diagnostics.thresholds import ThresholdTable, classify_above, classify_below
from .database import classify_latency

_MB = 1024 * 1024


def classify_server_info(info: dict[str, Any], thresholds: ThresholdTable) -> CheckList:
    checks: CheckList = []

    if "redis_version" in info:
        checks.append(Check.info(f"Redis version: {info['redis_version']}"))

    used = info.get("used_memory")
    if used is not None:
        used_mb = int(used) / _MB
        warning_mb, error_mb = thresholds.pair("redis_memory_used_mb")
        severity = classify_above(used_mb, warning_mb, error_mb)
        message = f"Redis memory used: {used_mb:,.1f}MB"
        if severity == Severity.ERROR:
            checks.append(Check.error(f"{message} - VERY HIGH"))
        elif severity == Severity.WARNING:
            checks.append(Check.warning(f"{message} - HIGH"))
        else:
            checks.append(Check.success(message))

    hits = int(info.get("keyspace_hits", 0) or 0)
    misses = int(info.get("keyspace_misses", 0) or 0)
    if hits + misses > 0:
        rate = hits / (hits + misses) * 100
        error_pct, warning_pct = thresholds.pair("redis_hit_rate_percent")
        severity = classify_below(rate, error_pct, warning_pct)
        message = f"Redis hit rate: {rate:.1f}% ({hits:,} hits / {misses:,} misses)"
        if severity == Severity.ERROR:
            checks.append(Check.error(f"{message} - POOR"))
        elif severity == Severity.WARNING:
            checks.append(Check.warning(f"{message} - LOW"))
        else:
            checks.append(Check.success(message))
    elif "keyspace_hits" in info:
        checks.append(Check.info("Redis hit rate: no lookups recorded yet"))

    ratio = info.get("mem_fragmentation_ratio")
    if ratio is not None:
        ratio = float(ratio)
        warning, error = thresholds.pair("redis_fragmentation_ratio")
        if ratio < 1.0:
            checks.append(Check.warning(f"Redis fragmentation ratio: {ratio:.2f} - below 1.0, memory may be swapped"))
        else:
            severity = classify_above(ratio, warning, error)
            if severity == Severity.ERROR:
                checks.append(Check.error(f"Redis fragmentation ratio: {ratio:.2f} - SEVERE"))
            elif severity == Severity.WARNING:
                checks.append(Check.warning(f"Redis fragmentation ratio: {ratio:.2f} - HIGH"))
            else:
                checks.append(Check.success(f"Redis fragmentation ratio: {ratio:.2f}"))

    return checks


@probe("Redis")
async def check_cache_server(client: KeyValueStoreClient | None, config: ProbeConfig) -> CheckList:
    if client is None:
        return [Check.info("NOTICE: Redis configuration not found")]

    checks: CheckList = []
    try:
        # First round trip establishes the connection; not counted
        await client.ping()
        stats = await run_multiple_times(
            measure,
            config.latency_samples,
            (client.ping,),
            show_individual=config.show_individual,
            label="Redis ping",
            checks=checks,
        )
        warning_ms, error_ms = config.thresholds.pair("redis_latency_ms")
        checks.extend(classify_latency("Redis", stats, warning_ms, error_ms))
        checks.extend(classify_server_info(await client.info(), config.thresholds))
    finally:
        await client.close()
    return checks
