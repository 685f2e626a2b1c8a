"""
Bytecode cache (Zend OPcache) probes.

classify_bytecode_cache() is the pure classification; check_bytecode_cache()
and check_cli_bytecode_cache() read a snapshot from their source and
classify it behind the probe boundary.
"""

from __future__ import annotations

from ..collaborators.php import BytecodeCacheSnapshot, BytecodeCacheSource, directive_enabled
from ..diagnostics.checks import Check, CheckList, Severity
from ..diagnostics.probe import ProbeConfig, probe
from ..diagnostics.thresholds import ThresholdTable, classify_below
from ..exceptions import CollaboratorUnavailableError

_MB = 1024 * 1024


def _mb(value: float) -> str:
    return f"{value / _MB:,.1f}MB"


def classify_bytecode_cache(
    snapshot: BytecodeCacheSnapshot,
    thresholds: ThresholdTable,
    production: bool = True,
) -> CheckList:
    checks: CheckList = []

    if not snapshot.extension_loaded:
        checks.append(Check.error("Zend OPcache extension is NOT LOADED - Critical performance impact"))
        return checks
    checks.append(Check.info("Zend OPcache extension: LOADED"))

    if not snapshot.enabled:
        checks.append(Check.error("OPcache is DISABLED - Enable opcache.enable in php.ini"))
        return checks
    if not snapshot.status_available:
        checks.append(Check.error("OPcache status/configuration data unavailable"))
        return checks
    checks.append(Check.info("OPcache: ENABLED"))

    directives = snapshot.directives

    if snapshot.free_memory is not None:
        error_mb, warning_mb = thresholds.pair("opcache_free_memory_mb")
        free = snapshot.free_memory
        severity = classify_below(free / _MB, error_mb, warning_mb)
        if severity == Severity.ERROR:
            checks.append(Check.error(
                f"OPcache free memory: {_mb(free)} - CRITICALLY LOW, increase opcache.memory_consumption"
            ))
        elif severity == Severity.WARNING:
            checks.append(Check.warning(f"OPcache free memory: {_mb(free)} - LOW, consider increasing memory"))
        else:
            checks.append(Check.success(f"OPcache free memory: {_mb(free)} - ADEQUATE"))

    consumption = directives.get("opcache.memory_consumption")
    if consumption is not None:
        minimum_mb = thresholds.single("opcache_memory_consumption_mb")
        if int(consumption) / _MB < minimum_mb:
            checks.append(Check.warning(
                f"opcache.memory_consumption: {_mb(int(consumption))} - recommended at least {minimum_mb:.0f}MB"
            ))
        else:
            checks.append(Check.success(f"opcache.memory_consumption: {_mb(int(consumption))}"))

    validate = directives.get("opcache.validate_timestamps")
    if validate is not None:
        if directive_enabled(validate):
            if production:
                checks.append(Check.error(
                    "opcache.validate_timestamps is ENABLED - disable it in production and reset the cache on deploy"
                ))
            else:
                checks.append(Check.info("opcache.validate_timestamps: enabled (non-production)"))
        else:
            checks.append(Check.success("opcache.validate_timestamps: disabled"))

    max_files = directives.get("opcache.max_accelerated_files")
    if max_files is not None:
        minimum = thresholds.single("opcache_max_accelerated_files")
        if int(max_files) < minimum:
            checks.append(Check.warning(
                f"opcache.max_accelerated_files: {int(max_files):,} - recommended at least {minimum:,.0f}"
            ))
        else:
            checks.append(Check.success(f"opcache.max_accelerated_files: {int(max_files):,}"))

    interned = directives.get("opcache.interned_strings_buffer")
    if interned is not None:
        minimum_mb = thresholds.single("opcache_interned_strings_mb")
        if int(interned) < minimum_mb:
            checks.append(Check.warning(
                f"opcache.interned_strings_buffer: {int(interned)}MB - recommended at least {minimum_mb:.0f}MB"
            ))
        else:
            checks.append(Check.success(f"opcache.interned_strings_buffer: {int(interned)}MB"))

    save_comments = directives.get("opcache.save_comments")
    if save_comments is not None and not directive_enabled(save_comments):
        checks.append(Check.error("opcache.save_comments is DISABLED - the platform requires annotations"))

    if snapshot.hit_rate is not None:
        low, moderate = thresholds.pair("opcache_hit_rate_percent")
        rate = float(snapshot.hit_rate)
        if rate < low:
            checks.append(Check.warning(f"OPcache hit rate: {rate:.2f}% - LOW, cache is being invalidated or is too small"))
        elif rate < moderate:
            checks.append(Check.warning(f"OPcache hit rate: {rate:.2f}% - MODERATE"))
        else:
            checks.append(Check.success(f"OPcache hit rate: {rate:.2f}% - GOOD"))

    if None not in (snapshot.used_memory, snapshot.free_memory, snapshot.wasted_memory):
        total = snapshot.used_memory + snapshot.free_memory + snapshot.wasted_memory
        if total > 0:
            wasted_pct = snapshot.wasted_memory / total * 100
            limit = thresholds.single("opcache_wasted_percent")
            if wasted_pct > limit:
                checks.append(Check.warning(
                    f"OPcache wasted memory: {wasted_pct:.1f}% - restart PHP-FPM or raise opcache.max_wasted_percentage"
                ))
            else:
                checks.append(Check.success(f"OPcache wasted memory: {wasted_pct:.1f}%"))

    if snapshot.cached_scripts is not None:
        checks.append(Check.info(f"OPcache cached scripts: {snapshot.cached_scripts:,}"))

    return checks


@probe("OPcache")
async def check_bytecode_cache(source: BytecodeCacheSource, config: ProbeConfig) -> CheckList:
    snapshot = await source.read()
    return classify_bytecode_cache(snapshot, config.thresholds, production=config.production)


def classify_cli_bytecode_cache(snapshot: BytecodeCacheSnapshot) -> CheckList:
    if not snapshot.extension_loaded:
        return [Check.warning("CLI OPcache: extension NOT LOADED for the CLI interpreter")]
    if not snapshot.enabled:
        return [Check.info("CLI OPcache: disabled (opcache.enable_cli=0) - cron and deploy commands run uncached")]
    checks: CheckList = [Check.success("CLI OPcache: ENABLED")]
    if snapshot.free_memory is not None:
        checks.append(Check.info(f"CLI OPcache free memory: {_mb(snapshot.free_memory)}"))
    return checks


@probe("CLI OPcache")
async def check_cli_bytecode_cache(source: BytecodeCacheSource, config: ProbeConfig) -> CheckList:
    try:
        snapshot = await source.read()
    except CollaboratorUnavailableError as e:
        return [Check.warning(f"CLI OPcache not inspected: {e}")]
    return classify_cli_bytecode_cache(snapshot)
