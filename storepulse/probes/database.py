"""Database latency and size probes."""

from __future__ import annotations

from ..collaborators.sql import SqlConnection
from ..diagnostics.checks import Check, CheckList, Severity
from ..diagnostics.probe import ProbeConfig, probe
from ..diagnostics.sampler import SampleStats, measure, run_multiple_times
from ..diagnostics.thresholds import ThresholdTable, classify_above

_MB = 1024 * 1024

_TOP_TABLES_SQL = """
SELECT table_name AS table_name,
       COALESCE(data_length, 0) + COALESCE(index_length, 0) AS size_bytes,
       table_rows AS table_rows
FROM information_schema.TABLES
WHERE table_schema = DATABASE()
ORDER BY size_bytes DESC
LIMIT :limit
"""

_TOTAL_SIZE_SQL = """
SELECT COALESCE(SUM(COALESCE(data_length, 0) + COALESCE(index_length, 0)), 0) AS total_bytes,
       COUNT(*) AS table_count
FROM information_schema.TABLES
WHERE table_schema = DATABASE()
"""


def classify_latency(label: str, stats: SampleStats, warning_ms: float, error_ms: float) -> CheckList:
    checks: CheckList = [Check.info(f"{label} latency: {stats.summary()}")]
    severity = classify_above(stats.mean, warning_ms, error_ms)
    if severity == Severity.ERROR:
        checks.append(Check.error(f"{label} average latency {stats.mean:.2f}ms - SLOW (> {error_ms:g}ms)"))
    elif severity == Severity.WARNING:
        checks.append(Check.warning(f"{label} average latency {stats.mean:.2f}ms - ELEVATED (> {warning_ms:g}ms)"))
    else:
        checks.append(Check.success(f"{label} average latency {stats.mean:.2f}ms - GOOD"))
    return checks


def classify_table_sizes(
    total_bytes: int,
    table_count: int,
    tables: list[dict],
    thresholds: ThresholdTable,
) -> CheckList:
    checks: CheckList = []

    total_mb = total_bytes / _MB
    warning_mb, error_mb = thresholds.pair("db_total_size_mb")
    severity = classify_above(total_mb, warning_mb, error_mb)
    message = f"Database size: {total_mb:,.1f}MB across {table_count:,} tables"
    if severity == Severity.ERROR:
        checks.append(Check.error(f"{message} - VERY LARGE"))
    elif severity == Severity.WARNING:
        checks.append(Check.warning(f"{message} - LARGE"))
    else:
        checks.append(Check.success(message))

    warning_mb, error_mb = thresholds.pair("db_table_size_mb")
    for table in tables:
        size_mb = int(table["size_bytes"] or 0) / _MB
        rows = table.get("table_rows")
        rows_str = f", ~{int(rows):,} rows" if rows is not None else ""
        line = f"{table['table_name']}: {size_mb:,.1f}MB{rows_str}"
        severity = classify_above(size_mb, warning_mb, error_mb)
        if severity == Severity.ERROR:
            checks.append(Check.error(f"{line} - consider cleanup or archiving"))
        elif severity == Severity.WARNING:
            checks.append(Check.warning(line))
        else:
            checks.append(Check.info(line))
    return checks


@probe("MySQL latency")
async def check_database_latency(sql: SqlConnection, config: ProbeConfig) -> CheckList:
    checks: CheckList = []
    stats = await run_multiple_times(
        measure,
        config.latency_samples,
        (sql.fetch_all, "SELECT 1"),
        show_individual=config.show_individual,
        label="MySQL ping",
        checks=checks,
    )
    warning_ms, error_ms = config.thresholds.pair("db_latency_ms")
    checks.extend(classify_latency("MySQL", stats, warning_ms, error_ms))
    return checks


@probe("Database size")
async def check_database_size(sql: SqlConnection, config: ProbeConfig) -> CheckList:
    checks: CheckList = []
    version_rows = await sql.fetch_all("SELECT VERSION() AS version")
    if version_rows:
        checks.append(Check.info(f"Database server version: {version_rows[0]['version']}"))

    totals = await sql.fetch_all(_TOTAL_SIZE_SQL)
    tables = await sql.fetch_all(_TOP_TABLES_SQL, {"limit": config.db_size_top_n})
    total = totals[0] if totals else {"total_bytes": 0, "table_count": 0}
    checks.extend(classify_table_sizes(
        int(total["total_bytes"] or 0),
        int(total["table_count"] or 0),
        tables,
        config.thresholds,
    ))
    return checks
