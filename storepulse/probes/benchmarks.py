"""
Synthetic load benchmarks: CPU loop, memory allocation, file I/O and
database round trips. Results are informational; each benchmark runs its
iterations back to back through the sampler.
"""

from __future__ import annotations

import os
import tempfile
import time

import psutil

from ..collaborators.sql import SqlConnection
from ..diagnostics.checks import Check, CheckList
from ..diagnostics.probe import ProbeConfig, probe
from ..diagnostics.sampler import SampleStats, run_multiple_times


def cpu_benchmark(loops: int = 1_000_000) -> float:
    start = time.perf_counter()
    for a in range(loops):
        b = a * a  # noqa: F841
    return time.perf_counter() - start


def memory_allocation_benchmark(count: int = 100_000) -> tuple[float, int]:
    """Allocate `count` 100-byte strings; returns (seconds, RSS growth in bytes)."""
    process = psutil.Process()
    start = time.perf_counter()
    rss_start = process.memory_info().rss
    array = []
    for i in range(count):
        array.append("x" * 100 + str(i))
    rss_end = process.memory_info().rss
    elapsed = time.perf_counter() - start
    del array
    return elapsed, max(rss_end - rss_start, 0)


def file_operations_benchmark(reads: int = 100) -> float:
    start = time.perf_counter()
    fd, temp_file = tempfile.mkstemp(prefix="storepulse_perf_", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write("Test data" * 1000)
        for _ in range(reads):
            with open(temp_file, encoding="utf-8") as f:
                f.read()
    finally:
        os.unlink(temp_file)
    return time.perf_counter() - start


async def database_operations_benchmark(sql: SqlConnection, queries: int = 3) -> float:
    start = time.perf_counter()
    for _ in range(queries):
        await sql.fetch_all("SELECT 1 AS test")
    return time.perf_counter() - start


def _stats_check(label: str, stats: SampleStats) -> Check:
    return Check.info(f"{label}: {stats.summary()}")


@probe("Benchmarks")
async def check_benchmarks(sql: SqlConnection | None, config: ProbeConfig) -> CheckList:
    checks: CheckList = []

    stats = await run_multiple_times(
        cpu_benchmark,
        config.iterations,
        (config.cpu_loop_iterations,),
        show_individual=config.show_individual,
        label="CPU run",
        checks=checks,
    )
    checks.append(_stats_check(f"CPU ({config.cpu_loop_iterations:,} multiplications)", stats))

    memory_deltas: list[int] = []

    def allocate() -> float:
        elapsed, delta = memory_allocation_benchmark()
        memory_deltas.append(delta)
        return elapsed

    stats = await run_multiple_times(
        allocate,
        config.iterations,
        show_individual=config.show_individual,
        label="Memory run",
        checks=checks,
    )
    checks.append(_stats_check("Memory allocation (100,000 strings)", stats))
    checks.append(Check.info(f"Memory allocation peak RSS growth: {max(memory_deltas) / 1024 / 1024:,.1f}MB"))

    stats = await run_multiple_times(
        file_operations_benchmark,
        config.iterations,
        show_individual=config.show_individual,
        label="File I/O run",
        checks=checks,
    )
    checks.append(_stats_check("File I/O (1 write, 100 reads)", stats))

    if sql is not None:
        stats = await run_multiple_times(
            database_operations_benchmark,
            config.iterations,
            (sql, config.db_iterations),
            show_individual=config.show_individual,
            label="Database run",
            checks=checks,
        )
        checks.append(_stats_check(f"Database ({config.db_iterations} x SELECT 1)", stats))
    else:
        checks.append(Check.info("Database benchmark skipped: no database configured"))

    return checks
