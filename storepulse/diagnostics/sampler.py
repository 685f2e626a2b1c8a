"""
Repeated-sampling statistics.

run_multiple_times() invokes a timed operation N times, strictly one after
another, and reduces the elapsed durations to best / worst / mean / p95.
Operations return their own elapsed time in seconds and may be plain
callables or coroutine functions.
"""

from __future__ import annotations

import inspect
import math
import statistics
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence

from ..exceptions import InvalidInputError
from .checks import Check, CheckList


@dataclass(frozen=True)
class SampleStats:
    """Summary of a sampling run, all values in milliseconds."""
    best: float
    worst: float
    mean: float
    p95: float
    raw: tuple[float, ...] = field(default_factory=tuple)

    @classmethod
    def from_seconds(cls, durations: Sequence[float]) -> "SampleStats":
        """Build stats from raw durations in seconds (any order)."""
        if not durations:
            raise InvalidInputError("At least one sample is required")
        samples_ms = sorted(d * 1000 for d in durations)
        index95 = math.floor(0.95 * (len(samples_ms) - 1))
        return cls(
            best=samples_ms[0],
            worst=samples_ms[-1],
            mean=min(max(statistics.fmean(samples_ms), samples_ms[0]), samples_ms[-1]),
            p95=samples_ms[index95],
            raw=tuple(samples_ms),
        )

    def summary(self) -> str:
        return (
            f"best {self.best:.2f}ms, avg {self.mean:.2f}ms, "
            f"p95 {self.p95:.2f}ms, worst {self.worst:.2f}ms"
        )


async def run_multiple_times(
    operation: Callable[..., float | Awaitable[float]],
    iterations: int = 5,
    args: Sequence[Any] = (),
    *,
    show_individual: bool = False,
    label: str = "Test",
    checks: CheckList | None = None,
) -> SampleStats:
    """
    Run `operation(*args)` `iterations` times and summarise the durations.

    Any exception raised by an invocation propagates and the partial samples
    are discarded. With show_individual, one Info check per iteration is
    appended to `checks` before returning.
    """
    if iterations < 1:
        raise InvalidInputError(f"iterations must be >= 1, got {iterations}")

    durations: list[float] = []
    for _ in range(iterations):
        elapsed = operation(*args)
        if inspect.isawaitable(elapsed):
            elapsed = await elapsed
        durations.append(float(elapsed))

    if show_individual and checks is not None:
        for i, elapsed in enumerate(durations, start=1):
            checks.append(Check.info(f"{label} {i}: {elapsed * 1000:.2f}ms"))

    return SampleStats.from_seconds(durations)


async def measure(operation: Callable[..., Any], *args: Any) -> float:
    """Time a single call (awaiting it if needed); returns seconds."""
    start = time.perf_counter()
    result = operation(*args)
    if inspect.isawaitable(result):
        await result
    return time.perf_counter() - start
