"""
Probe boundary.

Every public probe is an async function returning a CheckList, wrapped with
@probe("<Name>"). Whatever a collaborator raises inside is turned into a
single error check so that one broken subsystem never aborts the report.
InvalidInputError is a caller bug and is let through.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from ..exceptions import InvalidInputError
from .checks import Check, CheckList
from .thresholds import ThresholdTable

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)

ProbeFn = Callable[..., Awaitable[CheckList]]


@dataclass(frozen=True)
class ProbeConfig:
    """Explicit configuration handed to every probe instead of process globals."""
    magento_root: Path = Path("/var/www/html")
    thresholds: ThresholdTable = field(default_factory=ThresholdTable)
    production: bool = True
    store_id: int = 1
    iterations: int = 3
    http_iterations: int = 3
    http_timeout: float = 30.0
    db_iterations: int = 3
    latency_samples: int = 10
    page_size: int = 100
    db_size_top_n: int = 10
    cpu_loop_iterations: int = 1_000_000
    show_individual: bool = False

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ProbeConfig":
        return cls(
            magento_root=settings.magento_path,
            thresholds=ThresholdTable(settings.threshold_overrides),
            production=settings.production_mode_expected,
            store_id=settings.store_id,
            iterations=settings.performance_iterations,
            http_iterations=settings.http_performance_iterations,
            http_timeout=settings.http_timeout,
            db_iterations=settings.db_performance_iterations,
            latency_samples=settings.latency_samples,
            page_size=settings.collection_page_size,
            db_size_top_n=settings.db_size_top_n,
            cpu_loop_iterations=settings.cpu_loop_iterations,
            show_individual=settings.show_individual_samples,
        )


def probe(name: str) -> Callable[[ProbeFn], ProbeFn]:
    """Decorate an async probe so it always returns a CheckList."""

    def decorator(fn: ProbeFn) -> ProbeFn:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> CheckList:
            try:
                return await fn(*args, **kwargs)
            except InvalidInputError:
                raise
            except Exception as e:
                logger.exception("Probe %s crashed", name)
                return [Check.error(f"{name} check error: {e}")]

        wrapper.probe_name = name  # type: ignore[attr-defined]
        return wrapper

    return decorator
