"""
DiagnosticsConsole runs every probe section in a fixed order.

Sections run one after another, never concurrently: several of them are
latency measurements that sibling work would distort. Each section is
isolated; if one crashes the rest still run.
"""

from __future__ import annotations

import logging
import platform
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Awaitable, Callable

from .. import __version__
from ..collaborators.catalog import UrlRewriteCatalog
from ..collaborators.environment import EnvironmentSnapshot, read_environment
from ..collaborators.http import build_http_client
from ..collaborators.kvstore import RedisStoreClient
from ..collaborators.php import CliBytecodeCache, HttpBytecodeCache, PhpRuntime
from ..collaborators.project import MagentoProject
from ..collaborators.shell import ShellRunner
from ..collaborators.sql import SqlAlchemyConnection
from ..exceptions import InvalidInputError
from ..logging_config import section_context
from ..probes import (
    check_autoloader,
    check_benchmarks,
    check_bytecode_cache,
    check_cache_server,
    check_cli_bytecode_cache,
    check_database_latency,
    check_database_size,
    check_directory_sizes,
    check_disk_space,
    check_extensions,
    check_hosting,
    check_http_cached,
    check_http_uncached,
    check_permissions,
    check_production_flags,
    check_runtime_config,
    check_versions,
)
from ..sample_urls import SampleUrlPicker
from .checks import Check, CheckList, Severity, worst_severity
from .probe import ProbeConfig

if TYPE_CHECKING:
    import httpx

    from ..collaborators.catalog import CatalogListing
    from ..collaborators.kvstore import KeyValueStoreClient
    from ..collaborators.php import BytecodeCacheSource
    from ..collaborators.sql import SqlConnection
    from ..config import Settings

logger = logging.getLogger(__name__)

SectionFn = Callable[[], Awaitable[CheckList]]


@dataclass
class SectionResult:
    """Checks produced by one section."""
    title: str
    checks: CheckList
    duration_ms: float


@dataclass
class ConsoleReport:
    """Complete console run."""
    sections: list[SectionResult]
    overall: Severity
    total_duration_ms: float
    version: str
    python_version: str
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def checks(self) -> CheckList:
        return [check for section in self.sections for check in section.checks]


class DiagnosticsConsole:
    """
    Holds the collaborators and runs the probe catalogue against them.

    Any collaborator may be None; its sections then report that it is not
    configured instead of running.
    """

    def __init__(
        self,
        config: ProbeConfig,
        *,
        project: MagentoProject | None = None,
        shell: ShellRunner | None = None,
        runtime: PhpRuntime | None = None,
        bytecode_source: "BytecodeCacheSource | None" = None,
        cli_bytecode_source: "BytecodeCacheSource | None" = None,
        sql: "SqlConnection | None" = None,
        kv_store: "KeyValueStoreClient | None" = None,
        http_client: "httpx.AsyncClient | None" = None,
        catalog: "CatalogListing | None" = None,
        environment: EnvironmentSnapshot | None = None,
        test_url: str = "",
    ) -> None:
        self._config = config
        self._project = project or MagentoProject(config.magento_root)
        self._shell = shell
        self._runtime = runtime
        self._bytecode_source = bytecode_source
        self._cli_bytecode_source = cli_bytecode_source
        self._sql = sql
        self._kv_store = kv_store
        self._http_client = http_client
        self._catalog = catalog
        self._environment = environment
        self._test_url = test_url

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DiagnosticsConsole":
        """Wire the production collaborators described by `settings`."""
        config = ProbeConfig.from_settings(settings)
        shell = ShellRunner(enabled=settings.shell_enabled, timeout=settings.shell_timeout)
        runtime = PhpRuntime(shell, settings.php_binary)
        http_client = build_http_client(
            settings.http_user_agent,
            connect_timeout=settings.http_connect_timeout,
            timeout=settings.http_timeout,
            verify_tls=settings.http_verify_tls,
        )
        sql = SqlAlchemyConnection(settings.database_url) if settings.database_url else None
        kv_store = RedisStoreClient(settings.redis_url) if settings.redis_url else None
        catalog = UrlRewriteCatalog(sql, settings.store_base_url) if sql is not None else None
        bytecode_source = (
            HttpBytecodeCache(http_client, settings.opcache_status_url)
            if settings.opcache_status_url else None
        )
        return cls(
            config,
            project=MagentoProject(settings.magento_path),
            shell=shell,
            runtime=runtime,
            bytecode_source=bytecode_source,
            cli_bytecode_source=CliBytecodeCache(runtime),
            sql=sql,
            kv_store=kv_store,
            http_client=http_client,
            catalog=catalog,
            environment=read_environment(),
            test_url=settings.test_url,
        )

    async def sample_url(self) -> str | None:
        if self._test_url:
            return self._test_url
        if self._catalog is None:
            return None
        picker = SampleUrlPicker(self._catalog, page_size=self._config.page_size)
        return await picker.pick_random_frontend_url(self._config.store_id)

    def _sections(self, include_benchmarks: bool) -> list[tuple[str, SectionFn]]:
        config = self._config

        def unavailable(message: str) -> SectionFn:
            async def section() -> CheckList:
                return [Check.warning(message)]
            return section

        def needs_sql(fn: Callable[..., Awaitable[CheckList]], *args) -> SectionFn:
            if self._sql is None:
                return unavailable("Database not configured (DATABASE_URL)")
            return lambda: fn(*args)

        def needs_runtime(fn: Callable[..., Awaitable[CheckList]], *args) -> SectionFn:
            if self._runtime is None:
                return unavailable("PHP runtime not inspected")
            return lambda: fn(*args)

        url: dict[str, str | None] = {}

        async def http(fn: Callable[..., Awaitable[CheckList]]) -> CheckList:
            if self._http_client is None:
                return [Check.warning("HTTP client not configured")]
            if "value" not in url:
                url["value"] = await self.sample_url()
            return await fn(self._http_client, url["value"], config)

        bytecode: SectionFn
        if self._bytecode_source is None:
            bytecode = unavailable(
                "OPcache status endpoint not configured (OPCACHE_STATUS_URL); web cache not inspected"
            )
        else:
            bytecode = lambda: check_bytecode_cache(self._bytecode_source, config)  # noqa: E731

        sections: list[tuple[str, SectionFn]] = [
            ("OPcache", bytecode),
            ("CLI OPcache", (
                unavailable("CLI OPcache not inspected")
                if self._cli_bytecode_source is None
                else lambda: check_cli_bytecode_cache(self._cli_bytecode_source, config)
            )),
            ("PHP Configuration", needs_runtime(check_runtime_config, self._runtime, config)),
            ("Platform Versions", lambda: check_versions(self._project, self._runtime, config)),
            ("Platform Configuration", needs_sql(check_production_flags, self._project, self._sql, config)),
            ("Autoloader", lambda: check_autoloader(self._project, self._runtime, config)),
            ("Filesystem Usage", lambda: check_directory_sizes(self._shell, config)),
            ("Disk Space", lambda: check_disk_space(config)),
            ("Permissions", lambda: check_permissions(config)),
            ("Database Latency", needs_sql(check_database_latency, self._sql, config)),
            ("Database Size", needs_sql(check_database_size, self._sql, config)),
            ("Redis", lambda: check_cache_server(self._kv_store, config)),
            ("HTTP (cached)", lambda: http(check_http_cached)),
            ("HTTP (uncached)", lambda: http(check_http_uncached)),
            ("Hosting", lambda: check_hosting(self._environment or read_environment(), config)),
            ("Extensions", lambda: check_extensions(self._project, config)),
        ]
        if include_benchmarks:
            sections.append(("Benchmarks", lambda: check_benchmarks(self._sql, config)))
        return sections

    @property
    def section_titles(self) -> list[str]:
        return [title for title, _ in self._sections(include_benchmarks=True)]

    async def run_all(
        self,
        include_benchmarks: bool = False,
        only: set[str] | None = None,
    ) -> ConsoleReport:
        """Run the sections in order and return the aggregated report."""
        start_time = time.perf_counter()
        results: list[SectionResult] = []

        wanted = {name.lower() for name in only} if only else None

        for title, section_fn in self._sections(include_benchmarks):
            if wanted is not None and title.lower() not in wanted:
                continue
            section_start = time.perf_counter()
            with section_context(title):
                try:
                    checks = await section_fn()
                except InvalidInputError:
                    raise
                except Exception as e:
                    logger.exception("Diagnostic section %s crashed", title)
                    checks = [Check.error(f"{title} check error: {e}")]
                duration_ms = (time.perf_counter() - section_start) * 1000
                logger.debug("%d checks in %.1f ms", len(checks), duration_ms)
            results.append(SectionResult(title=title, checks=checks, duration_ms=duration_ms))

        all_checks = [check for section in results for check in section.checks]
        return ConsoleReport(
            sections=results,
            overall=worst_severity(all_checks),
            total_duration_ms=(time.perf_counter() - start_time) * 1000,
            version=__version__,
            python_version=platform.python_version(),
        )

    async def aclose(self) -> None:
        """Release pooled connections."""
        if self._http_client is not None:
            await self._http_client.aclose()
        if self._sql is not None:
            await self._sql.close()
