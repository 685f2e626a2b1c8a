"""
Interpreter runtime and bytecode-cache readers.

The platform runs on PHP; these adapters ask the interpreter itself for its
configuration by invoking the php binary with a small JSON-emitting script,
or (for the web SAPI's opcache, which the CLI cannot see) by fetching the
same JSON shape from a status endpoint.

The snapshots are plain frozen records so tests can build them directly.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from ..exceptions import CollaboratorUnavailableError, MeasurementFailedError

if TYPE_CHECKING:
    import httpx

    from .shell import ShellRunner

logger = logging.getLogger(__name__)

RUNTIME_INI_KEYS = [
    "memory_limit",
    "max_execution_time",
    "realpath_cache_size",
    "realpath_cache_ttl",
    "zend.assertions",
]

_RUNTIME_SCRIPT = (
    "$keys = json_decode('%s', true);"
    "$ini = [];"
    "foreach ($keys as $k) { $v = ini_get($k); $ini[$k] = $v === false ? null : (string)$v; }"
    "echo json_encode(['version' => PHP_VERSION, 'sapi' => PHP_SAPI,"
    " 'ini' => $ini, 'extensions' => get_loaded_extensions()]);"
)

_BYTECODE_SCRIPT = (
    "$loaded = extension_loaded('Zend OPcache');"
    "echo json_encode(['loaded' => $loaded,"
    " 'status' => $loaded ? opcache_get_status(false) : false,"
    " 'configuration' => $loaded ? opcache_get_configuration() : false]);"
)

_SIZE_UNITS = {"k": 1024, "m": 1024 ** 2, "g": 1024 ** 3}


def parse_ini_bytes(value: str | int | None) -> int | None:
    """Convert php.ini shorthand ("512M", "2G", "-1") to bytes; -1 means unlimited."""
    if value is None:
        return None
    text = str(value).strip().lower()
    if not text:
        return None
    match = re.fullmatch(r"(-?\d+)\s*([kmg])?b?", text)
    if not match:
        raise ValueError(f"Unparseable size: {value!r}")
    number = int(match.group(1))
    if number < 0:
        return -1
    unit = match.group(2)
    return number * _SIZE_UNITS[unit] if unit else number


def directive_enabled(value: Any) -> bool:
    """Truthiness of an ini flag that may arrive as bool, int or string ("0", "Off")."""
    if isinstance(value, str):
        return value.strip().lower() in {"1", "on", "true", "yes"}
    return bool(value)


@dataclass(frozen=True)
class RuntimeSnapshot:
    """Interpreter version, ini directives and loaded extensions.

    Doubles as the capability provider: has_extension() answers "is this
    runtime capability present" deterministically for tests.
    """
    version: str
    ini: dict[str, str | None] = field(default_factory=dict)
    extensions: frozenset[str] = frozenset()
    sapi: str = "cli"

    def has_extension(self, name: str) -> bool:
        wanted = name.lower()
        return any(ext.lower() == wanted for ext in self.extensions)

    def directive(self, name: str) -> str | None:
        return self.ini.get(name)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RuntimeSnapshot":
        return cls(
            version=str(payload.get("version", "")),
            ini=dict(payload.get("ini") or {}),
            extensions=frozenset(payload.get("extensions") or []),
            sapi=str(payload.get("sapi", "cli")),
        )


@dataclass(frozen=True)
class BytecodeCacheSnapshot:
    """Opcache state. Memory values are bytes; hit_rate is a percentage.

    Fields are None when the status source did not report them.
    """
    extension_loaded: bool
    enabled: bool = False
    status_available: bool = True
    free_memory: int | None = None
    used_memory: int | None = None
    wasted_memory: int | None = None
    hit_rate: float | None = None
    cached_scripts: int | None = None
    directives: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any], cli: bool = False) -> "BytecodeCacheSnapshot":
        """Build from {"loaded", "status", "configuration"} as emitted by the php scripts."""
        loaded = bool(payload.get("loaded"))
        if not loaded:
            return cls(extension_loaded=False, status_available=False)

        status = payload.get("status")
        configuration = payload.get("configuration")
        directives = dict(configuration.get("directives", {})) if isinstance(configuration, dict) else {}
        enable_key = "opcache.enable_cli" if cli else "opcache.enable"
        enabled = directive_enabled(directives.get(enable_key, False))

        if not isinstance(status, dict) or not isinstance(configuration, dict):
            return cls(
                extension_loaded=True,
                enabled=enabled,
                status_available=False,
                directives=directives,
            )

        memory = status.get("memory_usage", {})
        stats = status.get("opcache_statistics", {})
        return cls(
            extension_loaded=True,
            enabled=enabled and directive_enabled(status.get("opcache_enabled", True)),
            status_available=True,
            free_memory=memory.get("free_memory"),
            used_memory=memory.get("used_memory"),
            wasted_memory=memory.get("wasted_memory"),
            hit_rate=stats.get("opcache_hit_rate"),
            cached_scripts=stats.get("num_cached_scripts"),
            directives=directives,
        )


class BytecodeCacheSource(Protocol):
    async def read(self) -> BytecodeCacheSnapshot: ...


class PhpRuntime:
    """Reads runtime facts by invoking the php binary through the ShellRunner."""

    def __init__(self, shell: "ShellRunner", php_binary: str = "php") -> None:
        self._shell = shell
        self._php = php_binary
        self._runtime: RuntimeSnapshot | None = None

    async def _run_script(self, script: str) -> dict[str, Any]:
        result = await self._shell.run([self._php, "-r", script])
        if not result.ok:
            raise MeasurementFailedError(
                f"php exited with {result.exit_code}: {result.stderr.strip()[:200]}"
            )
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise MeasurementFailedError(f"Unexpected php output: {e}") from e

    async def read_runtime(self) -> RuntimeSnapshot:
        """Read once per instance; several probes share the snapshot."""
        if self._runtime is None:
            script = _RUNTIME_SCRIPT % json.dumps(RUNTIME_INI_KEYS)
            self._runtime = RuntimeSnapshot.from_payload(await self._run_script(script))
        return self._runtime

    async def read_cli_bytecode_cache(self) -> BytecodeCacheSnapshot:
        return BytecodeCacheSnapshot.from_payload(await self._run_script(_BYTECODE_SCRIPT), cli=True)


async def read_runtime_or_none(runtime: PhpRuntime | None) -> RuntimeSnapshot | None:
    """Snapshot, or None when no runtime is wired or php cannot be run here
    (shell disabled, binary missing, timed out)."""
    if runtime is None:
        return None
    try:
        return await runtime.read_runtime()
    except CollaboratorUnavailableError as e:
        logger.info("PHP runtime not inspected: %s", e)
        return None


class CliBytecodeCache:
    """BytecodeCacheSource for the CLI SAPI."""

    def __init__(self, runtime: PhpRuntime) -> None:
        self._runtime = runtime

    async def read(self) -> BytecodeCacheSnapshot:
        return await self._runtime.read_cli_bytecode_cache()


class HttpBytecodeCache:
    """BytecodeCacheSource reading the web SAPI's status from a JSON endpoint."""

    def __init__(self, client: "httpx.AsyncClient", url: str) -> None:
        self._client = client
        self._url = url

    async def read(self) -> BytecodeCacheSnapshot:
        if not self._url:
            raise CollaboratorUnavailableError("opcache status endpoint not configured")
        response = await self._client.get(self._url)
        response.raise_for_status()
        payload = response.json()
        if "loaded" not in payload:
            # Bare opcache_get_status() dump: extension present, directives unknown
            configuration = payload.get("configuration") or {
                "directives": {"opcache.enable": payload.get("opcache_enabled", False)}
            }
            payload = {"loaded": True, "status": payload, "configuration": configuration}
        return BytecodeCacheSnapshot.from_payload(payload)
