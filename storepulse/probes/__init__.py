"""
Diagnostic probes, one module per subsystem.

Every probe is an async function decorated with @probe(...) that returns a
CheckList and never raises collaborator errors.
"""

from .autoloader import check_autoloader
from .benchmarks import check_benchmarks
from .bytecode import check_bytecode_cache, check_cli_bytecode_cache
from .cache_server import check_cache_server
from .database import check_database_latency, check_database_size
from .extensions import check_extensions
from .filesystem import check_directory_sizes, check_disk_space, check_permissions
from .hosting import check_hosting
from .http import check_http_cached, check_http_uncached
from .platform import check_production_flags, check_versions
from .runtime import check_runtime_config

__all__ = [
    "check_autoloader",
    "check_benchmarks",
    "check_bytecode_cache",
    "check_cache_server",
    "check_cli_bytecode_cache",
    "check_database_latency",
    "check_database_size",
    "check_directory_sizes",
    "check_disk_space",
    "check_extensions",
    "check_hosting",
    "check_http_cached",
    "check_http_uncached",
    "check_permissions",
    "check_production_flags",
    "check_runtime_config",
    "check_versions",
]
