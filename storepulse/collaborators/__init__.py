"""
Adapters for the external systems the probes read from.

Each module defines the small protocol a probe depends on plus the
production implementation; tests substitute fakes or mocks.
"""

from .catalog import CatalogListing, EntityKind, UrlRewriteCatalog
from .environment import EnvironmentSnapshot, read_environment
from .http import build_http_client
from .kvstore import KeyValueStoreClient, RedisStoreClient
from .php import (
    BytecodeCacheSnapshot,
    BytecodeCacheSource,
    CliBytecodeCache,
    HttpBytecodeCache,
    PhpRuntime,
    RuntimeSnapshot,
)
from .project import MagentoProject
from .shell import ShellResult, ShellRunner
from .sql import SqlAlchemyConnection, SqlConnection

__all__ = [
    "BytecodeCacheSnapshot",
    "BytecodeCacheSource",
    "CatalogListing",
    "CliBytecodeCache",
    "EntityKind",
    "EnvironmentSnapshot",
    "HttpBytecodeCache",
    "KeyValueStoreClient",
    "MagentoProject",
    "PhpRuntime",
    "RedisStoreClient",
    "RuntimeSnapshot",
    "ShellResult",
    "ShellRunner",
    "SqlAlchemyConnection",
    "SqlConnection",
    "UrlRewriteCatalog",
    "build_http_client",
    "read_environment",
]
