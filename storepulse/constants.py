"""
Shared constants for storepulse.

Centralises the threshold tables, style tokens and fixed lists that the probes
classify against. Everything here is static; the handful of thresholds an
operator may tune are overridden through Settings.threshold_overrides_raw.
"""

# ── Report styling ──────────────────────────────────────────────────────────────
TITLE_STYLE = "console-prompt"

SEVERITY_STYLES = {
    "success": "test-result",
    "error": "test-error",
    "warning": "performance-warning",
    "info": "performance-result",
}
DEFAULT_STYLE = SEVERITY_STYLES["info"]


# ── Threshold table ─────────────────────────────────────────────────────────────
# name -> cut points. Two-tier entries are ordered (worse, better) for
# "lower is worse" metrics and (warning, error) for "higher is worse" metrics.
DEFAULT_THRESHOLDS: dict[str, tuple[float, ...]] = {
    # Bytecode cache
    "opcache_free_memory_mb": (32, 64),          # < 32 error, < 64 warning
    "opcache_memory_consumption_mb": (256,),     # < 256 warning
    "opcache_max_accelerated_files": (100_000,),  # < 100k warning
    "opcache_interned_strings_mb": (16,),        # < 16 warning
    "opcache_hit_rate_percent": (90, 95),        # < 90 low, < 95 moderate
    "opcache_wasted_percent": (10,),             # > 10 warning
    # Interpreter runtime
    "php_memory_limit_mb": (2048,),              # < 2048 error
    "php_max_execution_time_s": (1800,),         # 0 < t < 1800 warning
    "php_realpath_cache_size_mb": (10,),         # < 10 warning
    # Filesystem
    "disk_usage_percent": (80, 90),              # > 80 warning, > 90 error
    # Dependency autoloader
    "autoload_classmap_min_entries": (10_000,),  # fewer looks unoptimized
    # Database
    "db_latency_ms": (2, 10),                    # avg > 2 warning, > 10 error
    "db_table_size_mb": (1024, 5120),
    "db_total_size_mb": (10_240, 51_200),
    # Cache server
    "redis_latency_ms": (1, 5),
    "redis_memory_used_mb": (1024, 4096),
    "redis_hit_rate_percent": (50, 80),          # < 50 error, < 80 warning
    "redis_fragmentation_ratio": (1.5, 2.0),     # > 1.5 warning, > 2.0 error
    # HTTP round trip (average ms)
    "http_cached_ms": (300, 1000),
    "http_uncached_ms": (1500, 3000),
}


# ── Filesystem ──────────────────────────────────────────────────────────────────
# Directory (relative to the platform root) -> warning threshold in MB.
# Double the threshold escalates to an error.
DIRECTORY_SIZE_THRESHOLDS_MB: dict[str, int] = {
    "var/cache": 2048,
    "var/page_cache": 4096,
    "var/log": 1024,
    "var/report": 500,
    "var/session": 1024,
    "generated": 2048,
    "pub/static": 2048,
    "pub/media": 20_480,
}

# Directories whose file count is worth reporting (warning above the limit).
DIRECTORY_FILE_COUNT_LIMITS: dict[str, int] = {
    "var/report": 10_000,
    "var/session": 100_000,
}

WRITABLE_DIRECTORIES = ["var", "generated", "pub/static", "pub/media"]


# ── Interpreter runtime ─────────────────────────────────────────────────────────
REQUIRED_EXTENSIONS = [
    "bcmath", "ctype", "curl", "dom", "gd", "hash", "iconv", "intl", "json",
    "libxml", "mbstring", "openssl", "pdo_mysql", "simplexml", "soap",
    "sockets", "sodium", "xmlwriter", "xsl", "zip",
]

BYTECODE_CACHE_EXTENSION = "Zend OPcache"
APCU_EXTENSION = "apcu"

PERFORMANCE_EXTENSIONS = [BYTECODE_CACHE_EXTENSION, "redis", APCU_EXTENSION, "igbinary"]


# ── Platform versions and flags ─────────────────────────────────────────────────
# (very old -> error, moderately old -> warning)
VERSION_CUTOFFS: dict[str, tuple[str, str]] = {
    "magento": ("2.4.4", "2.4.6"),
    "php": ("8.1", "8.2"),
}

MAGENTO_PACKAGES = [
    "magento/product-enterprise-edition",
    "magento/product-community-edition",
    "magento/magento2-base",
]

# (config path, label, expected value in production, platform default)
PRODUCTION_FLAG_POLICY: list[tuple[str, str, str, str]] = [
    ("dev/js/enable_js_bundling", "JavaScript bundling", "0", "0"),
    ("dev/js/merge_files", "JavaScript merging", "0", "0"),
    ("dev/js/minify_files", "JavaScript minification", "1", "0"),
    ("dev/css/merge_css_files", "CSS merging", "1", "0"),
    ("dev/css/minify_files", "CSS minification", "1", "0"),
    ("dev/template/minify_html", "HTML minification", "1", "0"),
    ("dev/static/sign", "Static file signing", "1", "1"),
    ("system/full_page_cache/caching_application", "Varnish full-page cache", "2", "1"),
]


# ── Cloud hosting markers ───────────────────────────────────────────────────────
CLOUD_ENV_VARS = [
    "MAGENTO_CLOUD_PROJECT",
    "MAGENTO_CLOUD_ENVIRONMENT",
    "MAGENTO_CLOUD_RELATIONSHIPS",
    "MAGENTO_CLOUD_ROUTES",
    "PLATFORM_PROJECT",
    "PLATFORM_BRANCH",
    "PLATFORM_ENVIRONMENT",
]

# Relative paths are resolved against the platform root.
CLOUD_MARKER_FILES = [
    ".magento.app.yaml",
    ".magento.env.yaml",
    ".magento/services.yaml",
    "/etc/platform",
    "/run/platform",
]

CLOUD_HOSTNAME_PATTERN = r"(magento(site)?\.cloud|platform\.sh|platformsh\.site)$"

CLOUD_ADVISORIES = [
    "Managed cloud hosting: filesystem and service tuning is owned by the provider",
    "Use the cloud project's environment variables rather than editing app/etc/env.php",
    "Directory sizes on read-only mounts may not reflect deployable state",
]


# ── Third-party extensions ──────────────────────────────────────────────────────
# Module name or vendor prefix (ending with "_") -> (severity, advisory).
EXTENSION_ADVISORIES: dict[str, tuple[str, str]] = {
    "Amasty_": (
        "warning",
        "Amasty modules register many observers and plugins; profile checkout and category pages",
    ),
    "Mirasvit_Profiler": (
        "error",
        "Profiler module installed; disable it in production",
    ),
    "Yireo_Whoops": (
        "error",
        "Debug error handler installed; disable it in production",
    ),
    "MSP_DevTools": (
        "error",
        "Developer toolbar installed; remove it from production builds",
    ),
    "Magefan_Blog": (
        "info",
        "Blog module detected; make sure its sitemap cron is scheduled off-peak",
    ),
}


# ── HTTP ────────────────────────────────────────────────────────────────────────
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


# ── Sample URLs ─────────────────────────────────────────────────────────────────
PRODUCT_WEIGHT_PERCENT = 70
