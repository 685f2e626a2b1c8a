"""
Central configuration for storepulse.
Uses Pydantic BaseSettings for type-safe configuration from environment variables.
"""

import os
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to this file (storepulse/config.py → project root)
_ENV_FILE = Path(__file__).parent.parent / ".env"


def _load_env_file() -> None:
    """
    Load .env into os.environ, but only for keys that are currently unset
    or set to empty strings. This ensures .env values win over blank shell
    env vars (e.g. REDIS_URL='') while still allowing explicit non-empty
    shell overrides.
    """
    if not _ENV_FILE.exists():
        return
    from dotenv import dotenv_values
    for key, value in dotenv_values(_ENV_FILE).items():
        if value and not os.environ.get(key):
            os.environ[key] = value


# Run at import time so Settings() sees the correct values
_load_env_file()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Platform
    magento_root: str = "/var/www/html"
    store_id: int = 1
    store_base_url: str = ""  # empty = read web/secure/base_url from the database
    production_mode_expected: bool = True

    # Collaborators
    database_url: str = ""  # SQLAlchemy async URL, e.g. mysql+aiomysql://user:pw@db/magento
    redis_url: str = ""
    php_binary: str = "php"
    opcache_status_url: str = ""  # JSON endpoint exposing the web SAPI's opcache status
    shell_enabled: bool = True

    # ── Timeouts (seconds) ──────────────────────────────────────────────────────
    shell_timeout: float = 30.0
    http_connect_timeout: float = 10.0
    http_timeout: float = 30.0

    # ── HTTP probes ─────────────────────────────────────────────────────────────
    http_verify_tls: bool = False
    http_user_agent: str = "StorePulse Performance Test"
    test_url: str = ""  # empty = pick a random product/category page

    # ── Iterations ──────────────────────────────────────────────────────────────
    performance_iterations: int = 3
    http_performance_iterations: int = 3
    db_performance_iterations: int = 3
    latency_samples: int = 10
    collection_page_size: int = 100
    db_size_top_n: int = 10
    cpu_loop_iterations: int = 1_000_000
    show_individual_samples: bool = False

    # ── Thresholds ──────────────────────────────────────────────────────────────
    # Comma-separated "name=a:b" pairs merged over constants.DEFAULT_THRESHOLDS
    threshold_overrides_raw: str = ""

    # Logging
    log_level: str = "INFO"
    logs_dir: str = "./logs"
    json_logs: bool = False
    # Per-logger levels, e.g. "storepulse.probes.http=DEBUG,redis=INFO"
    log_levels_raw: str = ""

    @field_validator(
        "performance_iterations",
        "http_performance_iterations",
        "db_performance_iterations",
        "latency_samples",
    )
    @classmethod
    def iterations_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("iteration counts must be >= 1")
        return value

    @property
    def threshold_overrides(self) -> dict[str, tuple[float, ...]]:
        """Parse "name=a:b,other=c" into {"name": (a, b), "other": (c,)}."""
        raw = self.threshold_overrides_raw
        if not raw:
            return {}
        overrides: dict[str, tuple[float, ...]] = {}
        for item in raw.split(","):
            if not item.strip():
                continue
            name, _, values = item.partition("=")
            if not values:
                raise ValueError(f"Threshold override {item.strip()!r} has no value")
            overrides[name.strip()] = tuple(float(v) for v in values.split(":"))
        return overrides

    @property
    def log_levels(self) -> dict[str, str]:
        """Parse "logger=LEVEL,other=LEVEL" into {"logger": "LEVEL", ...}."""
        levels: dict[str, str] = {}
        for item in self.log_levels_raw.split(","):
            if not item.strip():
                continue
            name, _, level = item.partition("=")
            if not level.strip():
                raise ValueError(f"Log level override {item.strip()!r} has no level")
            levels[name.strip()] = level.strip().upper()
        return levels

    @property
    def magento_path(self) -> Path:
        return Path(self.magento_root)


def get_settings() -> "Settings":
    """Return the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


_settings: Settings | None = None


class _SettingsProxy:
    """Lazy proxy so `from storepulse.config import settings` works without eager init."""
    def __getattr__(self, name):
        return getattr(get_settings(), name)


settings = _SettingsProxy()  # type: ignore[assignment]
