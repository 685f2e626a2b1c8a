"""Shared fixtures for storepulse tests."""

from pathlib import Path

import pytest

from storepulse.diagnostics.probe import ProbeConfig


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch, tmp_path):
    """Prevent tests from reading real .env values or touching real hosts."""
    monkeypatch.setenv("MAGENTO_ROOT", str(tmp_path / "magento"))
    monkeypatch.setenv("DATABASE_URL", "")
    monkeypatch.setenv("REDIS_URL", "")
    monkeypatch.setenv("OPCACHE_STATUS_URL", "")
    monkeypatch.setenv("TEST_URL", "")
    monkeypatch.setenv("LOGS_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("THRESHOLD_OVERRIDES_RAW", "")
    monkeypatch.setenv("LOG_LEVELS_RAW", "")
    for name in ("MAGENTO_CLOUD_PROJECT", "PLATFORM_PROJECT", "PLATFORM_BRANCH"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def magento_root(tmp_path) -> Path:
    """Empty platform root directory."""
    root = tmp_path / "magento"
    root.mkdir()
    return root


@pytest.fixture
def probe_config(magento_root) -> ProbeConfig:
    """Fast config: few samples, tiny CPU loop."""
    return ProbeConfig(
        magento_root=magento_root,
        iterations=2,
        http_iterations=2,
        db_iterations=2,
        latency_samples=3,
        cpu_loop_iterations=1_000,
    )
