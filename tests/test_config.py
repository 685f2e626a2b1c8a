"""Tests for storepulse/config.py; construct Settings directly, bypassing module singleton."""

import pytest
from pydantic import ValidationError

from storepulse import config
from storepulse.config import Settings, get_settings


def make_settings(monkeypatch, **overrides):
    """Apply env overrides then construct a fresh Settings instance."""
    for k, v in overrides.items():
        monkeypatch.setenv(k.upper(), str(v))
    return Settings()


def test_defaults(monkeypatch):
    s = make_settings(monkeypatch)
    assert s.store_id == 1
    assert s.production_mode_expected is True
    assert s.http_connect_timeout == 10
    assert s.http_timeout == 30
    assert s.http_verify_tls is False
    assert s.threshold_overrides == {}


def test_magento_root_from_env(monkeypatch, tmp_path):
    s = make_settings(monkeypatch, MAGENTO_ROOT=str(tmp_path))
    assert s.magento_path == tmp_path


def test_threshold_overrides_parsed(monkeypatch):
    s = make_settings(monkeypatch, THRESHOLD_OVERRIDES_RAW="disk_usage_percent=70:85, php_memory_limit_mb=4096")
    assert s.threshold_overrides == {
        "disk_usage_percent": (70.0, 85.0),
        "php_memory_limit_mb": (4096.0,),
    }


def test_threshold_override_without_value(monkeypatch):
    s = make_settings(monkeypatch, THRESHOLD_OVERRIDES_RAW="disk_usage_percent")
    with pytest.raises(ValueError):
        s.threshold_overrides


def test_zero_iterations_rejected(monkeypatch):
    with pytest.raises(ValidationError):
        make_settings(monkeypatch, PERFORMANCE_ITERATIONS="0")


def test_bool_parsing(monkeypatch):
    s = make_settings(monkeypatch, SHELL_ENABLED="false", PRODUCTION_MODE_EXPECTED="0")
    assert s.shell_enabled is False
    assert s.production_mode_expected is False


def test_get_settings_is_singleton(monkeypatch):
    monkeypatch.setattr(config, "_settings", None)
    assert get_settings() is get_settings()
    assert config.settings.store_id == get_settings().store_id


def test_log_levels_parsed(monkeypatch):
    s = make_settings(monkeypatch, LOG_LEVELS_RAW="storepulse.probes.http=debug, redis=INFO")
    assert s.log_levels == {"storepulse.probes.http": "DEBUG", "redis": "INFO"}


def test_log_level_override_without_level(monkeypatch):
    s = make_settings(monkeypatch, LOG_LEVELS_RAW="storepulse.probes=")
    with pytest.raises(ValueError):
        s.log_levels
