import pytest

from index_ranges.utils.settings import (
    DEFAULT_EVENT_WORKERS,
    DEFAULT_RECOVERY_TIMEOUT_SECONDS,
    DEFAULT_SETTLE_DELAY_MS,
    get_settings,
    refresh_settings_cache,
)

_ENV_VARS = (
    "INDEX_RANGE_SETTLE_DELAY_MS",
    "INDEX_RANGE_RECOVERY_TIMEOUT_SECONDS",
    "INDEX_RANGE_EVENT_WORKERS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    refresh_settings_cache()
    yield
    refresh_settings_cache()


def test_defaults():
    settings = get_settings()
    assert settings.settle_delay_ms == DEFAULT_SETTLE_DELAY_MS == 250
    assert settings.settle_delay_seconds == pytest.approx(0.25)
    assert settings.recovery_timeout_seconds == DEFAULT_RECOVERY_TIMEOUT_SECONDS
    assert settings.event_workers == DEFAULT_EVENT_WORKERS


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("INDEX_RANGE_SETTLE_DELAY_MS", "0")
    monkeypatch.setenv("INDEX_RANGE_RECOVERY_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("INDEX_RANGE_EVENT_WORKERS", "8")
    refresh_settings_cache()
    settings = get_settings()
    assert settings.settle_delay_ms == 0
    assert settings.recovery_timeout_seconds == 2.5
    assert settings.event_workers == 8


@pytest.mark.parametrize("raw", ["abc", "-5", "1.5"])
def test_invalid_settle_delay_falls_back(monkeypatch, raw):
    monkeypatch.setenv("INDEX_RANGE_SETTLE_DELAY_MS", raw)
    refresh_settings_cache()
    assert get_settings().settle_delay_ms == DEFAULT_SETTLE_DELAY_MS


def test_settings_are_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("INDEX_RANGE_SETTLE_DELAY_MS", "10")
    assert get_settings() is first
    refresh_settings_cache()
    assert get_settings().settle_delay_ms == 10
