from __future__ import annotations

from position_engine.shared.config import get_settings


def test_settings_defaults(monkeypatch):
    for name in (
        "LOG_LEVEL",
        "CORS_ALLOW_ORIGINS",
        "BREAK_EVEN_MAX_ITERATIONS",
        "BREAK_EVEN_SEARCH_FACTOR",
        "APR_ANNUALIZATION_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.log_level == "INFO"
    assert settings.cors_allow_origins == ["*"]
    assert settings.break_even_max_iterations == 50
    assert settings.break_even_search_factor == 10
    assert settings.apr_annualization_days == 365


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("BREAK_EVEN_MAX_ITERATIONS", "80")
    monkeypatch.setenv("APR_ANNUALIZATION_DAYS", "360")

    settings = get_settings()

    assert settings.log_level == "DEBUG"
    assert settings.cors_allow_origins == ["https://a.example", "https://b.example"]
    assert settings.break_even_max_iterations == 80
    assert settings.apr_annualization_days == 360
