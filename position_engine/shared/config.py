from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _csv(name: str, default: str) -> list[str]:
    value = _env(name, default) or ""
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    log_level: str
    cors_allow_origins: list[str]
    break_even_max_iterations: int
    break_even_search_factor: int
    apr_annualization_days: int


def get_settings() -> Settings:
    return Settings(
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
        cors_allow_origins=_csv("CORS_ALLOW_ORIGINS", "*"),
        break_even_max_iterations=int(_env("BREAK_EVEN_MAX_ITERATIONS", "50")),
        break_even_search_factor=int(_env("BREAK_EVEN_SEARCH_FACTOR", "10")),
        apr_annualization_days=int(_env("APR_ANNUALIZATION_DAYS", "365")),
    )
