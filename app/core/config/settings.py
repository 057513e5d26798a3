from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    log_level: str
    sentry_dsn: str | None
    rate_limit: str
    rate_limit_enabled: bool
    analysis_rate_limit: str
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    analysis_db_path: str
    analysis_cache_hours: int
    analysis_ttl_days: int
    analysis_retention_days: int
    default_target_role: str
    insight_run_logging: bool


def load_settings() -> Settings:
    return Settings(
        log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
        sentry_dsn=_get_env("SENTRY_DSN"),
        rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
        rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
        analysis_rate_limit=_get_env("ANALYSIS_RATE_LIMIT", "10/minute") or "10/minute",
        cors_allowed_origins=_get_env_list(
            "CORS_ALLOWED_ORIGINS",
            [
                "http://localhost:5173",
                "http://127.0.0.1:5173",
                "http://localhost:3000",
            ],
        ),
        cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
        analysis_db_path=_get_env("ANALYSIS_DB_PATH", "data/career_analysis.db") or "data/career_analysis.db",
        analysis_cache_hours=max(0, _get_env_int("ANALYSIS_CACHE_HOURS", 24)),
        analysis_ttl_days=max(1, _get_env_int("ANALYSIS_TTL_DAYS", 7)),
        analysis_retention_days=max(1, _get_env_int("ANALYSIS_RETENTION_DAYS", 180)),
        default_target_role=_get_env("DEFAULT_TARGET_ROLE", "Software Developer") or "Software Developer",
        insight_run_logging=_get_env_bool("INSIGHT_RUN_LOGGING", True),
    )


settings = load_settings()
