from __future__ import annotations

from dataclasses import dataclass
import os

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    app_name: str
    database_url: str
    database_echo: bool
    session_secret_key: str
    session_cookie_secure: bool
    session_max_age_seconds: int
    default_theme: str
    log_level: str
    log_format: str
    log_redact_fields: str
    log_requests: bool
    log_request_skip_paths: str
    log_uvicorn_access: bool


def load_settings() -> Settings:
    return Settings(
        app_name=_env_str("APP_NAME", "themekit"),
        database_url=_env_str("DATABASE_URL", "sqlite+pysqlite:///./themekit.db"),
        database_echo=_env_bool("DATABASE_ECHO", False),
        session_secret_key=_env_str("SESSION_SECRET_KEY", "dev-insecure-change-me"),
        session_cookie_secure=_env_bool("SESSION_COOKIE_SECURE", False),
        session_max_age_seconds=_env_int("SESSION_MAX_AGE_SECONDS", 14 * 24 * 3600),
        default_theme=_env_str("DEFAULT_THEME", "default"),
        log_level=_env_str("LOG_LEVEL", "INFO"),
        log_format=_env_str("LOG_FORMAT", "console"),
        log_redact_fields=_env_str("LOG_REDACT_FIELDS", ""),
        log_requests=_env_bool("LOG_REQUESTS", True),
        log_request_skip_paths=_env_str("LOG_REQUEST_SKIP_PATHS", "/healthz"),
        log_uvicorn_access=_env_bool("LOG_UVICORN_ACCESS", False),
    )


settings = load_settings()
