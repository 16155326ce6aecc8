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


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
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
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    analysis_remote_url: str | None
    analysis_remote_api_key: str | None
    analysis_timeout_s: float
    analysis_reduced_retry: bool
    resume_max_chars: int
    job_max_chars: int
    cover_letter_max_chars: int
    reduced_resume_max_chars: int
    reduced_job_max_chars: int
    reduced_cover_letter_max_chars: int
    pdf_max_pages: int
    max_upload_bytes: int


settings = Settings(
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
            "http://localhost:3000",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
    analysis_remote_url=_get_env("ANALYSIS_REMOTE_URL"),
    analysis_remote_api_key=_get_env("ANALYSIS_REMOTE_API_KEY"),
    analysis_timeout_s=_get_env_float("ANALYSIS_TIMEOUT_S", 45.0),
    analysis_reduced_retry=_get_env_bool("ANALYSIS_REDUCED_RETRY", True),
    resume_max_chars=_get_env_int("RESUME_MAX_CHARS", 15000),
    job_max_chars=_get_env_int("JOB_MAX_CHARS", 5000),
    cover_letter_max_chars=_get_env_int("COVER_LETTER_MAX_CHARS", 10000),
    reduced_resume_max_chars=_get_env_int("REDUCED_RESUME_MAX_CHARS", 3000),
    reduced_job_max_chars=_get_env_int("REDUCED_JOB_MAX_CHARS", 1500),
    reduced_cover_letter_max_chars=_get_env_int("REDUCED_COVER_LETTER_MAX_CHARS", 1500),
    pdf_max_pages=_get_env_int("PDF_MAX_PAGES", 50),
    max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
)

if settings.resume_max_chars < settings.reduced_resume_max_chars:
    raise RuntimeError("RESUME_MAX_CHARS must not be smaller than REDUCED_RESUME_MAX_CHARS.")

__all__ = ["Settings", "settings"]
