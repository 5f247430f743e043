"""
Configuration helpers for the vacations backend.

Routers and services read settings through get_settings() instead of
touching os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_DATA_FILE = Path(__file__).resolve().parents[2] / "data" / "db.json"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_file: str
    seed_on_startup: bool
    log_level: str
    session_ttl_seconds: int
    login_rate_limit: int
    login_rate_window_seconds: int
    two_factor_code_ttl_seconds: int
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_file=os.getenv("DATA_FILE") or str(DEFAULT_DATA_FILE),
        seed_on_startup=_bool(os.getenv("SEED_ON_STARTUP"), True),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "604800"), 604800),
        login_rate_limit=_int(os.getenv("LOGIN_RATE_LIMIT", "10"), 10),
        login_rate_window_seconds=_int(os.getenv("LOGIN_RATE_WINDOW_SECONDS", "60"), 60),
        two_factor_code_ttl_seconds=_int(os.getenv("TWO_FACTOR_CODE_TTL_SECONDS", "300"), 300),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
    )
