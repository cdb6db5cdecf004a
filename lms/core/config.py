from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

# HS256 keys shorter than the digest size are brute-forceable offline.
MIN_JWT_SECRET_LENGTH = 32


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    port: int
    database_url: str | None
    redis_url: str | None
    jwt_secret: str
    log_json: bool = False
    session_cookie_name: str = "lms-auth-token"
    session_ttl_days: int = 7
    cookie_secure: bool = False
    bootstrap_admin_email: str | None = None
    bootstrap_admin_password: str | None = None
    bootstrap_admin_name: str = "Administrator"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")
    ttl_raw = _getenv("SESSION_TTL_DAYS", "7")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    try:
        session_ttl_days = int(ttl_raw)
    except ValueError:
        raise ValueError(
            f"SESSION_TTL_DAYS must be an integer (got {ttl_raw!r})"
        ) from None
    if session_ttl_days <= 0:
        raise ValueError(f"SESSION_TTL_DAYS must be positive (got {session_ttl_days})")

    # No fallback: a missing secret is a deployment error, not something to
    # paper over with a well-known default.
    jwt_secret = _getenv("JWT_SECRET", "")
    if not jwt_secret:
        raise ValueError("JWT_SECRET must be set")
    if len(jwt_secret) < MIN_JWT_SECRET_LENGTH:
        raise ValueError(
            f"JWT_SECRET must be at least {MIN_JWT_SECRET_LENGTH} characters"
        )

    log_json = _parse_bool("LOG_JSON", _getenv("LOG_JSON", "false"))
    cookie_secure = _parse_bool(
        "COOKIE_SECURE",
        _getenv("COOKIE_SECURE", "true" if app_env_raw == "prod" else "false"),
    )

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        redis_url=_getenv("REDIS_URL", "") or None,
        jwt_secret=jwt_secret,
        log_json=log_json,
        session_cookie_name=_getenv("SESSION_COOKIE_NAME", "lms-auth-token"),
        session_ttl_days=session_ttl_days,
        cookie_secure=cookie_secure,
        bootstrap_admin_email=_getenv("BOOTSTRAP_ADMIN_EMAIL", "") or None,
        bootstrap_admin_password=_getenv("BOOTSTRAP_ADMIN_PASSWORD", "") or None,
        bootstrap_admin_name=_getenv("BOOTSTRAP_ADMIN_NAME", "Administrator"),
    )


SETTINGS = load_settings()
