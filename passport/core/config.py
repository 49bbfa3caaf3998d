from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it’s easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _getenv_bool(name: str, default: bool) -> bool:
    raw = _getenv(name, "true" if default else "false").lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    ipfs_url: str | None
    ledger_url: str | None
    external_timeout_seconds: float = 10.0
    jwt_expiration_hours: int = 24
    require_accreditation: bool = False
    cors_origins: tuple[str, ...] = ("*",)

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
    timeout_raw = _getenv("EXTERNAL_TIMEOUT_SECONDS", "10")
    jwt_hours_raw = _getenv("JWT_EXPIRATION_HOURS", "24")

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
        timeout = float(timeout_raw)
    except ValueError:
        raise ValueError(
            f"EXTERNAL_TIMEOUT_SECONDS must be a number (got {timeout_raw!r})"
        ) from None
    if timeout <= 0:
        raise ValueError(f"EXTERNAL_TIMEOUT_SECONDS must be > 0 (got {timeout_raw!r})")

    try:
        jwt_hours = int(jwt_hours_raw)
    except ValueError:
        raise ValueError(
            f"JWT_EXPIRATION_HOURS must be an integer (got {jwt_hours_raw!r})"
        ) from None
    if jwt_hours <= 0:
        raise ValueError(f"JWT_EXPIRATION_HOURS must be > 0 (got {jwt_hours_raw!r})")

    cors_origins = tuple(
        o.strip() for o in _getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    )

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getenv_bool("LOG_JSON", False),
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        ipfs_url=_getenv("IPFS_URL", "") or None,
        ledger_url=_getenv("LEDGER_URL", "") or None,
        external_timeout_seconds=timeout,
        jwt_expiration_hours=jwt_hours,
        require_accreditation=_getenv_bool("REQUIRE_ACCREDITATION", False),
        cors_origins=cors_origins or ("*",),
    )
