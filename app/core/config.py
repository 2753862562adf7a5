from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUE = ("true", "1", "yes")
_FALSE = ("false", "0", "no")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it’s easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _getbool(name: str, default: str) -> bool:
    raw = _getenv(name, default).lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be true|false (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    safe_mode: bool
    # Shared secrets for the monitoring endpoint.  None means the scheme
    # is disabled and its validator always reports false.
    system_passcode: str | None
    bearer_token: str | None

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    def __repr__(self) -> str:
        # Secrets stay out of repr so a logged Settings object never leaks them.
        return (
            f"Settings(app_env={self.app_env!r}, log_level={self.log_level!r}, "
            f"log_json={self.log_json!r}, port={self.port!r}, "
            f"safe_mode={self.safe_mode!r}, "
            f"system_passcode={'***' if self.system_passcode else None}, "
            f"bearer_token={'***' if self.bearer_token else None})"
        )


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")

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

    system_passcode = _getenv("SYSTEM_PASSCODE", "") or None
    bearer_token = _getenv("METRICS_BEARER_TOKEN", "") or None

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getbool("LOG_JSON", "false"),
        port=port,
        safe_mode=_getbool("SAFE_MODE", "true"),
        system_passcode=system_passcode,
        bearer_token=bearer_token,
    )


# Optional: module-level singleton so imports are cheap
SETTINGS = load_settings()
