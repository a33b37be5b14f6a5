from __future__ import annotations

import os
import threading
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator


_ENV_LOCK = threading.Lock()
_SETTINGS: "Settings | None" = None


def _read_list(value: str | None, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if value is None:
        return default
    items = tuple(part.strip() for part in value.split(",") if part.strip())
    return items or default


class Settings(BaseModel):
    """Service configuration loaded from environment variables.

    Environment precedence is:

    1. Canonical env var names (e.g. SUPABASE_URL, APP_ENV).
    2. Legacy aliases (e.g. SUPABASE_KEY, ENV) when canonical is unset.
    3. Built-in defaults where defined.

    The two upstream settings have no default; startup fails without them.
    """

    # Core
    APP_ENV: str = Field(default="local")
    SERVICE_NAME: str = Field(default="user-service")
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="pretty")

    # HTTP server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)
    CORS_ALLOW_ORIGINS: Tuple[str, ...] = Field(default=("*",))

    # Supabase
    SUPABASE_URL: str
    SUPABASE_API_KEY: str
    SUPABASE_TIMEOUT_SECONDS: float = Field(default=5.0)

    model_config = {"frozen": True}

    @field_validator("SUPABASE_URL")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("SUPABASE_URL must be an http(s) URL")
        return value

    @field_validator("LOG_FORMAT")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in {"pretty", "json"}:
            raise ValueError("LOG_FORMAT must be 'pretty' or 'json'")
        return value

    @property
    def env(self) -> str:
        """Canonical environment label used for metrics."""
        return self.APP_ENV

    @property
    def service(self) -> str:
        """Canonical service name label used for metrics."""
        return self.SERVICE_NAME

    @property
    def auth_base_url(self) -> str:
        return f"{self.SUPABASE_URL}/auth/v1"

    @property
    def rest_base_url(self) -> str:
        return f"{self.SUPABASE_URL}/rest/v1"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "Settings":
        """Build Settings from environment with support for legacy aliases.

        Canonical names are preferred; legacy aliases are only consulted if the
        canonical variable is unset.
        """

        env = os.environ if environ is None else environ

        def pick(
            primary: str,
            *aliases: str,
            default: Optional[str] = None,
        ) -> Optional[str]:
            if primary in env and env[primary]:
                return env[primary]
            for name in aliases:
                if name in env and env[name]:
                    return env[name]
            return default

        data: Dict[str, Any] = {}

        # Core
        data["APP_ENV"] = (pick("APP_ENV", "ENV", default="local") or "local").strip()
        data["SERVICE_NAME"] = (
            pick("SERVICE_NAME", default="user-service") or "user-service"
        ).strip()
        data["LOG_LEVEL"] = (
            pick("LOG_LEVEL", default="INFO") or "INFO"
        ).strip().upper()
        data["LOG_FORMAT"] = pick("LOG_FORMAT", default="pretty") or "pretty"

        # HTTP server
        data["HOST"] = pick("HOST", default="0.0.0.0") or "0.0.0.0"
        data["CORS_ALLOW_ORIGINS"] = _read_list(
            pick("CORS_ALLOW_ORIGINS", default=None), default=("*",)
        )

        # Supabase
        url = pick("SUPABASE_URL")
        if not url:
            raise RuntimeError("SUPABASE_URL must be set in the environment.")
        api_key = pick("SUPABASE_API_KEY", "SUPABASE_KEY")
        if not api_key:
            raise RuntimeError(
                "SUPABASE_API_KEY (or legacy SUPABASE_KEY) must be set in the environment."
            )
        data["SUPABASE_URL"] = url
        data["SUPABASE_API_KEY"] = api_key

        try:
            data["PORT"] = int(pick("PORT", default="3000") or "3000")
            data["SUPABASE_TIMEOUT_SECONDS"] = float(
                pick("SUPABASE_TIMEOUT_SECONDS", default="5.0") or "5.0"
            )
        except ValueError as exc:
            raise RuntimeError(f"Invalid configuration: {exc}") from exc

        try:
            return cls(**data)
        except ValidationError as exc:
            raise RuntimeError(f"Invalid configuration: {exc}") from exc


def get_settings() -> Settings:
    """Return a cached Settings instance (process-wide singleton).

    The first call reads from environment; subsequent calls return the same
    immutable Settings object.
    """
    global _SETTINGS
    if _SETTINGS is None:
        with _ENV_LOCK:
            if _SETTINGS is None:
                _SETTINGS = Settings.from_env()
    return _SETTINGS
