"""Environment driven settings for the API, the CLI and the media adapter."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple


logger = logging.getLogger(__name__)

_ENV_PREFIX = "SPORTADMIN_"
_DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent / "sportadmin.sqlite"
_DEFAULT_MEDIA_ROOT = Path(__file__).resolve().parent.parent / "media"
_DEFAULT_MEDIA_TIMEOUT = 30.0
_DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(_ENV_PREFIX + name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_float(name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s%s: %s; using default %.2f", _ENV_PREFIX, name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = _env(name)
    if raw is None:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class AppConfig:
    db_path: str = str(_DEFAULT_DB_PATH)
    media_upload_url: Optional[str] = None
    media_upload_preset: Optional[str] = None
    media_api_key: Optional[str] = None
    media_root: str = str(_DEFAULT_MEDIA_ROOT)
    media_base_url: str = "/media"
    media_timeout: float = _DEFAULT_MEDIA_TIMEOUT
    cors_origins: Tuple[str, ...] = field(default=_DEFAULT_CORS_ORIGINS)
    log_level: str = "INFO"

    @property
    def uses_remote_media(self) -> bool:
        return bool(self.media_upload_url)

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            db_path=_env("DB_PATH", str(_DEFAULT_DB_PATH)),
            media_upload_url=_env("MEDIA_UPLOAD_URL"),
            media_upload_preset=_env("MEDIA_UPLOAD_PRESET"),
            media_api_key=_env("MEDIA_API_KEY"),
            media_root=_env("MEDIA_ROOT", str(_DEFAULT_MEDIA_ROOT)),
            media_base_url=_env("MEDIA_BASE_URL", "/media").rstrip("/"),
            media_timeout=_env_float("MEDIA_TIMEOUT", _DEFAULT_MEDIA_TIMEOUT, clamp_min=1.0),
            cors_origins=_env_list("CORS_ORIGINS", _DEFAULT_CORS_ORIGINS),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache
def get_config() -> AppConfig:
    """Return the process-wide configuration read from the environment."""
    return AppConfig.from_env()


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging and align the uvicorn loggers with it."""
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(resolved)
