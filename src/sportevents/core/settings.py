"""Centralized application configuration using Pydantic Settings (v2).

`load_settings()` builds and caches one `Settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the working directory: .env, .env.local

The freshness window and the two network timeouts default to the values the
mobile client shipped with (1 hour, 10 s per request, 20 s per resource).
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_FRESHNESS_SECONDS = 3600
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RESOURCE_TIMEOUT = 20.0


def _default_cache_dir() -> Path:
    """Return the per-user cache directory (``$XDG_CACHE_HOME/sportevents``)."""
    root = os.getenv("XDG_CACHE_HOME")
    base = Path(root) if root else Path.home() / ".cache"
    return base / "sportevents"


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `SPORTEVENTS_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    api_base_url : str
        Scheme and host of the events API; maps from `SPORTEVENTS_API_URL`.
    events_path : str
        Path of the single events endpoint; maps from `SPORTEVENTS_EVENTS_PATH`.
    cache_dir : Path
        Directory holding the snapshot file and the preference store.
    freshness_window_seconds : int
        Age after which a cached snapshot is stale.
    request_timeout_seconds, resource_timeout_seconds : float
        Per-request socket timeout and total deadline for one fetch.
    """

    environment: EnvName = Field(default="dev", alias="SPORTEVENTS_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    api_base_url: str = Field(default="http://127.0.0.1:8000", alias="SPORTEVENTS_API_URL")
    events_path: str = Field(default="/events/", alias="SPORTEVENTS_EVENTS_PATH")
    cache_dir: Path = Field(default_factory=_default_cache_dir, alias="SPORTEVENTS_CACHE_DIR")
    freshness_window_seconds: int = Field(
        default=DEFAULT_FRESHNESS_SECONDS, gt=0, alias="SPORTEVENTS_FRESHNESS_SECONDS"
    )
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT, gt=0, alias="SPORTEVENTS_REQUEST_TIMEOUT"
    )
    resource_timeout_seconds: float = Field(
        default=DEFAULT_RESOURCE_TIMEOUT, gt=0, alias="SPORTEVENTS_RESOURCE_TIMEOUT"
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("cache_dir")
    @classmethod
    def _expand_user(cls, v: Path) -> Path:
        """Allow `~` in `SPORTEVENTS_CACHE_DIR`."""
        return v.expanduser()

    @property
    def freshness_window(self) -> timedelta:
        """Return the freshness window as a `timedelta`."""
        return timedelta(seconds=self.freshness_window_seconds)

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    Tests force a rebuild via `load_settings.cache_clear()` after mutating
    `os.environ`.
    """
    os.environ.setdefault("SPORTEVENTS_ENV", "dev")
    return Settings()


def get_logger(name: str = "sportevents") -> logging.Logger:
    """Return a process-global logger configured to the current log level."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
