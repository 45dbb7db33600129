# src/config/settings.py — v2
"""Typed configuration loaded from environment and .env via pydantic-settings.

Every field maps to a BINBOH_* environment variable (e.g.
BINBOH_CACHE_ROOT, BINBOH_CACHE_BACKEND). CLI flags override them.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import ByteSize, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from binboh.core.errors import BinbohError

APP_NAME = "binboh"
MIN_LOG_ROTATION = 1024


class ConfigurationError(BinbohError):
    """Raised when configuration is internally inconsistent."""


def default_cache_root() -> Path:
    """Platform user cache directory for binboh records."""
    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    if sys.platform == "win32":
        local = os.environ.get("LOCALAPPDATA")
        if local:
            return Path(local) / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches" / APP_NAME
    return Path.home() / ".cache" / APP_NAME


class Settings(BaseSettings):
    """Application settings loaded from BINBOH_* variables."""

    model_config = SettingsConfigDict(
        env_prefix="BINBOH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Cache ===
    cache_backend: Literal["json", "sqlite", "memory"] = "json"
    cache_root: Path = Field(default_factory=default_cache_root)

    # === Hashing ===
    hash_workers: int = 4
    hash_chunk_size: int = 1024 * 1024

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: ByteSize = ByteSize(10 * 1024 * 1024)
    log_retention: int = 5

    # --- Validators ---

    @field_validator("hash_workers")
    @classmethod
    def validate_hash_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError("hash_workers must be >= 1")
        return v

    @field_validator("hash_chunk_size")
    @classmethod
    def validate_hash_chunk_size(cls, v: int) -> int:
        if v < 1024:
            raise ValueError("hash_chunk_size must be >= 1024")
        return v

    @field_validator("cache_root")
    @classmethod
    def expand_cache_root(cls, v: Path) -> Path:
        return v.expanduser()

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.log_file is not None:
            if self.log_rotation < MIN_LOG_ROTATION:
                errors.append(
                    f"LOG_ROTATION must be at least {MIN_LOG_ROTATION} bytes, "
                    f"got {self.log_rotation.human_readable()}"
                )
            if self.log_retention < 0:
                errors.append("LOG_RETENTION must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment with optional overrides.

    Args:
        **overrides: Field-level overrides (CLI flags, tests).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
