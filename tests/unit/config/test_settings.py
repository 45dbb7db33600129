# tests/unit/config/test_settings.py — v3
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from binboh.config import settings as settings_module
from binboh.config.settings import (
    ConfigurationError,
    Settings,
    default_cache_root,
    load_settings,
)


class TestSettingsDefaults:
    def test_default_cache(self):
        s = Settings(_env_file=None)
        assert s.cache_backend == "json"
        assert s.cache_root == default_cache_root()

    def test_default_hashing(self):
        s = Settings(_env_file=None)
        assert s.hash_workers == 4
        assert s.hash_chunk_size == 1024 * 1024

    def test_default_logging(self):
        s = Settings(_env_file=None)
        assert s.log_level == "WARNING"
        assert s.log_format == "text"
        assert s.log_file is None
        assert s.log_rotation == 10 * 1024 * 1024
        assert s.log_retention == 5


class TestSettingsEnvironment:
    def test_env_prefix(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BINBOH_CACHE_ROOT", str(tmp_path))
        monkeypatch.setenv("BINBOH_CACHE_BACKEND", "sqlite")
        s = Settings(_env_file=None)
        assert s.cache_root == tmp_path
        assert s.cache_backend == "sqlite"

    def test_override_beats_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BINBOH_CACHE_BACKEND", "sqlite")
        s = Settings(_env_file=None, cache_backend="json")
        assert s.cache_backend == "json"

    def test_cache_root_expanded(self):
        s = Settings(_env_file=None, cache_root="~/somewhere")
        assert "~" not in str(s.cache_root)


class TestSettingsValidation:
    def test_hash_workers_positive(self):
        with pytest.raises(ValidationError, match="hash_workers"):
            Settings(_env_file=None, hash_workers=0)

    def test_chunk_size_minimum(self):
        with pytest.raises(ValidationError, match="hash_chunk_size"):
            Settings(_env_file=None, hash_chunk_size=10)

    def test_invalid_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_backend="redis")

    def test_rotation_parsed_as_byte_size(self):
        s = Settings(_env_file=None, log_rotation="5MiB")
        assert s.log_rotation == 5 * 1024 * 1024

    def test_rotation_decimal_units(self, monkeypatch):
        monkeypatch.setenv("BINBOH_LOG_ROTATION", "2MB")
        assert Settings(_env_file=None).log_rotation == 2_000_000

    def test_unparseable_rotation(self):
        with pytest.raises(ValidationError, match="log_rotation"):
            Settings(_env_file=None, log_rotation="huge")

    def test_tiny_rotation_with_log_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="LOG_ROTATION"):
            Settings(_env_file=None, log_file=tmp_path / "x.log", log_rotation="10B")

    def test_tiny_rotation_ignored_without_log_file(self):
        assert Settings(_env_file=None, log_rotation="10B").log_rotation == 10

    def test_negative_retention(self, tmp_path):
        with pytest.raises(ConfigurationError, match="LOG_RETENTION"):
            Settings(_env_file=None, log_file=tmp_path / "x.log", log_retention=-1)


class TestDefaultCacheRoot:
    def test_xdg_cache_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
        assert default_cache_root() == tmp_path / "binboh"

    def test_linux_fallback(self, monkeypatch):
        monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
        monkeypatch.setattr(settings_module.sys, "platform", "linux")
        assert default_cache_root() == Path.home() / ".cache" / "binboh"

    def test_macos(self, monkeypatch):
        monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
        monkeypatch.setattr(settings_module.sys, "platform", "darwin")
        assert default_cache_root() == Path.home() / "Library" / "Caches" / "binboh"

    def test_windows_local_appdata(self, monkeypatch, tmp_path):
        monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
        monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
        monkeypatch.setattr(settings_module.sys, "platform", "win32")
        assert default_cache_root() == tmp_path / "binboh"


class TestLoadSettings:
    def test_overrides(self, tmp_path):
        s = load_settings(_env_file=None, cache_root=tmp_path, hash_workers=2)
        assert s.cache_root == tmp_path
        assert s.hash_workers == 2
