"""Tests for pokedex.config -- XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from pokedex.config import (
    _atomic_write,
    get_config_dir,
    get_data_dir,
    global_config_path,
    load_global_config,
    resolve_config,
    save_global_config,
)
from pokedex.exceptions import ConfigError
from pokedex.models import DEFAULT_BASE_URL, CacheConfig, GlobalConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPathsLinux:
    """XDG paths on Linux (the default XDG platform)."""

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("pokedex.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "pokedex"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("pokedex.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "pokedex"

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("pokedex.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".local" / "share" / "pokedex"
        assert result.is_dir()


class TestXDGPathsFallback:
    """Fallback paths on non-XDG platforms (macOS, Windows)."""

    def test_config_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("pokedex.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".pokedex"

    def test_data_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("pokedex.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".pokedex"
        assert result.is_dir()


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        _atomic_write(target, "hello world")
        assert target.read_text(encoding="utf-8") == "hello world"

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        target.write_text("old content", encoding="utf-8")
        _atomic_write(target, "new content")
        assert target.read_text(encoding="utf-8") == "new content"

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        with patch("pokedex.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                _atomic_write(target, "will fail")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Global config file
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_load_returns_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.cache.ttl_seconds == 5.0

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        original = GlobalConfig(page_size=10, cache=CacheConfig(ttl_seconds=30))
        save_global_config(original)
        assert load_global_config() == original

    def test_saved_config_is_valid_json(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig())
        data = json.loads(global_config_path().read_text(encoding="utf-8"))
        assert data["cache"]["ttl_seconds"] == 5.0
        assert data["page_size"] == 20

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        global_config_path().write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_load_invalid_schema_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(global_config_path(), {"cache": {"ttl_seconds": 0}})
        with pytest.raises(ConfigError):
            load_global_config()

    def test_partial_file_fills_defaults(self, isolated_config: Path) -> None:
        _write_json(global_config_path(), {"page_size": 7})
        config = load_global_config()
        assert config.page_size == 7
        assert config.cache.ttl_seconds == 5.0

    def test_stale_output_section_is_dropped(self, isolated_config: Path) -> None:
        _write_json(global_config_path(), {"output": {"format": "json"}, "page_size": 4})
        config = load_global_config()
        assert config.page_size == 4
        assert "output" not in config.model_dump()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    @pytest.fixture(autouse=True)
    def _isolate(self, isolated_config: Path) -> None:
        pass

    def test_defaults(self) -> None:
        config = resolve_config()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.cache.ttl_seconds == 5.0

    def test_file_overrides_defaults(self) -> None:
        save_global_config(GlobalConfig(cache=CacheConfig(ttl_seconds=60)))
        assert resolve_config().cache.ttl_seconds == 60

    def test_env_overrides_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        save_global_config(GlobalConfig(base_url="https://file.test/api/v2/"))
        monkeypatch.setenv("POKEDEX_BASE_URL", "https://env.test/api/v2/")
        monkeypatch.setenv("POKEDEX_CACHE_TTL", "12.5")

        config = resolve_config()
        assert config.base_url == "https://env.test/api/v2/"
        assert config.cache.ttl_seconds == 12.5

    def test_cli_overrides_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POKEDEX_BASE_URL", "https://env.test/api/v2/")
        monkeypatch.setenv("POKEDEX_CACHE_TTL", "12.5")

        config = resolve_config(cli_base_url="https://cli.test/api/v2/", cli_cache_ttl=2)
        assert config.base_url == "https://cli.test/api/v2/"
        assert config.cache.ttl_seconds == 2

    def test_cli_none_keeps_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POKEDEX_CACHE_TTL", "8")
        assert resolve_config(cli_base_url=None, cli_cache_ttl=None).cache.ttl_seconds == 8

    def test_resolve_does_not_write_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POKEDEX_CACHE_TTL", "9")
        resolve_config()
        assert not global_config_path().exists()

    @pytest.mark.parametrize("raw", ["abc", "0", "-3"])
    def test_invalid_env_ttl(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        monkeypatch.setenv("POKEDEX_CACHE_TTL", raw)
        with pytest.raises(ConfigError, match="POKEDEX_CACHE_TTL"):
            resolve_config()

    def test_invalid_cli_ttl(self) -> None:
        with pytest.raises(ConfigError, match="--cache-ttl"):
            resolve_config(cli_cache_ttl=0)

    def test_config_error_exit_code(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            resolve_config(cli_cache_ttl=-1)
        assert exc_info.value.exit_code == 1
