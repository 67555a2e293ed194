"""Where pokedex keeps its settings, and how the effective settings are chosen.

Settings live in one JSON document, ``config.json``, validated as
:class:`~pokedex.models.GlobalConfig`.  On Linux and the BSDs it sits under
``$XDG_CONFIG_HOME/pokedex`` and crash logs under ``$XDG_DATA_HOME/pokedex``.
Elsewhere both live under ``~/.pokedex``.

The values a command actually runs with come from :func:`resolve_config`:

1. command-line flags (``--base-url``, ``--cache-ttl``)
2. environment (``POKEDEX_BASE_URL``, ``POKEDEX_CACHE_TTL``)
3. ``config.json``
4. model defaults (5 second cache TTL, public PokeAPI)

Response bodies are never written here; the cache is memory-only.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from pokedex.exceptions import ConfigError
from pokedex.models import GlobalConfig

_APP_NAME = "pokedex"
_CONFIG_FILENAME = "config.json"

ENV_BASE_URL = "POKEDEX_BASE_URL"
ENV_CACHE_TTL = "POKEDEX_CACHE_TTL"


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: str) -> Path:
    """Resolve and create one of the application directories.

    Args:
        xdg_var: XDG environment variable consulted first (``XDG_CONFIG_HOME``).
        xdg_default: Path under ``$HOME`` used when *xdg_var* is unset
            (``.config``).

    Non-XDG platforms use ``~/.pokedex`` for everything.
    """
    if _is_xdg_platform():
        root = os.environ.get(xdg_var) or str(Path.home() / xdg_default)
        path = Path(root) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """``~/.config/pokedex`` (XDG) or ``~/.pokedex``."""
    return _app_dir("XDG_CONFIG_HOME", ".config")


def get_data_dir() -> Path:
    """``~/.local/share/pokedex`` (XDG) or ``~/.pokedex``; crash logs go in ``logs/``."""
    return _app_dir("XDG_DATA_HOME", os.path.join(".local", "share"))


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* so readers never see a partial file.

    The text goes to a sibling temp file that is fsynced and then renamed
    over *path*.  The temp file is removed if anything fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        try:
            os.unlink(tmp.name)
        except OSError:
            pass
        raise


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read ``config.json``, or return defaults when it does not exist.

    Raises:
        ConfigError: The file is not JSON or does not validate (for example
            a non-positive ``cache.ttl_seconds``).
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    payload = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    _atomic_write(global_config_path(), payload)


def _parse_ttl(raw: str, source: str) -> float:
    try:
        ttl = float(raw)
    except ValueError:
        raise ConfigError(f"Invalid cache TTL {raw!r} from {source}") from None
    if ttl <= 0:
        raise ConfigError(f"Cache TTL must be positive, got {raw!r} from {source}")
    return ttl


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_cache_ttl: Optional[float] = None,
) -> GlobalConfig:
    """Merge flags, environment and ``config.json`` into the settings to run with.

    Nothing is written back to disk.

    Raises:
        ConfigError: ``config.json`` is invalid, or an override (flag or
            environment) is not a usable value.
    """
    config = load_global_config()

    base_url = cli_base_url or os.environ.get(ENV_BASE_URL)
    if base_url:
        config.base_url = base_url

    if cli_cache_ttl is not None:
        config.cache.ttl_seconds = _parse_ttl(str(cli_cache_ttl), "--cache-ttl")
    elif os.environ.get(ENV_CACHE_TTL):
        config.cache.ttl_seconds = _parse_ttl(os.environ[ENV_CACHE_TTL], ENV_CACHE_TTL)

    try:
        return GlobalConfig.model_validate(config.model_dump())
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
