"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for modcache:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.modcache/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Global config** -- A single :class:`~modcache.models.GlobalConfig`
  JSON file storing defaults (base URL, timeouts, populate limit).
* **Precedence resolution** -- :func:`resolve_config` layers environment
  variables over the config file over defaults.
* **API key** -- :func:`resolve_api_key` reads ``NEXUS_API_KEY``.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from modcache.exceptions import ConfigError
from modcache.models import GlobalConfig

_APP_NAME = "modcache"
_CONFIG_FILENAME = "config.json"

API_KEY_ENV = "NEXUS_API_KEY"
CACHE_PATH_ENV = "NEXUS_CACHE_PATH"
BASE_URL_ENV = "MODCACHE_BASE_URL"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/modcache/`` (default ``~/.config/modcache/``).
    On macOS/Windows: ``~/.modcache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds the entity store. Unlike a response cache, this data is the
    user's only copy of metadata for mods the Nexus has since hidden or
    removed, so deleting it loses information.

    On Linux/BSD: ``$XDG_CACHE_HOME/modcache/`` (default ``~/.cache/modcache/``).
    On macOS/Windows: ``~/.modcache/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/modcache/`` (default ``~/.local/share/modcache/``).
    On macOS/Windows: ``~/.modcache/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~modcache.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_config(cli_format: Optional[str] = None) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``cli_format``)
        2. Environment variables (``NEXUS_CACHE_PATH``, ``MODCACHE_BASE_URL``)
        3. User config (``~/.config/modcache/config.json``)
        4. Defaults
    """
    config = load_global_config()

    env_cache = os.environ.get(CACHE_PATH_ENV)
    if env_cache:
        config.cache.directory = env_cache
    env_base_url = os.environ.get(BASE_URL_ENV)
    if env_base_url:
        config.request.base_url = env_base_url

    if cli_format is not None:
        config.output.format = cli_format
    return config


def resolve_store_dir(config: GlobalConfig) -> Path:
    """Return the directory holding the entity store for *config*."""
    if config.cache.directory:
        path = Path(config.cache.directory).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path
    return get_cache_dir()


def resolve_api_key() -> str:
    """Read the personal Nexus API key from the environment.

    Raises:
        ConfigError: If ``NEXUS_API_KEY`` is unset or empty.
    """
    value = os.environ.get(API_KEY_ENV, "").strip()
    if not value:
        raise ConfigError(
            f"You must provide your personal Nexus API key in the env var {API_KEY_ENV}."
        )
    return value
