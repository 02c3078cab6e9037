"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for apicatalog:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.apicatalog/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~apicatalog.models.GlobalConfig`
  JSON file holding the catalog connection settings and export defaults.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, an explicit ``--config`` file, project-local config,
  and global config into the final effective configuration.
* **Credential resolution** -- :func:`resolve_credential` reads the catalog
  password from env vars, files, or an interactive prompt.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Any, Optional

from apicatalog.exceptions import ConfigError
from apicatalog.models import GlobalConfig

_APP_NAME = "apicatalog"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "apicatalog.json"

# Environment variable -> catalog config field.
_ENV_OVERRIDES = {
    "APICATALOG_URL": "url",
    "APICATALOG_BASEPATH": "basepath",
    "APICATALOG_USER": "user",
    "APICATALOG_PASSWORD": "password",
    "APICATALOG_DATASPACE": "dataspace",
    "APICATALOG_DATASET": "dataset",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/apicatalog/`` (default ``~/.config/apicatalog/``).
    On macOS/Windows: ``~/.apicatalog/``.
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/apicatalog/`` (default ``~/.local/share/apicatalog/``).
    On macOS/Windows: ``~/.apicatalog/logs/``.
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On any failure the temp file is cleaned up.
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


def _read_json_file(path: Path, what: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {what} at {path}: expected a JSON object")
    return data


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~apicatalog.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json_file(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local and explicit config files ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./apicatalog.json``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json_file(path, "project config")


def load_config_file(path: str) -> dict[str, Any]:
    """Load an explicit config file passed with ``--config``.

    Raises:
        ConfigError: If the file is missing or is not a JSON object.
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ConfigError(f"Config file not found: {file_path}")
    return _read_json_file(file_path, "config file")


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overlay* into a copy of *base*."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    config_file: Optional[str] = None,
    cli_url: Optional[str] = None,
    cli_user: Optional[str] = None,
    cli_password: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``--url``, ``--user``, ``--password``)
        2. Environment variables (``APICATALOG_URL``, ``APICATALOG_USER``, ...)
        3. Explicit config file (``--config``)
        4. Project config (``./apicatalog.json``)
        5. User config (``~/.config/apicatalog/config.json``)
        6. Defaults

    Returns:
        The effective :class:`~apicatalog.models.GlobalConfig`.

    Raises:
        ConfigError: If any layer is unreadable or the merged result fails
            validation.
    """
    data = load_global_config().model_dump(mode="json")

    project = load_project_config()
    if project is not None:
        data = _merge(data, project)

    if config_file is not None:
        data = _merge(data, load_config_file(config_file))

    catalog: dict[str, Any] = dict(data.get("catalog") or {})
    for env_var, field in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            catalog[field] = value

    if cli_url is not None:
        catalog["url"] = cli_url
    if cli_user is not None:
        catalog["user"] = cli_user
    if cli_password is not None:
        catalog["password"] = cli_password
    data["catalog"] = catalog

    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Catalog password: ")

    raise ConfigError(f"Unknown credential source format: {source}")


def resolve_password(config: GlobalConfig) -> Optional[str]:
    """Return the catalog password, consulting ``password_source`` if needed."""
    catalog = config.catalog
    if catalog.password:
        return catalog.password
    if catalog.password_source:
        return resolve_credential(catalog.password_source)
    return None
