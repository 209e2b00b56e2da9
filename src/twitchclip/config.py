"""Configuration loading with XDG paths and credential-source resolution.

This module handles the user-side configuration for twitchclip:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.twitchclip/`` on macOS and Windows.  See :func:`get_config_dir`.
* **Settings** -- A single :class:`~twitchclip.models.ClientSettings` JSON
  file, located by :func:`get_config_path` and read by :func:`load_settings`.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or interactive prompts; :func:`resolve_credentials`
  applies it to every source declared in the settings.

Settings are only ever read.  Tokens obtained at runtime are kept in the
client session and never written back.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
from pathlib import Path
from typing import Optional

from twitchclip.exceptions import ConfigError
from twitchclip.models import ClientSettings, Credentials

_APP_NAME = "twitchclip"
_CONFIG_FILENAME = "config.json"
_CONFIG_ENV_VAR = "TWITCHCLIP_CONFIG"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory.

    On Linux/BSD: ``$XDG_CONFIG_HOME/twitchclip/`` (default ``~/.config/twitchclip/``).
    On macOS/Windows: ``~/.twitchclip/``.

    The directory is not created; twitchclip never writes to it.
    """
    if not _is_xdg_platform():
        return Path.home() / f".{_APP_NAME}"
    env_value = os.environ.get("XDG_CONFIG_HOME", "")
    base = Path(env_value) if env_value else Path.home() / ".config"
    return base / _APP_NAME


def get_config_path() -> Path:
    """Return the settings file path.

    ``$TWITCHCLIP_CONFIG`` wins over ``<config dir>/config.json``.
    """
    env_path = os.environ.get(_CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / _CONFIG_FILENAME


# --- Settings ---


def load_settings(path: Optional[Path] = None) -> ClientSettings:
    """Load :class:`~twitchclip.models.ClientSettings` from disk.

    Args:
        path: Explicit settings file.  Defaults to :func:`get_config_path`.

    Returns:
        The parsed settings, or defaults if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or invalid fields.
    """
    path = path or get_config_path()
    if not path.is_file():
        return ClientSettings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ClientSettings.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config at {path}: {exc}") from exc


# --- Credential source resolution ---


def resolve_credential(
    source: Optional[str],
    required: bool = True,
    name: str = "credential",
) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Args:
        source: The source descriptor string, or ``None`` for "not configured".
        required: When ``False``, an unset env var, a missing file or a
            ``None`` source resolve to ``""`` instead of raising.
        name: What the credential is (e.g. ``"Twitch client secret"``).
            Used in error messages and the prompt.

    Returns:
        The resolved credential string.

    Raises:
        ConfigError: If a required source can't be resolved, or the format
            is unknown.
    """
    if source is None:
        if required:
            raise ConfigError(f"No source configured for the {name}")
        return ""

    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            if not required:
                return ""
            raise ConfigError(f"Cannot resolve the {name}: environment variable '{var_name}' is not set")
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            if not required:
                return ""
            raise ConfigError(f"Cannot resolve the {name}: file {path} not found")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read the {name} from {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(f"Cannot prompt for the {name}: stdin is not a TTY")
        return getpass.getpass(f"Enter the {name}: ")

    raise ConfigError(f"Unknown credential source for the {name}: {source}")


def resolve_credentials(settings: ClientSettings) -> Credentials:
    """Resolve every credential source declared in *settings*.

    The client id and secret are required; the tokens are optional.

    Raises:
        ConfigError: If the client id or secret cannot be resolved.
    """
    return Credentials(
        client_id=resolve_credential(settings.client_id_source, name="Twitch client id"),
        client_secret=resolve_credential(settings.client_secret_source, name="Twitch client secret"),
        access_token=resolve_credential(
            settings.access_token_source, required=False, name="Twitch access token"
        ),
        refresh_token=resolve_credential(
            settings.refresh_token_source, required=False, name="Twitch refresh token"
        ),
    )
