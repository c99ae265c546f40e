"""Settings management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for ceisa_bridge:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.ceisa-bridge/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Settings file** -- a single :class:`~ceisa_bridge.models.Settings` JSON
  file holding the submission endpoint, auth strategy, and OAuth endpoints.
* **Precedence resolution** -- :func:`resolve_settings` layers environment
  variables (optionally loaded from ``./.env``) and CLI flags over the file.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or interactive prompts; secrets are never written
  to the settings file.
* **Core configuration** -- :func:`build_api_config` and
  :func:`build_credential_config` turn resolved settings into the
  :class:`~ceisa_bridge.models.ApiConfig` and
  :class:`~ceisa_bridge.models.CredentialConfig` the core consumes.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ceisa_bridge.exceptions import ConfigError
from ceisa_bridge.models import (
    ApiConfig,
    ApiKeyAuth,
    AuthType,
    BasicAuth,
    CredentialConfig,
    LegacyAuth,
    NoAuth,
    OAuth2Auth,
    Settings,
    parse_auth_type,
)

_APP_NAME = "ceisa-bridge"
_CONFIG_FILENAME = "config.json"
_ENV_FILENAME = ".env"

DEFAULT_LOGIN_URL = "https://apis-gw.beacukai.go.id/nle-oauth/v1/user/login"
"""CEISA gateway login endpoint used when no login URL is configured."""

DEFAULT_REFRESH_URL = "https://apis-gw.beacukai.go.id/nle-oauth/v1/user/update-token"
"""CEISA gateway refresh endpoint used when no refresh URL is configured."""

DEFAULT_TIMEOUT = 30

# Environment variables that override the settings file.
ENV_API_ENDPOINT = "CEISA_API_ENDPOINT"
ENV_API_TIMEOUT = "CEISA_API_TIMEOUT"
ENV_AUTH_TYPE = "CEISA_AUTH_TYPE"
ENV_API_KEY = "CEISA_API_KEY"
ENV_API_USERNAME = "CEISA_API_USERNAME"
ENV_API_PASSWORD = "CEISA_API_PASSWORD"
ENV_LOGIN_URL = "CEISA_LOGIN_URL"
ENV_REFRESH_URL = "CEISA_REFRESH_URL"
ENV_OAUTH_USERNAME = "CEISA_OAUTH_USERNAME"
ENV_OAUTH_PASSWORD = "CEISA_OAUTH_PASSWORD"

ENV_VARS = (
    ENV_API_ENDPOINT,
    ENV_API_TIMEOUT,
    ENV_AUTH_TYPE,
    ENV_API_KEY,
    ENV_API_USERNAME,
    ENV_API_PASSWORD,
    ENV_LOGIN_URL,
    ENV_REFRESH_URL,
    ENV_OAUTH_USERNAME,
    ENV_OAUTH_PASSWORD,
)


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform uses XDG Base Directory paths (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/ceisa-bridge/`` (default
    ``~/.config/ceisa-bridge/``). On macOS/Windows: ``~/.ceisa-bridge/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/ceisa-bridge/`` (default
    ``~/.local/share/ceisa-bridge/``). On macOS/Windows:
    ``~/.ceisa-bridge/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.
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


# --- Settings file ---


def settings_path() -> Path:
    """Path to the settings file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_settings() -> Settings:
    """Load the settings file from the config directory.

    Returns:
        The deserialised :class:`~ceisa_bridge.models.Settings`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = settings_path()
    if not path.is_file():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Settings.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid settings at {path}: {exc}") from exc


def save_settings(settings: Settings) -> None:
    """Persist *settings* atomically to disk."""
    data = settings.model_dump(mode="json")
    _atomic_write(settings_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def load_env_file(path: Optional[Path] = None) -> bool:
    """Load ``KEY=value`` pairs from a ``.env`` file into the environment.

    Variables already present in the environment win over the file.

    Args:
        path: File to load. Defaults to ``./.env``.

    Returns:
        ``True`` if a file was found and loaded.
    """
    env_path = path or Path.cwd() / _ENV_FILENAME
    if not env_path.is_file():
        return False
    return load_dotenv(env_path, override=False)


def resolve_settings(
    cli_endpoint: Optional[str] = None,
    cli_timeout: Optional[int] = None,
    cli_auth_type: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> Settings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``CEISA_*``)
        3. Settings file (``~/.config/ceisa-bridge/config.json``)
        4. Defaults

    Secrets supplied through the environment (``CEISA_API_KEY``,
    ``CEISA_API_PASSWORD``, ``CEISA_OAUTH_PASSWORD``) are recorded as
    ``env:`` credential sources so they are read lazily and never persisted.

    Raises:
        ConfigError: If ``CEISA_API_TIMEOUT`` is not an integer. An unknown
            auth type is not an error; it selects ``legacy`` with a warning.
    """
    settings = load_settings()
    api = settings.api
    oauth = settings.oauth

    env = os.environ
    if env.get(ENV_API_ENDPOINT):
        api.endpoint = env[ENV_API_ENDPOINT]
    if env.get(ENV_API_TIMEOUT):
        api.timeout = _parse_timeout(env[ENV_API_TIMEOUT], ENV_API_TIMEOUT)
    if env.get(ENV_AUTH_TYPE):
        api.auth_type = parse_auth_type(env[ENV_AUTH_TYPE])
    if env.get(ENV_API_KEY):
        api.api_key_source = f"env:{ENV_API_KEY}"
    if env.get(ENV_API_USERNAME):
        api.username = env[ENV_API_USERNAME]
    if env.get(ENV_API_PASSWORD):
        api.password_source = f"env:{ENV_API_PASSWORD}"
    if env.get(ENV_LOGIN_URL):
        oauth.login_url = env[ENV_LOGIN_URL]
    if env.get(ENV_REFRESH_URL):
        oauth.refresh_url = env[ENV_REFRESH_URL]
    if env.get(ENV_OAUTH_USERNAME):
        oauth.username = env[ENV_OAUTH_USERNAME]
    if env.get(ENV_OAUTH_PASSWORD):
        oauth.password_source = f"env:{ENV_OAUTH_PASSWORD}"

    if cli_endpoint is not None:
        api.endpoint = cli_endpoint
    if cli_timeout is not None:
        api.timeout = cli_timeout
    if cli_auth_type is not None:
        api.auth_type = parse_auth_type(cli_auth_type)
    if cli_format is not None:
        settings.output.format = cli_format

    return settings


def _parse_timeout(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer number of seconds, got: {value}") from None


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts the user interactively (requires a TTY)

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
        return getpass.getpass("Enter credential: ")

    raise ConfigError(f"Unknown credential source format: {source}")


def _optional_credential(source: Optional[str]) -> str:
    return resolve_credential(source) if source else ""


# --- Core configuration ---


def default_credential_config() -> CredentialConfig:
    """A credential configuration pointing at the CEISA gateway, without an account."""
    return CredentialConfig(login_url=DEFAULT_LOGIN_URL, refresh_url=DEFAULT_REFRESH_URL)


def build_credential_config(settings: Settings) -> CredentialConfig:
    """Build the OAuth2 :class:`~ceisa_bridge.models.CredentialConfig` from settings.

    Empty URLs fall back to :data:`DEFAULT_LOGIN_URL` and
    :data:`DEFAULT_REFRESH_URL`.

    Raises:
        ConfigError: If the password source cannot be resolved.
    """
    oauth = settings.oauth
    return CredentialConfig(
        login_url=oauth.login_url or DEFAULT_LOGIN_URL,
        refresh_url=oauth.refresh_url or DEFAULT_REFRESH_URL,
        username=oauth.username,
        password=_optional_credential(oauth.password_source),
    )


def build_api_config(settings: Settings) -> ApiConfig:
    """Build the submission :class:`~ceisa_bridge.models.ApiConfig` from settings.

    Only the secrets the selected strategy needs are resolved, so an unset
    ``env:`` source for an unused credential is not an error.

    Raises:
        ConfigError: If a needed credential source cannot be resolved.
    """
    api = settings.api
    auth_type = api.auth_type

    if auth_type == AuthType.NONE:
        auth = NoAuth()
    elif auth_type == AuthType.API_KEY:
        auth = ApiKeyAuth(
            api_key=_optional_credential(api.api_key_source),
            header=api.api_key_header,
        )
    elif auth_type == AuthType.BASIC:
        auth = BasicAuth(
            username=api.username,
            password=_optional_credential(api.password_source),
        )
    elif auth_type == AuthType.OAUTH2:
        auth = OAuth2Auth(credentials=build_credential_config(settings))
    else:
        auth = LegacyAuth(
            api_key=_optional_credential(api.api_key_source),
            header=api.api_key_header,
            username=api.username,
            password=_optional_credential(api.password_source),
        )

    return ApiConfig(endpoint=api.endpoint, timeout=api.timeout, auth=auth)
