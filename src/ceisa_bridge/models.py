"""Canonical Pydantic models shared across all ceisa_bridge modules.

The models fall into three groups:

**Core models** -- the authenticated-dispatch subsystem:
    :class:`CredentialConfig`, :class:`TokenRecord`, :class:`TokenStatus`,
    the auth strategy variants (:class:`NoAuth`, :class:`ApiKeyAuth`,
    :class:`BasicAuth`, :class:`OAuth2Auth`, :class:`LegacyAuth`),
    :class:`ApiConfig`, :class:`OutboundRequest`, :class:`AuthOutcome` and
    :class:`ProbeResult`.

**Wire models** -- the login/refresh exchange:
    :class:`LoginRequest`, :class:`TokenItem` and :class:`TokenResponse`.

**Settings models** -- serialised as JSON in the user's config directory:
    :class:`ApiSettings`, :class:`OAuthSettings`, :class:`OutputConfig` and
    :class:`Settings`.

Records that must never be half-updated (:class:`CredentialConfig`,
:class:`TokenRecord`) are frozen; a change always produces a new instance.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


# --- Credentials and tokens ---


class CredentialConfig(BaseModel):
    """Endpoints and account used for the OAuth2 login/refresh exchanges.

    Immutable; replacing the configuration means installing a new instance
    on the :class:`~ceisa_bridge.auth.supervisor.TokenSupervisor`. A cached
    token obtained under a previous configuration stays in place.
    """

    model_config = ConfigDict(frozen=True)

    login_url: str = Field(default="", description="Login (token) endpoint")
    refresh_url: str = Field(default="", description="Refresh endpoint")
    username: str = ""
    password: str = Field(default="", repr=False)

    def missing_fields(self) -> list[str]:
        """Return the names of empty fields, in validation order."""
        return [
            name
            for name in ("login_url", "refresh_url", "username", "password")
            if not getattr(self, name)
        ]


class TokenRecord(BaseModel):
    """A bearer credential together with its refresh token and absolute expiry."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(repr=False)
    refresh_token: str = Field(default="", repr=False)
    token_type: str = "Bearer"
    scope: str = ""
    expires_at: datetime


class TokenStatus(BaseModel):
    """Displayable token state. Never carries the tokens themselves."""

    has_token: bool = False
    is_valid: bool = False
    expires_at: Optional[datetime] = None
    seconds_remaining: int = 0
    token_type: Optional[str] = None
    scope: Optional[str] = None


# --- Wire models for the login/refresh exchange ---


class LoginRequest(BaseModel):
    """JSON body of the login exchange."""

    username: str
    password: str


class TokenItem(BaseModel):
    """The ``item`` object of a login/refresh response."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = ""
    refresh_token: str = ""
    token_type: str = "Bearer"
    scope: str = ""
    expires_in: int = 0


class TokenResponse(BaseModel):
    """Envelope returned by both the login and the refresh endpoints."""

    model_config = ConfigDict(extra="ignore")

    status: str = ""
    message: str = ""
    item: TokenItem = Field(default_factory=TokenItem)


# --- Auth strategies ---


class AuthType(str, enum.Enum):
    """Tag values selecting how an outbound submission is authenticated."""

    NONE = "none"
    API_KEY = "api_key"
    BASIC = "basic"
    OAUTH2 = "oauth2"
    LEGACY = "legacy"


def parse_auth_type(value: Any) -> AuthType:
    """Map *value* to an :class:`AuthType`, case-insensitively.

    Anything unrecognised selects :attr:`AuthType.LEGACY`, with a warning
    when a non-empty value was given.
    """
    if isinstance(value, AuthType):
        return value
    text = str(value or "").strip().lower()
    try:
        return AuthType(text)
    except ValueError:
        if text:
            logger.warning("Unknown auth type '%s', using legacy", value)
        return AuthType.LEGACY


class NoAuth(BaseModel):
    """Send the submission without credentials."""

    type: Literal["none"] = "none"


class ApiKeyAuth(BaseModel):
    """Static API key sent in a request header."""

    type: Literal["api_key"] = "api_key"
    api_key: str = Field(default="", repr=False)
    header: str = "X-API-Key"


class BasicAuth(BaseModel):
    """HTTP Basic authentication."""

    type: Literal["basic"] = "basic"
    username: str = ""
    password: str = Field(default="", repr=False)


class OAuth2Auth(BaseModel):
    """Bearer token managed by the token supervisor.

    When ``credentials`` is set it replaces the supervisor's configuration
    before the token is looked up.
    """

    type: Literal["oauth2"] = "oauth2"
    credentials: Optional[CredentialConfig] = None


class LegacyAuth(BaseModel):
    """API key header and/or Basic credentials, whichever are present."""

    type: Literal["legacy"] = "legacy"
    api_key: str = Field(default="", repr=False)
    header: str = "X-API-Key"
    username: str = ""
    password: str = Field(default="", repr=False)


AuthStrategy = Annotated[
    Union[NoAuth, ApiKeyAuth, BasicAuth, OAuth2Auth, LegacyAuth],
    Field(discriminator="type"),
]

_FLAT_KEYS = ("api_key", "username", "password", "auth_type", "oauth2_config")


class ApiConfig(BaseModel):
    """Where and how a document is submitted.

    Besides the nested form (``{"endpoint": ..., "auth": {"type": ...}}``)
    the flat form used by older configuration files is accepted::

        {"endpoint": "...", "api_key": "...", "username": "...",
         "password": "...", "timeout": 30, "auth_type": "oauth2",
         "oauth2_config": {"token_url": "...", "refresh_url": "...",
                           "username": "...", "password": "..."}}

    An absent or unrecognised auth type selects :class:`LegacyAuth`.
    """

    endpoint: str = ""
    timeout: int = Field(default=30, description="Request timeout in seconds")
    auth: AuthStrategy = Field(default_factory=LegacyAuth)

    @model_validator(mode="before")
    @classmethod
    def _coerce_auth(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        auth = data.get("auth")
        if auth is None and any(key in data for key in _FLAT_KEYS):
            data["auth"] = _flat_to_strategy(data)
        elif isinstance(auth, dict):
            data["auth"] = {**auth, "type": parse_auth_type(auth.get("type")).value}
        for key in _FLAT_KEYS:
            data.pop(key, None)
        return data


def _flat_to_strategy(data: dict[str, Any]) -> dict[str, Any]:
    """Translate the flat configuration keys into a strategy mapping."""
    auth_type = parse_auth_type(data.get("auth_type"))
    api_key = data.get("api_key") or ""
    username = data.get("username") or ""
    password = data.get("password") or ""

    if auth_type == AuthType.NONE.value:
        return {"type": "none"}
    if auth_type == AuthType.API_KEY.value:
        return {"type": "api_key", "api_key": api_key}
    if auth_type == AuthType.BASIC.value:
        return {"type": "basic", "username": username, "password": password}
    if auth_type == AuthType.OAUTH2.value:
        oauth = data.get("oauth2_config")
        if not isinstance(oauth, dict):
            return {"type": "oauth2"}
        return {
            "type": "oauth2",
            "credentials": {
                "login_url": oauth.get("login_url") or oauth.get("token_url") or "",
                "refresh_url": oauth.get("refresh_url") or "",
                "username": oauth.get("username") or "",
                "password": oauth.get("password") or "",
            },
        }
    return {
        "type": "legacy",
        "api_key": api_key,
        "username": username,
        "password": password,
    }


# --- Outbound submission ---


class OutboundRequest(BaseModel):
    """A request skeleton that auth plugins decorate before it is sent."""

    method: str = "POST"
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    json_body: Any = None
    timeout: int = 30


class AuthOutcome(BaseModel):
    """Result of a submission; the same shape for success, failure and dry run."""

    success: bool
    status_code: int
    body: dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None


class ProbeResult(BaseModel):
    """Outcome of a connectivity probe. Unreachable is an outcome, not an error."""

    endpoint: str
    reachable: bool
    message: str
    status_code: Optional[int] = None


# --- Settings ---


class ApiSettings(BaseModel):
    """Persisted submission settings.

    Secrets are never stored directly; ``*_source`` fields hold credential
    source descriptors (``env:VAR``, ``file:/path`` or ``prompt``) resolved by
    :func:`~ceisa_bridge.config.resolve_credential`.
    """

    endpoint: str = ""
    timeout: int = Field(default=30, description="Request timeout in seconds")
    auth_type: AuthType = AuthType.LEGACY
    api_key_header: str = "X-API-Key"
    api_key_source: Optional[str] = None
    username: str = ""
    password_source: Optional[str] = None

    @field_validator("auth_type", mode="before")
    @classmethod
    def _unknown_auth_type_is_legacy(cls, value: Any) -> AuthType:
        return parse_auth_type(value)


class OAuthSettings(BaseModel):
    """Persisted OAuth2 login settings. Empty URLs fall back to the CEISA gateway."""

    login_url: str = ""
    refresh_url: str = ""
    username: str = ""
    password_source: Optional[str] = None
    timeout: int = Field(default=30, description="Login/refresh timeout in seconds")


class OutputConfig(BaseModel):
    """Default output format preference."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class Settings(BaseModel):
    """User-wide settings persisted at ``~/.config/ceisa-bridge/config.json``.

    Loaded with :func:`~ceisa_bridge.config.load_settings`; environment
    variables and CLI flags take precedence, see
    :func:`~ceisa_bridge.config.resolve_settings`.
    """

    api: ApiSettings = Field(default_factory=ApiSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)
