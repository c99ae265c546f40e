"""HTTP Basic authentication plugin.

``username:password`` is Base64-encoded and sent as
``Authorization: Basic <encoded>``. Nothing is attached unless both parts
are present.
"""

from __future__ import annotations

import base64

from ceisa_bridge.auth.base import AuthPlugin, AuthResult
from ceisa_bridge.models import AuthType, BasicAuth


def basic_auth_headers(username: str, password: str) -> dict[str, str]:
    """Return the Basic ``Authorization`` header, or nothing if either part is empty."""
    if not username or not password:
        return {}
    raw = f"{username}:{password}"
    encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {encoded}"}


class BasicAuthPlugin(AuthPlugin):
    """Authenticate via HTTP Basic authentication."""

    @property
    def auth_type(self) -> AuthType:
        return AuthType.BASIC

    def authenticate(self, strategy: BasicAuth) -> AuthResult:
        """Return the Basic header when both username and password are set."""
        return AuthResult(headers=basic_auth_headers(strategy.username, strategy.password))

    def validate_config(self, strategy: BasicAuth) -> list[str]:
        errors: list[str] = []
        if not strategy.username:
            errors.append("Basic auth requires a username")
        if not strategy.password:
            errors.append("Basic auth requires a password")
        return errors
