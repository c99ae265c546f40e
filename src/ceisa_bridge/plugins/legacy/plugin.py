"""Legacy auth plugin.

Configurations written before the auth type was selectable carry an API key,
a username and password, or both. This strategy attaches whatever is there:
the key header when a key is set, and a Basic header when both username and
password are set. With neither, the request goes out unauthenticated.
"""

from __future__ import annotations

from ceisa_bridge.auth.base import AuthPlugin, AuthResult
from ceisa_bridge.models import AuthType, LegacyAuth
from ceisa_bridge.plugins.api_key import api_key_headers
from ceisa_bridge.plugins.basic import basic_auth_headers


class LegacyAuthPlugin(AuthPlugin):
    """Attach an API key header and/or Basic credentials."""

    @property
    def auth_type(self) -> AuthType:
        return AuthType.LEGACY

    def authenticate(self, strategy: LegacyAuth) -> AuthResult:
        headers = api_key_headers(strategy.api_key, strategy.header)
        headers.update(basic_auth_headers(strategy.username, strategy.password))
        return AuthResult(headers=headers)

    def validate_config(self, strategy: LegacyAuth) -> list[str]:
        errors: list[str] = []
        if bool(strategy.username) != bool(strategy.password):
            errors.append(
                "Basic credentials need both a username and a password; "
                "neither will be sent"
            )
        if strategy.api_key and not strategy.api_key.isascii():
            errors.append("API key must contain only ASCII characters")
        return errors
