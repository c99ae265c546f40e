"""Plugin for the ``none`` strategy: the request goes out as built."""

from __future__ import annotations

from ceisa_bridge.auth.base import AuthPlugin, AuthResult
from ceisa_bridge.models import AuthType, NoAuth


class NoAuthPlugin(AuthPlugin):
    """Attach no credentials."""

    @property
    def auth_type(self) -> AuthType:
        return AuthType.NONE

    def authenticate(self, strategy: NoAuth) -> AuthResult:
        return AuthResult()
