"""API key auth plugin -- a static key in a request header.

An empty key attaches nothing; the submission then goes out
unauthenticated and the downstream API decides what to do with it.
"""

from __future__ import annotations

from ceisa_bridge.auth.base import AuthPlugin, AuthResult
from ceisa_bridge.models import ApiKeyAuth, AuthType

DEFAULT_HEADER = "X-API-Key"


def api_key_headers(api_key: str, header: str = DEFAULT_HEADER) -> dict[str, str]:
    """Return ``{header: api_key}``, or an empty mapping when the key is empty."""
    if not api_key:
        return {}
    return {header or DEFAULT_HEADER: api_key}


class APIKeyAuthPlugin(AuthPlugin):
    """Authenticate with a static API key sent in ``strategy.header``."""

    @property
    def auth_type(self) -> AuthType:
        return AuthType.API_KEY

    def authenticate(self, strategy: ApiKeyAuth) -> AuthResult:
        """Return the key header when a key is configured.

        Args:
            strategy: Carries ``api_key`` and the ``header`` name.

        Returns:
            An :class:`~ceisa_bridge.auth.base.AuthResult` with the key
            header, or an empty one when ``api_key`` is empty.
        """
        return AuthResult(headers=api_key_headers(strategy.api_key, strategy.header))

    def validate_config(self, strategy: ApiKeyAuth) -> list[str]:
        errors: list[str] = []
        if not strategy.api_key:
            errors.append("API key auth has no key; the request will be sent without one")
        elif not strategy.api_key.isascii():
            errors.append("API key must contain only ASCII characters")
        if not strategy.header:
            errors.append("API key auth requires a header name")
        elif not strategy.header.isascii():
            errors.append("API key header name must contain only ASCII characters")
        return errors
