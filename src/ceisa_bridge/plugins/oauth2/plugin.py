"""OAuth2 bearer auth plugin.

The bearer token comes from a shared
:class:`~ceisa_bridge.auth.supervisor.TokenSupervisor`, which refreshes it
when it is about to expire. The plugin never logs in by itself: the caller
does that once with :meth:`~ceisa_bridge.auth.supervisor.TokenSupervisor.login`.

If the token cannot be obtained the error propagates and the submission is
aborted; it is never retried without credentials.
"""

from __future__ import annotations

import logging

from ceisa_bridge.auth.base import AuthPlugin, AuthResult
from ceisa_bridge.auth.supervisor import TokenSupervisor
from ceisa_bridge.models import AuthType, OAuth2Auth

logger = logging.getLogger(__name__)


class OAuth2AuthPlugin(AuthPlugin):
    """Authenticate with ``Authorization: Bearer <token>``.

    Args:
        supervisor: Source of valid access tokens.
    """

    def __init__(self, supervisor: TokenSupervisor) -> None:
        self._supervisor = supervisor

    @property
    def auth_type(self) -> AuthType:
        return AuthType.OAUTH2

    @property
    def supervisor(self) -> TokenSupervisor:
        return self._supervisor

    def authenticate(self, strategy: OAuth2Auth) -> AuthResult:
        """Install the strategy's credentials, if any, then fetch a valid token.

        Raises:
            AuthError: If no token is cached or the refresh fails.
            ConfigError: If a refresh is due and the configuration is unusable.
        """
        if strategy.credentials is not None:
            self._supervisor.set_config(strategy.credentials)
        token = self._supervisor.get_valid_token()
        logger.debug("Attaching OAuth 2.0 bearer token")
        return AuthResult(headers={"Authorization": f"Bearer {token}"})

    def validate_config(self, strategy: OAuth2Auth) -> list[str]:
        config = strategy.credentials or self._supervisor.get_config()
        if config is None:
            return ["OAuth 2.0 configuration not set"]
        return [f"OAuth 2.0 configuration is missing '{name}'" for name in config.missing_fields()]
